"""
Ambiguity resolvers and the fixpoint driver.

Each resolver is one left-to-right pass over the time-sorted ledger that
relies on batches being sold in order:

- TEMPORAL: the last settled sale tells which batch is on sale now
- SELLER: same idea, but every selling point (online, or each named point
  of sale) moves through the batches at its own pace

A pass returns how many sales it settled. Narrowing an ambiguous set
without settling it does not count as a change. When the assumption finds
nothing compatible the sale is left as it was.
"""

from typing import Callable, Dict, FrozenSet, List, Optional, Set, Tuple

import structlog

from ..models import (
    AmbiguitySolver,
    AuditAction,
    AuditEntry,
    Batch,
    PricingMatch,
    Seller,
)
from .ledger import AnnotatedSale, SalesLedger

logger = structlog.get_logger()


def _settle(
    ledger: SalesLedger,
    sp: AnnotatedSale,
    match: PricingMatch,
    solver: AmbiguitySolver,
    reason: str,
) -> None:
    sp.resolve(match)
    ledger.audit_log.append(AuditEntry(
        action=AuditAction.AMBIGUITY_RESOLVED,
        sale_ids=[sp.sale_key],
        solver=solver.value,
        message=f"Resolved to {match.describe()}",
        details={"reason": reason, "price_cents": sp.sale.real_price()},
    ))


def _narrow(
    ledger: SalesLedger,
    sp: AnnotatedSale,
    matches: FrozenSet[PricingMatch],
    solver: AmbiguitySolver,
) -> None:
    before = len(sp.candidate)
    if sp.narrow(matches):
        ledger.audit_log.append(AuditEntry(
            action=AuditAction.AMBIGUITY_NARROWED,
            sale_ids=[sp.sale_key],
            solver=solver.value,
            message=f"Narrowed from {before} to {len(matches)} candidates",
            details={"remaining": [m.describe() for m in matches]},
        ))


def do_nothing(ledger: SalesLedger) -> int:
    """Disabled solver."""
    return 0


def temporal_lookbehind(ledger: SalesLedger) -> int:
    """
    Resolve ambiguities with the batch of the latest settled sale.

    The batch on sale right after a settled sale is its batch_after();
    an ambiguous sale that comes later should end on that same batch.
    """
    current: Optional[Batch] = None
    changes = 0

    for sp in ledger.sales:
        if sp.is_resolved:
            # we're now sure of the batch
            current = sp.resolved.batch_after()
            continue
        if current is None or not sp.candidate.is_ambiguous:
            continue

        compatible = frozenset(
            m for m in sp.candidate.matches if m.batch_after() == current
        )
        if not compatible:
            continue
        if len(compatible) == 1:
            _settle(ledger, sp, next(iter(compatible)), AmbiguitySolver.TEMPORAL,
                    f"matches current {current.num}")
            changes += 1
        else:
            _narrow(ledger, sp, compatible, AmbiguitySolver.TEMPORAL)

    logger.debug("Temporal lookbehind pass", resolved=changes)
    return changes


def _group_by_seller(ledger: SalesLedger) -> Dict[Seller, List[AnnotatedSale]]:
    """Sales per selling point, in ledger order. Nameless offline sales are skipped."""
    groups: Dict[Seller, List[AnnotatedSale]] = {}
    for sp in ledger.sales:
        seller = sp.sale.seller()
        if seller is not None:
            groups.setdefault(seller, []).append(sp)
    return groups


def seller_lookbehind(ledger: SalesLedger) -> int:
    """
    Resolve ambiguities from each selling point's own history.

    For every seller keep the batches of all its settled sales so far, and
    those of its latest settled sale. An ambiguous sale keeps only the
    matches sharing a batch with that history; among several survivors,
    the single one introducing no batch beyond the latest settled sale wins.
    """
    changes = 0

    for seller, sales in _group_by_seller(ledger).items():
        seen: Set[Batch] = set()
        latest: FrozenSet[Batch] = frozenset()

        for sp in sales:
            if sp.is_resolved:
                seen |= sp.resolved.batches()
                latest = sp.resolved.batches()
                continue
            if not sp.candidate.is_ambiguous:
                continue

            continuing = frozenset(
                m for m in sp.candidate.matches if m.batches() & seen
            )
            if not continuing:
                continue

            if len(continuing) == 1:
                chosen = next(iter(continuing))
                reason = f"only candidate continuing {seller} history"
            else:
                staying = [m for m in continuing if m.batches() <= latest]
                chosen = staying[0] if len(staying) == 1 else None
                reason = f"no new batch for {seller}"

            if chosen is not None:
                _settle(ledger, sp, chosen, AmbiguitySolver.SELLER, reason)
                seen |= chosen.batches()
                latest = chosen.batches()
                changes += 1
            else:
                _narrow(ledger, sp, continuing, AmbiguitySolver.SELLER)

    logger.debug("Seller lookbehind pass", resolved=changes)
    return changes


SOLVER_PASSES: Dict[AmbiguitySolver, Callable[[SalesLedger], int]] = {
    AmbiguitySolver.NONE: do_nothing,
    AmbiguitySolver.TEMPORAL: temporal_lookbehind,
    AmbiguitySolver.SELLER: seller_lookbehind,
}


def solve_ambiguities(
    ledger: SalesLedger,
    solver: Optional[AmbiguitySolver] = None,
) -> Tuple[int, int]:
    """
    Run a solver until a pass changes nothing.

    Every productive pass settles at least one sale, so there are at most
    as many productive passes as sales.

    Args:
        ledger: Ledger to resolve in place
        solver: Solver to use (defaults to the ledger context's)

    Returns:
        Tuple of (passes, total resolved)
    """
    solver = solver or ledger.context.solver
    passes = 0
    total = 0

    logger.info(
        "Solving ambiguities",
        solver=solver.value,
        pending=len(ledger.unresolved()),
    )

    while True:
        changes = solver.apply(ledger)
        passes += 1
        ledger.audit_log.append(AuditEntry(
            action=AuditAction.RESOLUTION_PASS_COMPLETED,
            solver=solver.value,
            pass_number=passes,
            message=f"Pass {passes} resolved {changes} sales",
            details={"resolved": changes},
        ))
        if changes == 0:
            break
        total += changes

    ledger.audit_log.append(AuditEntry(
        action=AuditAction.RESOLUTION_COMPLETED,
        solver=solver.value,
        pass_number=passes,
        message=f"Resolved {total} sales in {passes} passes",
        details={"resolved": total, "still_ambiguous": len(ledger.unresolved())},
    ))
    logger.info(
        "Ambiguities solved",
        solver=solver.value,
        passes=passes,
        resolved=total,
        still_ambiguous=len(ledger.unresolved()),
    )
    return passes, total
