"""
Sales ledger: every sale plus what we could infer about its tickets.

The ledger keeps annotated sales sorted by time, owns the shared context
and is the only thing resolvers mutate.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

import structlog

from ..models import (
    AuditEntry,
    CandidateKind,
    PricingCandidate,
    PricingMatch,
    Sale,
    SalesContext,
)
from ..utils.money import format_cents
from .cache import PricingCandidateCache

logger = structlog.get_logger()

NA = "N/A"

EXPORT_HEADER = [
    "timestamp",
    "buyer_email",
    "buyer_username",
    "amount",
    "sale_kind",
    "seller_name",
    "seller_id",
    "seller_email",
    "token",
    "sale_id",
    "card_name",
    "card_prefix",
    "card_suffix",
    "resolved",
    "decoding",
]


@dataclass
class AnnotatedSale:
    """
    A sale plus its pricing candidate and, once settled, the chosen match.

    A precise candidate is settled on construction. Only ambiguous
    candidates can be narrowed or resolved afterwards.
    """
    sale: Sale
    candidate: PricingCandidate
    resolved: Optional[PricingMatch] = None

    def __post_init__(self):
        if self.candidate.is_precise:
            self.resolved = self.candidate.match

    @property
    def is_resolved(self) -> bool:
        return self.resolved is not None

    @property
    def is_pending(self) -> bool:
        """Ambiguous and still waiting for a decision."""
        return self.candidate.is_ambiguous and self.resolved is None

    @property
    def sale_key(self) -> str:
        return self.sale.sale_id or self.sale.token or self.sale.when.isoformat()

    def resolve(self, match: PricingMatch) -> None:
        """Settle a pending sale on one of its candidate matches."""
        if not self.is_pending:
            raise ValueError(f"Sale {self.sale_key} is not pending resolution")
        if match not in self.candidate.matches:
            raise ValueError(f"{match} is not a candidate for sale {self.sale_key}")
        self.resolved = match

    def narrow(self, matches: Iterable[PricingMatch]) -> bool:
        """
        Shrink the ambiguous set of a pending sale.

        Returns:
            True if the set actually got smaller
        """
        if not self.is_pending:
            raise ValueError(f"Sale {self.sale_key} is not pending resolution")
        narrowed = frozenset(matches)
        if not narrowed <= self.candidate.matches:
            raise ValueError(f"Narrowing would add matches to sale {self.sale_key}")
        if len(narrowed) < 2:
            raise ValueError("Narrowing must keep an ambiguous set; resolve instead")
        if narrowed == self.candidate.matches:
            return False
        self.candidate = PricingCandidate.from_matches(narrowed)
        return True

    def decoding(self) -> str:
        """Human-readable answer: the match, the alternatives, or no solution."""
        if self.resolved is not None:
            return self.resolved.describe()
        return self.candidate.describe()

    def export_row(self) -> List[str]:
        sale = self.sale
        return [
            sale.when.isoformat(),
            sale.buyer_email or NA,
            sale.buyer_username or NA,
            format_cents(sale.value_cents),
            sale.raw_kind or sale.channel.kind.value,
            sale.seller_name or NA,
            sale.seller_id or NA,
            sale.seller_email or NA,
            sale.token,
            sale.sale_id,
            sale.card_name or NA,
            sale.card_prefix or NA,
            sale.card_suffix or NA,
            "yes" if self.is_resolved else "no",
            self.decoding(),
        ]

    def to_dict(self) -> Dict:
        return {
            **self.sale.to_dict(),
            "candidate": self.candidate.kind.value,
            "candidates": len(self.candidate),
            "resolved": self.is_resolved,
            "tickets": self.resolved.tickets() if self.resolved else None,
            "decoding": self.decoding(),
        }


class SalesLedger:
    """
    Stores loads of sales, and resolves pricing ambiguities.

    Sales are kept sorted by timestamp (stable for equal timestamps).
    """

    def __init__(self, sales: Iterable[AnnotatedSale], context: SalesContext):
        self.sales: List[AnnotatedSale] = sorted(sales, key=lambda s: s.sale.when)
        self.context = context
        self.audit_log: List[AuditEntry] = []

    @classmethod
    def from_sales(
        cls,
        sales: Iterable[Sale],
        context: SalesContext,
        cache: Optional[PricingCandidateCache] = None,
    ) -> "SalesLedger":
        """
        Annotate raw sales, using a cache to save time on pricing inference.

        Args:
            sales: Validated sale records, in any order
            context: Shared pricing context
            cache: Candidate cache for this run (a new one if omitted)
        """
        if cache is None:
            cache = PricingCandidateCache(context)
        annotated = [AnnotatedSale(sale, cache.get(sale.real_price())) for sale in sales]
        ledger = cls(annotated, context)
        logger.info(
            "Ledger built",
            sales=len(ledger),
            distinct_prices=len(cache),
            cache_hits=cache.hits,
            precise=ledger.count(CandidateKind.PRECISE),
            ambiguous=ledger.count(CandidateKind.AMBIGUOUS),
            no_match=ledger.count(CandidateKind.NO_MATCH),
        )
        return ledger

    def __iter__(self) -> Iterator[AnnotatedSale]:
        return iter(self.sales)

    def __len__(self) -> int:
        return len(self.sales)

    def count(self, kind: CandidateKind) -> int:
        return sum(1 for s in self.sales if s.candidate.kind == kind)

    def ambiguous(self) -> List[AnnotatedSale]:
        """Sales whose candidate is ambiguous, settled by a resolver or not."""
        return [s for s in self.sales if s.candidate.is_ambiguous]

    def unresolved(self) -> List[AnnotatedSale]:
        """Ambiguous sales still waiting for a decision."""
        return [s for s in self.sales if s.is_pending]

    def unmatched(self) -> List[AnnotatedSale]:
        """Sales no combination of batches accounts for."""
        return [s for s in self.sales if s.candidate.is_no_match]

    def settled(self) -> List[AnnotatedSale]:
        """Sales with a known match, precise or resolved."""
        return [s for s in self.sales if s.is_resolved]

    def solve_ambiguities(self) -> Tuple[int, int]:
        """Run the context's solver to a fixpoint. Returns (passes, resolved)."""
        from .resolvers import solve_ambiguities

        return solve_ambiguities(self)

    def export_rows(self) -> List[List[str]]:
        return [s.export_row() for s in self.sales]
