"""
Pricing Candidate Enumerator - first step of the decoding pipeline.

Given the real price of a sale (fees undone), find every structurally
distinct way of reaching it with the batches of the catalog:

1. Multiples of a single batch
2. Promotional tickets combined with batch 1 tickets
3. Purchases straddling the turn from batch n to batch n + 1

All amounts are in CENTS (integers) for exact arithmetic. The search is
bounded by the worst-case quantity w = price // min_price + 1.
"""

from typing import FrozenSet, List, Optional, Set

from ..models import (
    BatchAmount,
    BatchCatalog,
    Multiple,
    PricingMatch,
    PromoCombo,
    TurnOfBatch,
)


def quantity_bound(price: int, catalog: BatchCatalog) -> int:
    """Worst-case number of tickets of any single batch in one sale."""
    positive = [p for p in catalog.prices() if p > 0]
    if not positive:
        return 1
    return price // min(positive) + 1


def _quantities_for(remaining: int, unit_price: int, bound: int) -> List[int]:
    """Quantities q in [1, bound] with unit_price * q == remaining."""
    if remaining < 0:
        return []
    if unit_price == 0:
        return list(range(1, bound + 1)) if remaining == 0 else []
    if remaining == 0 or remaining % unit_price:
        return []
    q = remaining // unit_price
    return [q] if q <= bound else []


def enumerate_matches(
    price: int,
    catalog: BatchCatalog,
    promo_limit: Optional[int] = None,
) -> FrozenSet[PricingMatch]:
    """
    Find all pricing matches for a price.

    Args:
        price: Real price in cents
        catalog: Batch prices
        promo_limit: Max promotional tickets per buyer (None = search bound)

    Returns:
        Deduplicated set of matches; every match prices exactly to `price`
    """
    if not catalog:
        return frozenset()

    bound = quantity_bound(price, catalog)
    matches: Set[PricingMatch] = set()

    # Multiples of one batch
    for batch in catalog:
        for quantity in _quantities_for(price, batch.price, bound):
            matches.add(Multiple(BatchAmount(batch, quantity)))

    # Promos with batch 1
    promo = catalog.promotional
    first = catalog.first_numbered
    if promo is not None and first is not None:
        promo_max = promo_limit if promo_limit is not None else bound
        for promo_qty in range(1, promo_max + 1):
            remaining = price - promo.price * promo_qty
            if remaining < 0:
                break
            for next_qty in _quantities_for(remaining, first.price, bound):
                matches.add(PromoCombo(
                    BatchAmount(promo, promo_qty),
                    BatchAmount(first, next_qty),
                ))

    # Turn of batch
    for current, following in catalog.adjacent_pairs():
        for first_qty in range(1, bound + 1):
            remaining = price - current.price * first_qty
            if remaining < 0:
                break
            for second_qty in _quantities_for(remaining, following.price, bound):
                matches.add(TurnOfBatch(
                    BatchAmount(current, first_qty),
                    BatchAmount(following, second_qty),
                ))

    return frozenset(matches)
