"""Memoised pricing candidates, one cache per ingestion run."""

from typing import Dict

import structlog

from ..models import PricingCandidate, SalesContext
from .enumerator import enumerate_matches

logger = structlog.get_logger()


class PricingCandidateCache:
    """
    Remembers the candidate computed for every real price seen in a run.

    Exports repeat the same few amounts thousands of times, so enumeration
    only runs once per distinct price.
    """

    def __init__(self, context: SalesContext):
        self.context = context
        self._candidates: Dict[int, PricingCandidate] = {}
        self.hits = 0
        self.misses = 0

    def get(self, price: int) -> PricingCandidate:
        """Candidate for a real price (cents), computed on first access."""
        candidate = self._candidates.get(price)
        if candidate is not None:
            self.hits += 1
            return candidate

        self.misses += 1
        candidate = PricingCandidate.from_matches(enumerate_matches(
            price,
            self.context.catalog,
            self.context.promo_limit,
        ))
        self._candidates[price] = candidate
        logger.debug(
            "Pricing candidate computed",
            price=price,
            kind=candidate.kind.value,
            matches=len(candidate),
        )
        return candidate

    def __len__(self) -> int:
        return len(self._candidates)

    def __contains__(self, price: int) -> bool:
        return price in self._candidates
