"""
Pricing matches and candidates.

A PricingMatch is one concrete way of reaching a paid amount with the
batches of the catalog. A PricingCandidate is the full outcome of
enumeration for one amount: precise, ambiguous or no match at all.
"""

import re
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional, Tuple

from .batch import Batch, BatchAmount, BatchCatalog, BatchNum
from .enums import CandidateKind

NO_SOLUTION = "no solution"
OR_SEPARATOR = " or "
AMOUNT_SEPARATOR = " + "

_AMOUNT_PATTERN = re.compile(r"^\s*(\d+) x (promotional batch|batch (\d+))\s*$")


class PricingMatch:
    """Base for all match variants. Subclasses are frozen dataclasses."""

    def amounts(self) -> Tuple[BatchAmount, ...]:
        raise NotImplementedError

    def batch_after(self) -> Batch:
        """The batch the sale progression is known to be at after this sale."""
        raise NotImplementedError

    def price(self) -> int:
        return sum(a.price() for a in self.amounts())

    def tickets(self) -> int:
        return sum(a.quantity for a in self.amounts())

    def batches(self) -> FrozenSet[Batch]:
        return frozenset(a.batch for a in self.amounts())

    def sort_key(self) -> Tuple:
        return tuple((a.batch.num.index, a.quantity) for a in self.amounts())

    def describe(self) -> str:
        return AMOUNT_SEPARATOR.join(str(a) for a in self.amounts())

    def __str__(self) -> str:
        return self.describe()


@dataclass(frozen=True)
class Multiple(PricingMatch):
    """Some tickets of a single batch."""
    amount: BatchAmount

    def amounts(self) -> Tuple[BatchAmount, ...]:
        return (self.amount,)

    def batch_after(self) -> Batch:
        return self.amount.batch


@dataclass(frozen=True)
class PromoCombo(PricingMatch):
    """Promotional tickets bought together with batch 1 tickets."""
    promo_amount: BatchAmount
    next_amount: BatchAmount

    def __post_init__(self):
        if not self.promo_amount.batch.num.is_promotional:
            raise ValueError("PromoCombo needs the promotional batch first")
        if self.next_amount.batch.num != BatchNum.numbered(1):
            raise ValueError("Promotional tickets only combine with batch 1")

    def amounts(self) -> Tuple[BatchAmount, ...]:
        return (self.promo_amount, self.next_amount)

    def batch_after(self) -> Batch:
        return self.next_amount.batch


@dataclass(frozen=True)
class TurnOfBatch(PricingMatch):
    """A purchase straddling the transition from batch n to batch n + 1."""
    first: BatchAmount
    second: BatchAmount

    def __post_init__(self):
        if self.first.batch.num.is_promotional:
            raise ValueError("The promotional transition is a PromoCombo")
        if self.second.batch.num != self.first.batch.num.next():
            raise ValueError(
                f"{self.second.batch.num} does not follow {self.first.batch.num}"
            )

    def amounts(self) -> Tuple[BatchAmount, ...]:
        return (self.first, self.second)

    def batch_after(self) -> Batch:
        return self.second.batch


def sorted_matches(matches: Iterable[PricingMatch]) -> List[PricingMatch]:
    """Deterministic ordering for display and export."""
    return sorted(matches, key=lambda m: (len(m.amounts()), m.sort_key()))


def parse_match_description(text: str, catalog: BatchCatalog) -> PricingMatch:
    """
    Rebuild a match from its description, e.g. "2 x promotional batch + 1 x batch 1".

    Raises:
        ValueError: if the text is not a match description or references
            a batch that is not in the catalog.
    """
    amounts = []
    for part in text.split(AMOUNT_SEPARATOR.strip()):
        found = _AMOUNT_PATTERN.match(part)
        if not found:
            raise ValueError(f"Not a batch amount: {part.strip()!r}")
        quantity = int(found.group(1))
        if found.group(3) is None:
            num = BatchNum.promotional()
        else:
            num = BatchNum.numbered(int(found.group(3)))
        batch = catalog.get(num)
        if batch is None:
            raise ValueError(f"{num} is not in the catalog")
        amounts.append(BatchAmount(batch=batch, quantity=quantity))

    if len(amounts) == 1:
        return Multiple(amounts[0])
    if len(amounts) == 2:
        if amounts[0].batch.num.is_promotional:
            return PromoCombo(amounts[0], amounts[1])
        return TurnOfBatch(amounts[0], amounts[1])
    raise ValueError(f"Too many amounts in description: {text!r}")


@dataclass(frozen=True)
class PricingCandidate:
    """All matches found for one amount."""
    matches: FrozenSet[PricingMatch] = frozenset()

    @classmethod
    def from_matches(cls, matches: Iterable[PricingMatch]) -> "PricingCandidate":
        return cls(matches=frozenset(matches))

    @property
    def kind(self) -> CandidateKind:
        if not self.matches:
            return CandidateKind.NO_MATCH
        if len(self.matches) == 1:
            return CandidateKind.PRECISE
        return CandidateKind.AMBIGUOUS

    @property
    def is_precise(self) -> bool:
        return self.kind == CandidateKind.PRECISE

    @property
    def is_ambiguous(self) -> bool:
        return self.kind == CandidateKind.AMBIGUOUS

    @property
    def is_no_match(self) -> bool:
        return self.kind == CandidateKind.NO_MATCH

    @property
    def match(self) -> Optional[PricingMatch]:
        """The single match of a precise candidate."""
        if self.is_precise:
            return next(iter(self.matches))
        return None

    def describe(self) -> str:
        if self.is_no_match:
            return NO_SOLUTION
        return OR_SEPARATOR.join(m.describe() for m in sorted_matches(self.matches))

    def __len__(self) -> int:
        return len(self.matches)
