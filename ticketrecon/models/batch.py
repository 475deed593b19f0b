"""Ticket batches and the pricing schedule they belong to."""

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Tuple


@dataclass(frozen=True, order=True)
class BatchNum:
    """
    Position of a batch in the sale progression.

    Index 0 is the promotional batch, index n >= 1 is the n-th numbered
    batch. Ordering follows the index, so the promotional batch always
    sorts before every numbered one.
    """
    index: int

    def __post_init__(self):
        if self.index < 0:
            raise ValueError(f"Batch index must be non-negative, got {self.index}")

    @classmethod
    def promotional(cls) -> "BatchNum":
        return cls(0)

    @classmethod
    def numbered(cls, n: int) -> "BatchNum":
        if n < 1:
            raise ValueError(f"Numbered batches start at 1, got {n}")
        return cls(n)

    @property
    def is_promotional(self) -> bool:
        return self.index == 0

    def next(self) -> "BatchNum":
        """The batch sold right after this one."""
        return BatchNum(self.index + 1)

    def __str__(self) -> str:
        if self.is_promotional:
            return "promotional batch"
        return f"batch {self.index}"


@dataclass(frozen=True, order=True)
class Batch:
    """A single ticket batch. Price is in CENTS."""
    num: BatchNum
    price: int

    def __post_init__(self):
        if self.price < 0:
            raise ValueError(f"Batch price must be non-negative, got {self.price}")

    def __str__(self) -> str:
        return str(self.num)


@dataclass(frozen=True)
class BatchAmount:
    """Some tickets of a single batch."""
    batch: Batch
    quantity: int

    def __post_init__(self):
        if self.quantity < 1:
            raise ValueError(f"Quantity must be at least 1, got {self.quantity}")

    def price(self) -> int:
        return self.batch.price * self.quantity

    def __str__(self) -> str:
        return f"{self.quantity} x {self.batch.num}"


class BatchCatalog:
    """
    The pricing schedule: BatchNum -> price in cents.

    Built once from the operator's price list and read-only afterwards.
    Entry 0 of the list is the promotional batch, the following entries
    are batch 1, batch 2 and so on.
    """

    def __init__(self, prices: Dict[BatchNum, int]):
        self._batches: Dict[BatchNum, Batch] = {
            num: Batch(num=num, price=price)
            for num, price in sorted(prices.items())
        }

    @classmethod
    def from_prices(cls, prices_cents: Iterable[int]) -> "BatchCatalog":
        """Build a catalog from an ordered list of prices (in cents)."""
        return cls({BatchNum(i): price for i, price in enumerate(prices_cents)})

    def __iter__(self) -> Iterator[Batch]:
        return iter(self._batches.values())

    def __len__(self) -> int:
        return len(self._batches)

    def __contains__(self, num: BatchNum) -> bool:
        return num in self._batches

    def get(self, num: BatchNum) -> Optional[Batch]:
        return self._batches.get(num)

    def batches(self) -> List[Batch]:
        """All batches in sale order."""
        return list(self._batches.values())

    def prices(self) -> List[int]:
        return [b.price for b in self._batches.values()]

    @property
    def promotional(self) -> Optional[Batch]:
        return self._batches.get(BatchNum.promotional())

    @property
    def first_numbered(self) -> Optional[Batch]:
        return self._batches.get(BatchNum.numbered(1))

    @property
    def min_price(self) -> Optional[int]:
        if not self._batches:
            return None
        return min(b.price for b in self._batches.values())

    def adjacent_pairs(self) -> List[Tuple[Batch, Batch]]:
        """
        Consecutive numbered batches (batch n, batch n + 1).

        The promotional -> batch 1 transition is covered by promo combos,
        so it is not listed here.
        """
        pairs = []
        for batch in self._batches.values():
            if batch.num.is_promotional:
                continue
            following = self._batches.get(batch.num.next())
            if following is not None:
                pairs.append((batch, following))
        return pairs

    def __eq__(self, other) -> bool:
        if not isinstance(other, BatchCatalog):
            return NotImplemented
        return self._batches == other._batches

    def __repr__(self) -> str:
        inner = ", ".join(f"{b.num}={b.price}" for b in self._batches.values())
        return f"BatchCatalog({inner})"
