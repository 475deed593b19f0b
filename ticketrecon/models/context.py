"""Sale context that comes from outside the CSV."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from ..utils.money import to_cents
from .batch import BatchCatalog
from .enums import AmbiguitySolver
from .sale import SaleChannel


class ConfigurationError(ValueError):
    """Invalid operator configuration. Nothing can be decoded without a valid context."""


@dataclass(frozen=True)
class SalesContext:
    """
    Everything needed to derive ticket information from the CSV.
    Shared and read-only for the whole run.
    """
    online_fee: Tuple[int, int]
    catalog: BatchCatalog
    promo_limit: Optional[int] = None
    solver: AmbiguitySolver = AmbiguitySolver.SELLER

    @classmethod
    def from_config(
        cls,
        online_fee: Tuple[int, int],
        batch_prices: Iterable[Union[str, int, float, Decimal]],
        promo_limit: Optional[int] = None,
        solver: Union[AmbiguitySolver, str] = AmbiguitySolver.SELLER,
    ) -> "SalesContext":
        """
        Validate operator input and build the context.

        Args:
            online_fee: (numerator, denominator); online buyers pay
                original * numerator / denominator
            batch_prices: Prices in currency units, promotional batch first
            promo_limit: Max promotional tickets per buyer, None for no limit
            solver: Ambiguity solver to use

        Raises:
            ConfigurationError: on any invalid value
        """
        try:
            numerator, denominator = (int(x) for x in online_fee)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid online fee: {online_fee!r}") from None
        if numerator <= 0 or denominator <= 0:
            raise ConfigurationError(
                f"Online fee terms must be positive, got {numerator}/{denominator}"
            )

        prices_cents = []
        for i, price in enumerate(batch_prices):
            try:
                cents = to_cents(price)
            except ValueError:
                raise ConfigurationError(f"Invalid price for batch {i}: {price!r}") from None
            if cents < 0:
                raise ConfigurationError(f"Negative price for batch {i}: {price!r}")
            prices_cents.append(cents)
        if not prices_cents:
            raise ConfigurationError("At least one batch price is required")

        if promo_limit is not None and promo_limit < 1:
            raise ConfigurationError(f"Promo limit must be at least 1, got {promo_limit}")

        try:
            solver = AmbiguitySolver(solver)
        except ValueError:
            raise ConfigurationError(f"Unknown ambiguity solver: {solver!r}") from None

        return cls(
            online_fee=(numerator, denominator),
            catalog=BatchCatalog.from_prices(prices_cents),
            promo_limit=promo_limit,
            solver=solver,
        )

    def online_channel(self) -> SaleChannel:
        return SaleChannel.online(*self.online_fee)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "online_fee": list(self.online_fee),
            "batch_prices_cents": self.catalog.prices(),
            "promo_limit": self.promo_limit,
            "ambiguity_solver": self.solver.value,
        }
