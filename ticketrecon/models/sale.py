"""Sale records as they come out of the CSV export."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from .enums import SaleKind


@dataclass(frozen=True)
class SaleChannel:
    """
    How a sale was made.

    Online sales carry a fee expressed as the rational numerator/denominator:
    the buyer pays original * numerator / denominator.
    """
    kind: SaleKind = SaleKind.OFFLINE
    fee_numerator: int = 1
    fee_denominator: int = 1

    @classmethod
    def online(cls, fee_numerator: int, fee_denominator: int) -> "SaleChannel":
        return cls(SaleKind.ONLINE, fee_numerator, fee_denominator)

    @classmethod
    def offline(cls) -> "SaleChannel":
        return cls(SaleKind.OFFLINE)

    @property
    def is_online(self) -> bool:
        return self.kind == SaleKind.ONLINE

    def apply_fee(self, cents: int) -> int:
        """Apply the online fee if online."""
        if self.is_online:
            return cents * self.fee_numerator // self.fee_denominator
        return cents

    def undo_fee(self, cents: int) -> int:
        """Undo the online fee if online."""
        if self.is_online:
            return cents * self.fee_denominator // self.fee_numerator
        return cents


@dataclass(frozen=True)
class Seller:
    """Selling-point identity. All online sales share one identity."""
    kind: SaleKind
    name: Optional[str] = None

    def __str__(self) -> str:
        if self.kind == SaleKind.ONLINE:
            return "online"
        return self.name or ""


ONLINE_SELLER = Seller(SaleKind.ONLINE)


@dataclass(frozen=True)
class Sale:
    """
    A single ticket sale, as validated from one CSV row.
    The paid amount is stored in CENTS, with the online fee still applied.
    """
    when: datetime
    value_cents: int
    channel: SaleChannel = SaleChannel()
    buyer_email: Optional[str] = None
    buyer_username: Optional[str] = None
    seller_name: Optional[str] = None
    seller_id: Optional[str] = None
    seller_email: Optional[str] = None
    token: str = ""
    sale_id: str = ""
    card_name: Optional[str] = None
    card_prefix: Optional[str] = None
    card_suffix: Optional[str] = None
    raw_kind: str = ""
    source_row: Optional[int] = None

    def real_price(self) -> int:
        """The price before fees, in cents."""
        return self.channel.undo_fee(self.value_cents)

    def seller(self) -> Optional[Seller]:
        """Infer the seller, if at all possible."""
        if self.channel.is_online:
            return ONLINE_SELLER
        if self.seller_name:
            return Seller(SaleKind.OFFLINE, self.seller_name)
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "when": self.when.isoformat(),
            "value_cents": self.value_cents,
            "real_price_cents": self.real_price(),
            "kind": self.channel.kind.value,
            "buyer_email": self.buyer_email,
            "buyer_username": self.buyer_username,
            "seller_name": self.seller_name,
            "seller_id": self.seller_id,
            "seller_email": self.seller_email,
            "token": self.token,
            "sale_id": self.sale_id,
            "card_name": self.card_name,
            "card_prefix": self.card_prefix,
            "card_suffix": self.card_suffix,
        }
