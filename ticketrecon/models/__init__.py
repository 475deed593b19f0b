"""Data models for the ticket decoding system."""

from .enums import (
    AmbiguitySolver,
    AuditAction,
    CandidateKind,
    SaleKind,
)
from .batch import (
    Batch,
    BatchAmount,
    BatchCatalog,
    BatchNum,
)
from .pricing import (
    NO_SOLUTION,
    OR_SEPARATOR,
    Multiple,
    PricingCandidate,
    PricingMatch,
    PromoCombo,
    TurnOfBatch,
    parse_match_description,
    sorted_matches,
)
from .sale import (
    ONLINE_SELLER,
    Sale,
    SaleChannel,
    Seller,
)
from .context import ConfigurationError, SalesContext
from .audit import AuditEntry

__all__ = [
    # Enums
    "AmbiguitySolver",
    "AuditAction",
    "CandidateKind",
    "SaleKind",
    # Batches
    "Batch",
    "BatchAmount",
    "BatchCatalog",
    "BatchNum",
    # Pricing
    "NO_SOLUTION",
    "OR_SEPARATOR",
    "Multiple",
    "PricingCandidate",
    "PricingMatch",
    "PromoCombo",
    "TurnOfBatch",
    "parse_match_description",
    "sorted_matches",
    # Sales
    "ONLINE_SELLER",
    "Sale",
    "SaleChannel",
    "Seller",
    # Context
    "ConfigurationError",
    "SalesContext",
    # Audit
    "AuditEntry",
]
