"""Enumerations for the ticket decoding system."""

from enum import Enum


class SaleKind(str, Enum):
    """Where a sale happened."""
    ONLINE = "online"      # Web checkout, fee applied on top of the price
    OFFLINE = "offline"    # Physical point of sale


class CandidateKind(str, Enum):
    """
    Outcome of pricing enumeration for a single amount.

    PRECISE: Exactly one way to reach the amount
    AMBIGUOUS: Two or more structurally distinct ways
    NO_MATCH: No combination of batches reaches the amount
    """
    PRECISE = "precise"
    AMBIGUOUS = "ambiguous"
    NO_MATCH = "no_match"


class AuditAction(str, Enum):
    """Type of audit action."""
    SALES_INGESTED = "sales_ingested"
    PARSE_FAILED = "parse_failed"
    AMBIGUITY_NARROWED = "ambiguity_narrowed"
    AMBIGUITY_RESOLVED = "ambiguity_resolved"
    RESOLUTION_PASS_COMPLETED = "resolution_pass_completed"
    RESOLUTION_COMPLETED = "resolution_completed"


class AmbiguitySolver(str, Enum):
    """
    Strategy used to collapse ambiguous pricing candidates.

    NONE: Leave ambiguities alone
    TEMPORAL: Look behind in time, across every seller
    SELLER: Look behind in time, per selling point (batch changes are
        asynchronous between sellers)
    """
    NONE = "none"
    TEMPORAL = "temporal"
    SELLER = "seller"

    @classmethod
    def default(cls) -> "AmbiguitySolver":
        """The best solver currently available."""
        return cls.SELLER

    @property
    def label(self) -> str:
        return {
            AmbiguitySolver.NONE: "do nothing",
            AmbiguitySolver.TEMPORAL: "look behind",
            AmbiguitySolver.SELLER: "look behind, same selling point",
        }[self]

    def apply(self, ledger) -> int:
        """Run one pass of this solver over a ledger, returning the changes made."""
        from ..reconciliation.resolvers import SOLVER_PASSES

        return SOLVER_PASSES[self](ledger)
