"""Decoding engine components."""

from .enumerator import enumerate_matches
from .cache import PricingCandidateCache
from .ledger import AnnotatedSale, SalesLedger
from .resolvers import (
    do_nothing,
    seller_lookbehind,
    solve_ambiguities,
    temporal_lookbehind,
)
from .orchestrator import DecodingOrchestrator, DecodingResult, DecodingSummary

__all__ = [
    "enumerate_matches",
    "PricingCandidateCache",
    "AnnotatedSale",
    "SalesLedger",
    "do_nothing",
    "seller_lookbehind",
    "solve_ambiguities",
    "temporal_lookbehind",
    "DecodingOrchestrator",
    "DecodingResult",
    "DecodingSummary",
]
