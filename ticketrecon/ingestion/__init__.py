"""Ingestion module for the sales CSV export."""

from .csv_parser import ParseResult, SalesCSVParser

__all__ = ["ParseResult", "SalesCSVParser"]
