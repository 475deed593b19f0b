"""Ticket batch decoding for sales CSV exports."""

__version__ = "1.0.0"
