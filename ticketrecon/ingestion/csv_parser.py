"""
Sales CSV parser.

Turns the ticketing platform's CSV export into validated Sale records.
Bad rows are collected as errors and skipped; they never stop the run.
"""

import csv
import io
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

import structlog

from ..models import Sale, SaleChannel, SalesContext
from ..utils.money import to_cents

logger = structlog.get_logger()

RECORD_LEN = 13
NA = "N/A"


@dataclass
class ParseResult:
    """Result of parsing a sales CSV."""
    sales: List[Sale] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    total_rows: int = 0

    @property
    def failed_rows(self) -> int:
        return len(self.errors)


def field_or_na(value: Optional[str]) -> Optional[str]:
    """Blank and N/A cells mean the value is absent."""
    if value is None:
        return None
    value = value.strip()
    if not value or value == NA:
        return None
    return value


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 date-time with an offset.

    Raises:
        ValueError: if the text is not a date-time or has no offset
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    when = datetime.fromisoformat(text)
    if when.tzinfo is None:
        raise ValueError(f"timestamp has no UTC offset: {value!r}")
    return when


class SalesCSVParser:
    """
    Parser for the sales CSV export.

    Expected columns, in order: timestamp, buyer email, buyer username,
    amount, sale kind, seller name, seller id, seller email, token, sale id,
    card name, card prefix, card suffix.
    """

    def __init__(self, context: SalesContext, has_header: bool = True):
        self.context = context
        self.has_header = has_header

    def parse_text(self, text: str) -> ParseResult:
        """Parse CSV content held in a string."""
        return self.parse_rows(csv.reader(io.StringIO(text), delimiter=",", quotechar='"'))

    def parse_rows(self, rows: Iterable[Sequence[str]]) -> ParseResult:
        """
        Parse CSV rows into sales, sorted by date.

        Args:
            rows: Rows as produced by csv.reader (header included if has_header)

        Returns:
            ParseResult with sales and per-row errors
        """
        result = ParseResult()
        row_iter = iter(rows)

        if self.has_header:
            next(row_iter, None)

        row_number = 1 if self.has_header else 0
        for row in row_iter:
            row_number += 1
            if not any(cell.strip() for cell in row):
                continue
            result.total_rows += 1
            try:
                result.sales.append(self.parse_row(row, row_number))
            except ValueError as e:
                result.errors.append(f"row {row_number}: {e}")

        result.sales.sort(key=lambda s: s.when)

        if result.errors:
            logger.warning(
                "Sales CSV parsing errors",
                failed=len(result.errors),
                errors=result.errors[:10],
            )
        logger.info(
            "Sales CSV parsed",
            rows=result.total_rows,
            sales=len(result.sales),
            failed=len(result.errors),
        )
        return result

    def parse_row(self, row: Sequence[str], row_number: Optional[int] = None) -> Sale:
        """
        Validate a single row.

        Raises:
            ValueError: on wrong column count, bad timestamp or bad amount
        """
        if len(row) != RECORD_LEN:
            raise ValueError(f"expected {RECORD_LEN} columns, got {len(row)}")

        try:
            when = parse_timestamp(row[0])
        except ValueError as e:
            raise ValueError(f"invalid timestamp {row[0]!r}: {e}") from None

        value_cents = to_cents(row[3])
        if value_cents < 0:
            raise ValueError(f"negative amount {row[3]!r}")

        kind = row[4].strip()
        if "Online" in kind:
            channel = self.context.online_channel()
        else:
            channel = SaleChannel.offline()

        return Sale(
            when=when,
            value_cents=value_cents,
            channel=channel,
            buyer_email=field_or_na(row[1]),
            buyer_username=field_or_na(row[2]),
            seller_name=field_or_na(row[5]),
            seller_id=field_or_na(row[6]),
            seller_email=field_or_na(row[7]),
            token=row[8].strip(),
            sale_id=row[9].strip(),
            card_name=field_or_na(row[10]),
            card_prefix=field_or_na(row[11]),
            card_suffix=field_or_na(row[12]),
            raw_kind=kind,
            source_row=row_number,
        )
