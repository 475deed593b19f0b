"""Enriched CSV export: the original columns plus what we decoded."""

import csv
import io
from pathlib import Path
from typing import Union

import structlog

from ..reconciliation.ledger import EXPORT_HEADER, SalesLedger

logger = structlog.get_logger()


def export_csv_text(ledger: SalesLedger) -> str:
    """Render the ledger as export CSV, header included."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=",", quotechar='"', lineterminator="\n")
    writer.writerow(EXPORT_HEADER)
    writer.writerows(ledger.export_rows())
    return buffer.getvalue()


def write_export(ledger: SalesLedger, output_path: Union[str, Path]) -> Path:
    """Write the export CSV to a file."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", encoding="utf-8", newline="") as f:
        f.write(export_csv_text(ledger))

    logger.info("Export written", path=str(output_path), rows=len(ledger))
    return output_path
