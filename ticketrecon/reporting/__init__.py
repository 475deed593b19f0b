"""Reports and exports built from a decoded ledger."""

from .report import Report, ReportTemplate, StringField, TableField
from .export import export_csv_text, write_export

__all__ = [
    "Report",
    "ReportTemplate",
    "StringField",
    "TableField",
    "export_csv_text",
    "write_export",
]
