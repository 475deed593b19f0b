"""
Useful information to report after decoding the sales list.

A report template is an ordered list of (name, computation) pairs, so
callers choose which fields they want and in which order.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Sequence, Tuple

if TYPE_CHECKING:
    from ..reconciliation.ledger import SalesLedger

StringFieldFn = Callable[["SalesLedger"], Any]
TableFieldFn = Callable[["SalesLedger"], Dict[str, Any]]


@dataclass
class StringField:
    """A report field rendered as a single value."""
    name: str
    value: str


@dataclass
class TableField:
    """A report field that's a key -> value table."""
    name: str
    rows: Dict[str, str] = field(default_factory=dict)


@dataclass
class Report:
    """A report computed from a template and a ledger."""
    string_fields: List[StringField] = field(default_factory=list)
    table_fields: List[TableField] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fields": {f.name: f.value for f in self.string_fields},
            "tables": {t.name: t.rows for t in self.table_fields},
        }

    def render(self) -> str:
        """Plain-text rendering for terminals."""
        lines = [f"{f.name}: {f.value}" for f in self.string_fields]
        for table in self.table_fields:
            lines.append(f"{table.name}:")
            if not table.rows:
                lines.append("  (none)")
            lines.extend(f"  {key}: {value}" for key, value in table.rows.items())
        return "\n".join(lines)


# String fields

def ambiguity_solver(ledger: "SalesLedger") -> str:
    return ledger.context.solver.label


def total_sales(ledger: "SalesLedger") -> int:
    return len(ledger)


def settled_sales(ledger: "SalesLedger") -> str:
    settled = len(ledger.settled())
    percent = round(settled / len(ledger) * 100) if len(ledger) else 0
    return f"{settled} ({percent}%)"


def total_tickets(ledger: "SalesLedger") -> int:
    return sum(s.resolved.tickets() for s in ledger.settled())


def online_tickets(ledger: "SalesLedger") -> int:
    return sum(
        s.resolved.tickets() for s in ledger.settled()
        if s.sale.channel.is_online
    )


def initially_ambiguous_sales(ledger: "SalesLedger") -> int:
    return len(ledger.ambiguous())


def still_ambiguous_sales(ledger: "SalesLedger") -> int:
    return len(ledger.unresolved())


def unmatched_sales(ledger: "SalesLedger") -> int:
    return len(ledger.unmatched())


# Table fields

def tickets_per_seller(ledger: "SalesLedger") -> Dict[str, int]:
    """Settled offline tickets per selling point."""
    counts: Counter = Counter()
    for s in ledger.settled():
        if not s.sale.channel.is_online and s.sale.seller_name:
            counts[s.sale.seller_name] += s.resolved.tickets()
    return dict(sorted(counts.items()))


def tickets_per_batch(ledger: "SalesLedger") -> Dict[str, int]:
    """Settled tickets per batch, in sale order."""
    counts: Counter = Counter()
    for s in ledger.settled():
        for amount in s.resolved.amounts():
            counts[amount.batch.num] += amount.quantity
    return {str(num): counts[num] for num in sorted(counts)}


DEFAULT_STRING_FIELDS: List[Tuple[str, StringFieldFn]] = [
    ("Ambiguity solver", ambiguity_solver),
    ("Total sales", total_sales),
    ("Settled sales", settled_sales),
    ("Total tickets", total_tickets),
    ("Online tickets", online_tickets),
    ("Initially ambiguous sales", initially_ambiguous_sales),
    ("Still ambiguous sales", still_ambiguous_sales),
    ("Sales with no solution", unmatched_sales),
]

DEFAULT_TABLE_FIELDS: List[Tuple[str, TableFieldFn]] = [
    ("Offline tickets per selling point", tickets_per_seller),
    ("Tickets per batch", tickets_per_batch),
]


class ReportTemplate:
    """A report skeleton, made out of field functions."""

    def __init__(
        self,
        string_fields: Sequence[Tuple[str, StringFieldFn]] = (),
        table_fields: Sequence[Tuple[str, TableFieldFn]] = (),
    ):
        self.string_fields = list(string_fields)
        self.table_fields = list(table_fields)

    @classmethod
    def default(cls) -> "ReportTemplate":
        return cls(DEFAULT_STRING_FIELDS, DEFAULT_TABLE_FIELDS)

    def compute(self, ledger: "SalesLedger") -> Report:
        return Report(
            string_fields=[
                StringField(name, str(fn(ledger))) for name, fn in self.string_fields
            ],
            table_fields=[
                TableField(name, {str(k): str(v) for k, v in fn(ledger).items()})
                for name, fn in self.table_fields
            ],
        )
