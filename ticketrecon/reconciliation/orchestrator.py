"""
Decoding Orchestrator - Main pipeline coordinator.

Orchestrates the full decoding pipeline:
1. Ingestion (CSV rows -> sales)
2. Candidate enumeration through a per-run cache
3. Ambiguity resolution to a fixpoint
4. Report and audit aggregation
"""

import time
from dataclasses import dataclass, field
from typing import List, Optional
from uuid import uuid4

import structlog

from ..models import AuditAction, AuditEntry, SalesContext
from ..ingestion import SalesCSVParser
from ..reporting.report import Report, ReportTemplate
from ..utils.audit_logger import AuditLogger
from .cache import PricingCandidateCache
from .ledger import SalesLedger
from .resolvers import solve_ambiguities

logger = structlog.get_logger()


@dataclass
class DecodingSummary:
    """Summary statistics of a decoding run."""
    total_sales: int = 0
    settled_sales: int = 0
    initially_ambiguous_sales: int = 0
    ambiguous_sales: int = 0
    unmatched_sales: int = 0
    parse_failures: int = 0
    distinct_prices: int = 0
    resolution_passes: int = 0
    resolved_by_solver: int = 0
    processing_time_seconds: float = 0.0

    @property
    def settle_rate(self) -> float:
        """Percentage of sales with a known match."""
        if self.total_sales == 0:
            return 0.0
        return (self.settled_sales / self.total_sales) * 100

    def to_dict(self) -> dict:
        return {
            "total_sales": self.total_sales,
            "settled_sales": self.settled_sales,
            "initially_ambiguous_sales": self.initially_ambiguous_sales,
            "ambiguous_sales": self.ambiguous_sales,
            "unmatched_sales": self.unmatched_sales,
            "parse_failures": self.parse_failures,
            "distinct_prices": self.distinct_prices,
            "resolution_passes": self.resolution_passes,
            "resolved_by_solver": self.resolved_by_solver,
            "settle_rate": round(self.settle_rate, 1),
            "processing_time_seconds": round(self.processing_time_seconds, 3),
        }


@dataclass
class DecodingResult:
    """Complete result of a decoding run."""
    run_id: str
    ledger: SalesLedger
    report: Report
    summary: DecodingSummary
    parse_errors: List[str] = field(default_factory=list)
    audit: Optional[AuditLogger] = None


class DecodingOrchestrator:
    """
    Main orchestrator for the decoding pipeline.

    One orchestrator run owns its cache and ledger; the context is shared
    and read-only.
    """

    def __init__(self, template: Optional[ReportTemplate] = None):
        self.template = template or ReportTemplate.default()

    def run(self, csv_text: str, context: SalesContext) -> DecodingResult:
        """
        Execute the full decoding pipeline.

        Args:
            csv_text: Sales CSV export, header included
            context: Validated pricing context

        Returns:
            DecodingResult with the resolved ledger, report and audit trail
        """
        start_time = time.time()
        run_id = str(uuid4())
        audit = AuditLogger(run_id)

        logger.info(
            "Starting decoding run",
            run_id=run_id,
            batches=len(context.catalog),
            solver=context.solver.value,
        )

        # Ingestion
        parse_result = SalesCSVParser(context).parse_text(csv_text)
        audit.log(AuditEntry(
            action=AuditAction.SALES_INGESTED,
            message=f"Ingested {len(parse_result.sales)} sales",
            details={"rows": parse_result.total_rows},
        ))
        for error in parse_result.errors:
            audit.log(AuditEntry(
                action=AuditAction.PARSE_FAILED,
                message="Row skipped",
                success=False,
                error_message=error,
            ))

        # Enumeration
        cache = PricingCandidateCache(context)
        ledger = SalesLedger.from_sales(parse_result.sales, context, cache)
        initially_ambiguous = len(ledger.ambiguous())

        # Resolution
        passes, resolved = solve_ambiguities(ledger)
        audit.log_many(ledger.audit_log)

        report = self.template.compute(ledger)

        summary = DecodingSummary(
            total_sales=len(ledger),
            settled_sales=len(ledger.settled()),
            initially_ambiguous_sales=initially_ambiguous,
            ambiguous_sales=len(ledger.unresolved()),
            unmatched_sales=len(ledger.unmatched()),
            parse_failures=len(parse_result.errors),
            distinct_prices=len(cache),
            resolution_passes=passes,
            resolved_by_solver=resolved,
            processing_time_seconds=time.time() - start_time,
        )

        logger.info("Decoding run complete", run_id=run_id, **summary.to_dict())

        return DecodingResult(
            run_id=run_id,
            ledger=ledger,
            report=report,
            summary=summary,
            parse_errors=parse_result.errors,
            audit=audit,
        )
