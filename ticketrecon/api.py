"""
FastAPI application for the ticket decoding service.
Accepts a sales CSV plus pricing context, returns the decoded sales.
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional, Tuple

import structlog
from fastapi import FastAPI, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel, Field

from .config import get_settings
from .models import AmbiguitySolver, ConfigurationError, SalesContext
from .reconciliation import DecodingOrchestrator, DecodingResult
from .reporting import export_csv_text
from .utils.log_setup import setup_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    setup_logging()
    logger.info("Starting ticket decoding API")
    yield
    logger.info("Shutting down ticket decoding API")


app = FastAPI(
    title="Ticket batch decoder",
    description="Infers which ticket batches were bought in each sale",
    version="1.0.0",
    lifespan=lifespan,
)


# Request/Response models
class DecodeRequest(BaseModel):
    csv: str
    online_fee: Optional[Tuple[int, int]] = None
    batch_prices: Optional[List[Decimal]] = None
    promo_limit: Optional[int] = None
    ambiguity_solver: Optional[AmbiguitySolver] = None


class SettingsResponse(BaseModel):
    online_fee: Tuple[int, int]
    batch_prices: List[Decimal]
    promo_limit: Optional[int] = None
    ambiguity_solver: AmbiguitySolver


class DecodeResponse(BaseModel):
    run_id: str
    context: dict
    summary: dict
    report: dict
    parse_errors: List[str] = Field(default_factory=list)
    sales: List[dict] = Field(default_factory=list)


def _build_context(request: DecodeRequest) -> SalesContext:
    try:
        return get_settings().build_context(
            online_fee=request.online_fee,
            batch_prices=request.batch_prices,
            promo_limit=request.promo_limit,
            ambiguity_solver=request.ambiguity_solver,
        )
    except ConfigurationError as e:
        logger.warning("Rejected configuration", error=str(e))
        raise HTTPException(400, f"Invalid configuration: {e}") from None


async def _decode(request: DecodeRequest) -> DecodingResult:
    context = _build_context(request)
    orchestrator = DecodingOrchestrator()
    return await asyncio.to_thread(orchestrator.run, request.csv, context)


# API Endpoints
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/settings", response_model=SettingsResponse)
async def get_settings_endpoint():
    """Current decoding defaults."""
    s = get_settings()
    return SettingsResponse(
        online_fee=s.online_fee,
        batch_prices=s.batch_prices,
        promo_limit=s.promo_limit,
        ambiguity_solver=s.ambiguity_solver,
    )


@app.post("/api/decode", response_model=DecodeResponse)
async def decode_sales(request: DecodeRequest):
    """Decode every sale in a CSV export."""
    result = await _decode(request)

    return DecodeResponse(
        run_id=result.run_id,
        context=result.ledger.context.to_dict(),
        summary=result.summary.to_dict(),
        report=result.report.to_dict(),
        parse_errors=result.parse_errors,
        sales=[s.to_dict() for s in result.ledger],
    )


@app.post("/api/decode/export")
async def export_sales(request: DecodeRequest):
    """Decode a CSV export and return it enriched with the decoding columns."""
    result = await _decode(request)

    return Response(
        content=export_csv_text(result.ledger),
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="decoded_{result.run_id}.csv"',
        },
    )
