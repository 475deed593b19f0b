"""
Command line entry point.

    ticketrecon decode sales.csv --prices 50,60,70 --fee 11/10 -o decoded.csv
    ticketrecon serve --port 8000
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import structlog

from .config import get_settings
from .models import AmbiguitySolver, ConfigurationError
from .reconciliation import DecodingOrchestrator
from .reporting import write_export
from .utils.log_setup import setup_logging

logger = structlog.get_logger()


def _parse_fee(text: str) -> Tuple[int, int]:
    try:
        numerator, denominator = text.split("/")
        return int(numerator), int(denominator)
    except ValueError:
        raise argparse.ArgumentTypeError(f"fee must look like 11/10, got {text!r}") from None


def _parse_prices(text: str) -> List[str]:
    prices = [p.strip() for p in text.split(",") if p.strip()]
    if not prices:
        raise argparse.ArgumentTypeError("at least one price is required")
    return prices


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ticketrecon",
        description="Infer which ticket batches were bought in each sale",
    )
    parser.add_argument("--log-level", default=None, help="Override APP_LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    decode = sub.add_parser("decode", help="Decode a sales CSV export")
    decode.add_argument("input", type=Path, help="Sales CSV export")
    decode.add_argument("-o", "--output", type=Path, default=None,
                        help="Where to write the enriched CSV")
    decode.add_argument("--prices", type=_parse_prices, default=None,
                        help="Batch prices, promotional first, e.g. 50,60,70")
    decode.add_argument("--fee", type=_parse_fee, default=None,
                        help="Online fee as numerator/denominator, e.g. 11/10")
    decode.add_argument("--promo-limit", type=int, default=None,
                        help="Max promotional tickets per buyer")
    decode.add_argument("--solver", type=AmbiguitySolver,
                        choices=list(AmbiguitySolver), default=None,
                        metavar="{none,temporal,seller}",
                        help="Ambiguity solver")
    decode.add_argument("--audit", type=Path, default=None,
                        help="Where to write the audit trail (JSON)")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None, help="Port to run the server on")

    return parser


def run_decode(args: argparse.Namespace) -> int:
    settings = get_settings()
    try:
        context = settings.build_context(
            online_fee=args.fee,
            batch_prices=args.prices,
            promo_limit=args.promo_limit,
            ambiguity_solver=args.solver,
        )
    except ConfigurationError as e:
        logger.error("Invalid configuration", error=str(e))
        print(f"error: {e}", file=sys.stderr)
        return 2

    try:
        csv_text = args.input.read_text(encoding="utf-8-sig")
    except OSError as e:
        logger.error("Cannot read sales file", path=str(args.input), error=str(e))
        print(f"error: cannot read {args.input}: {e}", file=sys.stderr)
        return 1

    result = DecodingOrchestrator().run(csv_text, context)

    print(result.report.render())
    if result.parse_errors:
        print(f"\n{len(result.parse_errors)} rows skipped:")
        for error in result.parse_errors:
            print(f"  {error}")

    if args.output is not None:
        write_export(result.ledger, args.output)
        print(f"\nExport written to {args.output}")
    if args.audit is not None:
        result.audit.export_to_file(args.audit)

    return 0


def run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "ticketrecon.api:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_level=settings.app_log_level.lower(),
    )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level)

    if args.command == "decode":
        return run_decode(args)
    return run_serve(args)


if __name__ == "__main__":
    sys.exit(main())
