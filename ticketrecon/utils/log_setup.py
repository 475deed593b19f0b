"""Logging configuration: stdlib handlers with structlog on top."""

import logging
import sys
from pathlib import Path
from typing import Optional

import structlog

from ..config import get_settings


def setup_logging(log_dir: Optional[Path] = None, level: Optional[str] = None) -> None:
    """Configure logging to file and console."""
    settings = get_settings()
    log_dir = Path(log_dir or settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "ticketrecon.log"

    logging.basicConfig(
        level=getattr(logging, (level or settings.app_log_level).upper(), logging.INFO),
        format="%(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
