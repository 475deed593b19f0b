"""
Configuration management using Pydantic Settings.
All parameters are loaded from environment variables with sensible defaults.
"""

import os
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import AmbiguitySolver, SalesContext

APP_BASE_PATH = Path(os.environ.get(
    "TICKETRECON_BASE_PATH",
    Path.home() / "Documents" / "ticketrecon",
))
ENV_FILE_PATH = APP_BASE_PATH / ".env"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE_PATH),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application
    app_log_level: str = Field(default="INFO")

    # Server
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000)

    # Online fee: buyers pay original * numerator / denominator
    online_fee_numerator: int = Field(default=11)
    online_fee_denominator: int = Field(default=10)

    # Pricing schedule, in currency units, promotional batch first
    batch_prices: List[Decimal] = Field(default_factory=list)
    promo_limit: Optional[int] = Field(default=None)

    # Ambiguity resolution
    ambiguity_solver: AmbiguitySolver = Field(default_factory=AmbiguitySolver.default)

    # Storage
    reports_dir: Path = Field(default=APP_BASE_PATH / "reports")
    log_dir: Path = Field(default=APP_BASE_PATH / "logs")

    @property
    def online_fee(self) -> Tuple[int, int]:
        return (self.online_fee_numerator, self.online_fee_denominator)

    def build_context(
        self,
        online_fee: Optional[Tuple[int, int]] = None,
        batch_prices: Optional[List] = None,
        promo_limit: Optional[int] = None,
        ambiguity_solver: Optional[AmbiguitySolver] = None,
    ) -> SalesContext:
        """
        Build a validated SalesContext, overriding settings where given.

        Raises:
            ConfigurationError: if the resulting configuration is invalid
        """
        return SalesContext.from_config(
            online_fee=online_fee if online_fee is not None else self.online_fee,
            batch_prices=batch_prices if batch_prices is not None else self.batch_prices,
            promo_limit=promo_limit if promo_limit is not None else self.promo_limit,
            solver=ambiguity_solver if ambiguity_solver is not None else self.ambiguity_solver,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
