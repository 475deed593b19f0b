"""
Shared fixtures.
"""

from datetime import datetime, timedelta, timezone

import pytest

from ticketrecon.config import get_settings
from ticketrecon.models import SaleChannel, Sale, SalesContext

BASE_TIME = datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep logs, reports and cached settings out of the user's home."""
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("REPORTS_DIR", str(tmp_path / "reports"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def context():
    """Promotional batch at 50.00, batch 1 at 60.00."""
    return SalesContext.from_config(online_fee=(11, 10), batch_prices=["50", "60"])


@pytest.fixture
def make_sale():
    """Factory for sales spaced one minute apart."""
    def _make(
        minute: int,
        value_cents: int,
        seller_name=None,
        online: bool = False,
        sale_id=None,
    ) -> Sale:
        return Sale(
            when=BASE_TIME + timedelta(minutes=minute),
            value_cents=value_cents,
            channel=SaleChannel.online(11, 10) if online else SaleChannel.offline(),
            seller_name=seller_name,
            token=f"tok-{minute}",
            sale_id=sale_id or f"sale-{minute}",
            raw_kind="Online" if online else "Cash",
        )
    return _make
