"""
Tests for settings and context building.
"""

import pytest

from ticketrecon.config import Settings, get_settings
from ticketrecon.models import AmbiguitySolver, ConfigurationError


class TestSettings:
    """Test suite for environment-driven settings."""

    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.online_fee == (11, 10)
        assert settings.ambiguity_solver == AmbiguitySolver.default() == AmbiguitySolver.SELLER
        assert settings.batch_prices == []
        assert {"app_env", "app_debug"}.isdisjoint(Settings.model_fields)

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("BATCH_PRICES", '["50", "60.5"]')
        monkeypatch.setenv("PROMO_LIMIT", "4")
        monkeypatch.setenv("ONLINE_FEE_NUMERATOR", "23")
        monkeypatch.setenv("ONLINE_FEE_DENOMINATOR", "20")
        get_settings.cache_clear()

        context = get_settings().build_context()

        assert context.catalog.prices() == [5000, 6050]
        assert context.promo_limit == 4
        assert context.online_fee == (23, 20)

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("BATCH_PRICES", '["50", "60"]')
        settings = Settings(_env_file=None)

        context = settings.build_context(
            online_fee=(6, 5),
            batch_prices=["10"],
            ambiguity_solver=AmbiguitySolver.NONE,
        )

        assert context.catalog.prices() == [1000]
        assert context.online_fee == (6, 5)
        assert context.solver == AmbiguitySolver.NONE

    def test_no_prices_is_an_error(self):
        with pytest.raises(ConfigurationError):
            Settings(_env_file=None).build_context()

    def test_cached(self):
        assert get_settings() is get_settings()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
