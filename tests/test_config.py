"""Tests for environment-driven settings."""

from pathlib import Path

import pytest

from storefront.config import Settings, get_settings


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    def test_defaults(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        settings = Settings()

        assert settings.cart_storage_key == "sbtc-cart"
        assert settings.points_storage_key == "loyaltyPoints"
        assert settings.ledger_storage_key == "loyaltyTransactions"
        assert settings.currency == "SAR"
        assert settings.ready_timeout == 5.0
        assert settings.enforce_ceiling_on_update is False

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("STOREFRONT_STORAGE_DIR", str(tmp_path / "data"))
        monkeypatch.setenv("STOREFRONT_ENFORCE_CEILING_ON_UPDATE", "true")
        monkeypatch.setenv("STOREFRONT_LOG_FORMAT", "console")

        settings = get_settings()

        assert settings.storage_dir == Path(tmp_path / "data")
        assert settings.enforce_ceiling_on_update is True
        assert settings.log_format == "console"

    def test_get_settings_is_cached(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        assert get_settings() is get_settings()
