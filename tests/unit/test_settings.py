"""Tests for settings and logging configuration."""

import pytest
import structlog
from pydantic import ValidationError

from batchstock.config import (
    configure_logging,
    get_logger,
    get_settings,
    operation_context,
    reset_settings,
)
from batchstock.config.logging import add_engine_context
from batchstock.config.settings import AlertSettings, Settings, StorageSettings


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.stock.default_reorder_level == 5
        assert settings.stock.suggested_reorder_multiplier == 2
        assert settings.stock.suggested_reorder_fallback == 10
        assert settings.transactions.max_attempts == 5
        assert settings.alerts.batch_default_threshold == 5
        assert settings.storage.backend == "memory"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("STOCK_DEFAULT_REORDER_LEVEL", "7")
        monkeypatch.setenv("TXN_MAX_ATTEMPTS", "2")
        monkeypatch.setenv("ALERT_BATCH_SIZE_THRESHOLDS", '{"XL": 1}')

        settings = Settings()

        assert settings.stock.default_reorder_level == 7
        assert settings.transactions.max_attempts == 2
        assert settings.alerts.batch_size_thresholds == {"XL": 1}

    def test_negative_size_threshold_rejected(self):
        with pytest.raises(ValidationError):
            AlertSettings(batch_size_thresholds={"XL": -1})

    def test_db_path(self, tmp_path):
        assert StorageSettings(data_dir=tmp_path, db_name="a.db").db_path == tmp_path / "a.db"

    def test_cached_and_reset(self):
        first = get_settings()
        assert get_settings() is first
        reset_settings()
        assert get_settings() is not first


class TestLogging:
    @pytest.mark.parametrize("environment", ["development", "production"])
    def test_configure_logging(self, monkeypatch, environment):
        monkeypatch.setenv("ENVIRONMENT", environment)
        configure_logging()
        get_logger("batchstock.test").info("logging_configured", environment=environment)

    def test_engine_context_names_storage_backend(self, monkeypatch):
        monkeypatch.setenv("STORAGE_BACKEND", "sqlite")
        event = add_engine_context(None, "info", {"event": "x"})
        assert event["storage_backend"] == "sqlite"
        assert event["app"] == get_settings().app_name

    def test_operation_context_binds_and_unbinds(self):
        with operation_context("allocate", variant_id="v1"):
            bound = structlog.contextvars.get_contextvars()
            assert bound == {"operation": "allocate", "variant_id": "v1"}
        assert "operation" not in structlog.contextvars.get_contextvars()
