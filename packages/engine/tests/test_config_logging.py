"""Tests for engine settings and structured logging setup."""

import json
import logging
from decimal import Decimal

import pytest
import structlog

from equity_engine.config import Settings, get_settings
from equity_engine.logging_config import configure_from_settings, configure_logging, get_logger


@pytest.fixture
def reset_logging():
    yield
    logging.getLogger().handlers.clear()
    structlog.reset_defaults()


# =============================================================================
# Settings
# =============================================================================

def test_settings_defaults(monkeypatch):
    for name in ("LOG_LEVEL", "LOG_JSON", "PRICE_TOLERANCE_BPS", "DEFAULT_RSU_POLICY", "INCLUDE_UNALLOCATED_POOL"):
        monkeypatch.delenv(f"EQUITY_ENGINE_{name}", raising=False)

    settings = Settings()

    assert settings.LOG_LEVEL == "INFO"
    assert settings.LOG_JSON is False
    assert settings.PRICE_TOLERANCE_BPS == Decimal("50")
    assert settings.DEFAULT_RSU_POLICY == "granted"
    assert settings.INCLUDE_UNALLOCATED_POOL is True


def test_settings_read_prefixed_environment(monkeypatch):
    monkeypatch.setenv("EQUITY_ENGINE_PRICE_TOLERANCE_BPS", "25")
    monkeypatch.setenv("EQUITY_ENGINE_DEFAULT_RSU_POLICY", "vested")
    monkeypatch.setenv("PRICE_TOLERANCE_BPS", "999")  # unprefixed names are ignored

    settings = get_settings()

    assert settings.PRICE_TOLERANCE_BPS == Decimal("25")
    assert settings.DEFAULT_RSU_POLICY == "vested"


def test_settings_reject_unknown_rsu_policy(monkeypatch):
    monkeypatch.setenv("EQUITY_ENGINE_DEFAULT_RSU_POLICY", "sometimes")
    with pytest.raises(ValueError):
        get_settings()


# =============================================================================
# Logging
# =============================================================================

def test_json_logging(capsys, reset_logging):
    configure_logging("DEBUG", json_output=True)

    get_logger("equity_engine.test").info("cap_table_computed", company_id="acme", rows=8)

    line = capsys.readouterr().out.strip().splitlines()[-1]
    record = json.loads(line)
    assert record["event"] == "cap_table_computed"
    assert record["level"] == "INFO"
    assert record["logger"] == "equity_engine.test"
    assert record["company_id"] == "acme"
    assert record["rows"] == 8
    assert "timestamp" in record


def test_log_level_filters_debug(capsys, reset_logging):
    configure_logging("WARNING", json_output=True)

    logger = get_logger("equity_engine.test")
    logger.debug("hidden")
    logger.warning("shown")

    out = capsys.readouterr().out
    assert "hidden" not in out
    assert "shown" in out


def test_configure_from_settings(monkeypatch, capsys, reset_logging):
    monkeypatch.setenv("EQUITY_ENGINE_LOG_JSON", "true")
    monkeypatch.setenv("EQUITY_ENGINE_LOG_LEVEL", "INFO")

    configure_from_settings()
    get_logger("equity_engine.test").info("configured")

    assert json.loads(capsys.readouterr().out.strip().splitlines()[-1])["event"] == "configured"
