"""
Engine configuration module.
Loads environment variables and provides engine-wide settings.

Every setting can be overridden with an ``EQUITY_ENGINE_``-prefixed
environment variable (e.g. ``EQUITY_ENGINE_PRICE_TOLERANCE_BPS=25``) or a
``.env`` file in the working directory. Environment variables take precedence
over the ``.env`` file.
"""
from decimal import Decimal
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Engine settings loaded from environment variables or .env file.
    """
    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False  # JSON lines instead of console rendering

    # Price reconciliation: max divergence between two price sources (basis points)
    PRICE_TOLERANCE_BPS: Decimal = Decimal("50")

    # Cap table defaults
    DEFAULT_RSU_POLICY: Literal["none", "granted", "vested"] = "granted"
    INCLUDE_UNALLOCATED_POOL: bool = True  # count unallocated pool in FD denominator

    model_config = SettingsConfigDict(
        env_prefix="EQUITY_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        )


def get_settings() -> Settings:
    """
    Get settings instance.

    A fresh instance is built on each call so that tests can tweak the
    environment between calls.

    Returns:
        Settings: Engine settings
    """
    return Settings()
