"""
Engine settings with Pydantic v2 validation.

Loads configuration from environment variables with sensible defaults.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StockSettings(BaseSettings):
    """Stock level defaults."""

    model_config = SettingsConfigDict(env_prefix="STOCK_")

    default_reorder_level: int = Field(default=5, ge=0)

    # Reorder suggestion: multiplier x reorder level, or fallback when unset
    suggested_reorder_multiplier: int = Field(default=2, ge=1)
    suggested_reorder_fallback: int = Field(default=10, ge=1)


class TransactionSettings(BaseSettings):
    """Optimistic transaction retry configuration."""

    model_config = SettingsConfigDict(env_prefix="TXN_")

    max_attempts: int = Field(default=5, ge=1)
    retry_delay: float = 0.005  # seconds
    retry_max_delay: float = 0.1


class AlertSettings(BaseSettings):
    """Stock alert thresholds."""

    model_config = SettingsConfigDict(env_prefix="ALERT_")

    # Flat threshold for batch line-item sizes
    batch_default_threshold: int = Field(default=5, ge=0)
    # Size-specific batch thresholds, e.g. {"XL": 2}
    batch_size_thresholds: dict[str, int] = Field(default_factory=dict)

    @field_validator("batch_size_thresholds")
    @classmethod
    def non_negative_thresholds(cls, v: dict[str, int]) -> dict[str, int]:
        for size, threshold in v.items():
            if threshold < 0:
                raise ValueError(f"threshold for size '{size}' must be >= 0")
        return v


class StorageSettings(BaseSettings):
    """Storage configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    backend: Literal["memory", "sqlite"] = "memory"
    data_dir: Path = Path("data")
    db_name: str = "batchstock.db"

    # SQLite settings
    pool_size: int = 5
    busy_timeout: int = 30000  # ms

    # Audit log pagination
    history_page_size: int = 50

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class Settings(BaseSettings):
    """Main engine settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Batchstock Inventory Engine"
    app_version: str = "0.1.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Sub-settings
    stock: StockSettings = Field(default_factory=StockSettings)
    transactions: TransactionSettings = Field(default_factory=TransactionSettings)
    alerts: AlertSettings = Field(default_factory=AlertSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
