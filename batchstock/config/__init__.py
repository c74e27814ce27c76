"""Configuration module."""

from batchstock.config.logging import configure_logging, get_logger, operation_context
from batchstock.config.settings import Settings, get_settings, reset_settings

__all__ = [
    "Settings",
    "get_settings",
    "reset_settings",
    "configure_logging",
    "get_logger",
    "operation_context",
]
