"""Configuration module for the steamguard linker."""

from .logger_config import setup_logging
from .settings import (
    FINALIZE_MAX_ATTEMPTS,
    PHONE_CONFIRMATION_DELAY_SECONDS,
    ConfigManager,
    LinkerConfig,
    LoggingConfig,
    ProtocolConfig,
    TransportConfig,
    get_config_manager,
)

__all__ = [
    "FINALIZE_MAX_ATTEMPTS",
    "PHONE_CONFIRMATION_DELAY_SECONDS",
    "LinkerConfig",
    "TransportConfig",
    "ProtocolConfig",
    "LoggingConfig",
    "ConfigManager",
    "get_config_manager",
    "setup_logging",
]
