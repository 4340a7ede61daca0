"""Configuration management for the steamguard linker.

This module provides dataclass-based configuration with environment variable
overrides, plus the protocol constants the remote service expects.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from loguru import logger

from ..errors import ConfigurationError

if TYPE_CHECKING:
    from ..transport.session import SessionData

COMMUNITY_BASE = "https://steamcommunity.com"
STEAMAPI_BASE = "https://api.steampowered.com"
TWO_FACTOR_TIME_QUERY = STEAMAPI_BASE + "/ITwoFactorService/QueryTime/v0001"

MOBILE_USER_AGENT = "Mozilla/5.0 (Linux; U; Android 4.1.1; en-us; Google Nexus 4 - 4.1.1 - API 16 - 768x1280 Build/JRO03S) AppleWebKit/534.30 (KHTML, like Gecko) Version/4.0 Mobile Safari/534.30"

# Activation attempts allowed by FinalizeAddAuthenticator (attempt indices 0..30).
# The server may ask for several consecutive codes; every request, including
# "want more" and status 88 answers, spends one attempt from this budget.
FINALIZE_MAX_ATTEMPTS = 31

# Steam needs a few seconds to attach a freshly verified phone number. After a
# failed check_sms_code the linker waits this long, then re-checks has_phone once.
PHONE_CONFIRMATION_DELAY_SECONDS = 3.5

DEVICE_ID_PREFIX = "android:"


@dataclass
class TransportConfig:
    """Configuration for the Steam web transport."""

    community_base: str = COMMUNITY_BASE
    api_base: str = STEAMAPI_BASE
    time_query_url: str = TWO_FACTOR_TIME_QUERY
    timeout_seconds: int = 30
    user_agent: str = MOBILE_USER_AGENT


@dataclass
class ProtocolConfig:
    """Tuning parameters of the linking protocol.

    These mirror what the remote service expects; change them only to match
    a change on the server side (or to shorten waits in tests).
    """

    finalize_max_attempts: int = FINALIZE_MAX_ATTEMPTS
    phone_confirmation_delay_seconds: float = PHONE_CONFIRMATION_DELAY_SECONDS
    device_id_prefix: str = DEVICE_ID_PREFIX


@dataclass
class LoggingConfig:
    """Configuration for loguru sinks."""

    level: str = "INFO"
    log_to_console: bool = True
    log_to_file: bool = False
    log_file_path: Path = field(default_factory=lambda: Path.home() / ".steamguard" / "logs" / "linker.log")
    rotation: str = "10 MB"
    retention: str = "7 days"


@dataclass
class LinkerConfig:
    """Complete linker configuration."""

    # Authenticated session, supplied by whoever performed the login
    steam_id: int = 0
    access_token: str = ""
    session_id: str = ""
    steam_login_secure: str = ""

    # Where the CLI keeps linked accounts
    credentials_dir: Path = field(default_factory=lambda: Path.home() / ".steamguard" / "maFiles")

    transport: TransportConfig = field(default_factory=TransportConfig)
    protocol: ProtocolConfig = field(default_factory=ProtocolConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self):
        """Apply environment variable overrides."""
        self._apply_env_overrides()

    def _apply_env_overrides(self):
        """Apply configuration overrides from environment variables."""
        # Session
        if steam_id := os.getenv("STEAMGUARD_STEAM_ID"):
            try:
                self.steam_id = int(steam_id)
            except ValueError:
                logger.warning(f"Invalid steam id: {steam_id}")

        if access_token := os.getenv("STEAMGUARD_ACCESS_TOKEN"):
            self.access_token = access_token

        if session_id := os.getenv("STEAMGUARD_SESSION_ID"):
            self.session_id = session_id

        if steam_login_secure := os.getenv("STEAMGUARD_STEAM_LOGIN_SECURE"):
            self.steam_login_secure = steam_login_secure

        # Transport
        if community_base := os.getenv("STEAMGUARD_COMMUNITY_BASE"):
            self.transport.community_base = community_base.rstrip("/")

        if api_base := os.getenv("STEAMGUARD_API_BASE"):
            self.transport.api_base = api_base.rstrip("/")
            self.transport.time_query_url = self.transport.api_base + "/ITwoFactorService/QueryTime/v0001"

        if timeout := os.getenv("STEAMGUARD_TIMEOUT"):
            try:
                self.transport.timeout_seconds = int(timeout)
            except ValueError:
                logger.warning(f"Invalid timeout: {timeout}")

        # Protocol
        if phone_delay := os.getenv("STEAMGUARD_PHONE_DELAY"):
            try:
                self.protocol.phone_confirmation_delay_seconds = float(phone_delay)
            except ValueError:
                logger.warning(f"Invalid phone confirmation delay: {phone_delay}")

        # Logging
        if log_level := os.getenv("STEAMGUARD_LOG_LEVEL"):
            self.logging.level = log_level.upper()

        if log_file := os.getenv("STEAMGUARD_LOG_FILE"):
            self.logging.log_file_path = Path(log_file)
            self.logging.log_to_file = True

        # Paths
        if credentials_dir := os.getenv("STEAMGUARD_CREDENTIALS_DIR"):
            self.credentials_dir = Path(credentials_dir)

    def session_data(self) -> SessionData:
        """Build the session the linker is bound to.

        Raises:
            ConfigurationError: if the session settings are incomplete
        """
        from ..transport.session import SessionData

        is_valid, errors = self.validate()
        if not is_valid:
            raise ConfigurationError("; ".join(errors))

        return SessionData(
            steam_id=self.steam_id,
            access_token=self.access_token,
            session_id=self.session_id,
            steam_login_secure=self.steam_login_secure or None,
        )

    def validate(self) -> tuple[bool, list[str]]:
        """Validate the configuration.

        Returns:
            Tuple of (is_valid, error_messages)
        """
        errors = []

        if not self.steam_id:
            errors.append("Steam ID is required")

        if not self.access_token:
            errors.append("Access token is required")

        if not self.session_id:
            errors.append("Session ID is required")

        if self.transport.timeout_seconds <= 0:
            errors.append("Timeout must be positive")

        if self.protocol.finalize_max_attempts <= 0:
            errors.append("Finalize attempts must be positive")

        if self.protocol.phone_confirmation_delay_seconds < 0:
            errors.append("Phone confirmation delay must not be negative")

        return len(errors) == 0, errors


class ConfigManager:
    """Manages linker configuration."""

    def __init__(self):
        """Initialize configuration manager."""
        self._config: Optional[LinkerConfig] = None

    def load_config(self) -> LinkerConfig:
        """Load configuration from defaults and the environment.

        Returns:
            Configured LinkerConfig instance
        """
        config = LinkerConfig()
        self._config = config
        return config

    def get_config(self) -> Optional[LinkerConfig]:
        """Get current configuration."""
        return self._config

    def validate_config(self) -> tuple[bool, list[str]]:
        """Validate current configuration.

        Returns:
            Tuple of (is_valid, error_messages)
        """
        if not self._config:
            return False, ["No configuration loaded"]

        return self._config.validate()


# Global configuration manager instance
_config_manager = ConfigManager()


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager."""
    return _config_manager
