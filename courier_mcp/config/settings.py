"""Application settings from environment variables.

Centralized environment variable parsing and validation.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_PORTALS_FILE = str(Path.home() / ".config" / "courier" / "portals")


@dataclass
class Settings:
    """Application settings from environment.

    Handles parsing, validation, and defaults for all env vars.
    """

    # Polling
    poll_interval: float = field(default=1.0)
    max_poll_attempts: int = field(default=120)

    # Transport
    api_version: str = field(default="3")
    http_timeout: float | None = field(default=None)  # None = no deadline
    verify_ssl: bool = field(default=True)

    # Retry policy
    max_retries: int = field(default=3)
    base_delay_ms: int = field(default=1000)
    max_delay_ms: int = field(default=30000)
    throttle_threshold: int = field(default=2)

    # Execution limits
    max_script_length: int = field(default=64000)

    # Credentials
    portals_file: str = field(default=DEFAULT_PORTALS_FILE)
    credential_max_age: int = field(default=600)  # 0 = never stale

    # MCP transport
    transport: str = field(default="http")
    http_host: str = field(default="0.0.0.0")
    http_port: int = field(default=8000)

    # Logging
    log_level: str = field(default="INFO")
    log_payloads: bool = field(default=False)
    slow_threshold_ms: int = field(default=5000)
    include_traceback: bool = field(default=False)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from COURIER_* environment variables.

        Returns:
            Settings instance with values from environment
        """
        timeout = cls._get_float("COURIER_HTTP_TIMEOUT", 0.0)
        return cls(
            poll_interval=cls._get_float("COURIER_POLL_INTERVAL", 1.0),
            max_poll_attempts=cls._get_int("COURIER_MAX_POLL_ATTEMPTS", 120),
            api_version=os.getenv("COURIER_API_VERSION", "3"),
            http_timeout=timeout if timeout > 0 else None,
            verify_ssl=cls._get_bool("COURIER_VERIFY_SSL", True),
            max_retries=cls._get_int("COURIER_MAX_RETRIES", 3),
            base_delay_ms=cls._get_int("COURIER_BASE_DELAY_MS", 1000),
            max_delay_ms=cls._get_int("COURIER_MAX_DELAY_MS", 30000),
            throttle_threshold=cls._get_int("COURIER_THROTTLE_THRESHOLD", 2),
            max_script_length=cls._get_int("COURIER_MAX_SCRIPT_LENGTH", 64000),
            portals_file=os.path.expanduser(
                os.getenv("COURIER_PORTALS_FILE", DEFAULT_PORTALS_FILE)
            ),
            credential_max_age=cls._get_int("COURIER_CREDENTIAL_MAX_AGE", 600),
            transport=cls._get_transport(),
            http_host=os.getenv("COURIER_HTTP_HOST", "0.0.0.0"),
            http_port=cls._get_int("COURIER_HTTP_PORT", 8000),
            log_level=os.getenv("COURIER_LOG_LEVEL", "INFO"),
            log_payloads=cls._get_bool("COURIER_LOG_PAYLOADS", False),
            slow_threshold_ms=cls._get_int("COURIER_SLOW_THRESHOLD_MS", 5000),
            include_traceback=cls._get_bool("COURIER_INCLUDE_TRACEBACK", False),
        )

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Get integer from environment, falling back to default if invalid."""
        value = os.getenv(key)
        if value is None:
            return default

        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid int for %s: %s, using default %d", key, value, default)
            return default

    @staticmethod
    def _get_float(key: str, default: float) -> float:
        """Get float from environment, falling back to default if invalid."""
        value = os.getenv(key)
        if value is None:
            return default

        try:
            return float(value)
        except ValueError:
            logger.warning("Invalid float for %s: %s, using default %s", key, value, default)
            return default

    @staticmethod
    def _get_bool(key: str, default: bool) -> bool:
        """Get boolean from environment.

        Args:
            key: Environment variable key
            default: Default value if not set

        Returns:
            Boolean value from environment or default
        """
        value = os.getenv(key)
        if value is None:
            return default
        return value.lower() in ("1", "true", "yes", "on")

    @staticmethod
    def _get_transport() -> str:
        """Get transport from environment with validation.

        Returns:
            Transport type ("http" or "stdio")
        """
        transport = os.getenv("COURIER_TRANSPORT", "").lower()
        if transport in ("http", "stdio"):
            return transport
        return "http"
