"""Application configuration.

Delegates to specialized components:
- Settings: Environment variables
- PortalsFileParser: Reads the portals token file
"""

import logging
import os
from dataclasses import dataclass

from courier_mcp.config.parser import PortalsFileParser
from courier_mcp.config.settings import Settings
from courier_mcp.models import RetryOptions

logger = logging.getLogger(__name__)


def _split_list(value: str | None) -> list[str] | None:
    if not value or not value.strip():
        return None
    return [item.strip().lower() for item in value.split(",") if item.strip()]


@dataclass
class Config:
    """Application configuration.

    Aggregates environment settings and the portals file parser.
    """

    settings: Settings
    parser: PortalsFileParser

    @classmethod
    def from_env(cls) -> "Config":
        """Create config from environment.

        Returns:
            Configured instance with all components initialized
        """
        settings = Settings.from_env()
        parser = PortalsFileParser(
            settings.portals_file,
            allowlist=_split_list(os.getenv("COURIER_PORTAL_ALLOWLIST")),
            blocklist=_split_list(os.getenv("COURIER_PORTAL_BLOCKLIST")),
        )
        return cls(settings=settings, parser=parser)

    @property
    def retry_options(self) -> RetryOptions:
        """Backoff policy for rate-limited requests."""
        return RetryOptions(
            max_retries=self.settings.max_retries,
            base_delay_ms=self.settings.base_delay_ms,
            max_delay_ms=self.settings.max_delay_ms,
        )
