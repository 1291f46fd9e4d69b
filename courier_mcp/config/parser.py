"""Portals file parser.

Reads portal session tokens from an ssh-config-like file:

    Portal acme.logicmonitor.com
        Token 0f3c9a...

Tokens are written by whatever login mechanism applies; the file is
re-read whenever a credential needs refreshing.
"""

import logging
import re
from pathlib import Path

from courier_mcp.models import Credential

logger = logging.getLogger(__name__)

_PORTAL_DIRECTIVE = re.compile(r"^Portal\s+(\S+)", re.IGNORECASE)
_KEY_VALUE = re.compile(r"^(\w+)\s+(.+)$")


class PortalsFileParser:
    """Parser for the portals token file.

    Supports allowlist/blocklist filtering of portal hostnames.
    """

    def __init__(
        self,
        path: Path | str,
        allowlist: list[str] | None = None,
        blocklist: list[str] | None = None,
    ):
        """Initialize portals file parser.

        Args:
            path: Path to the portals file
            allowlist: Only include these portals (if set)
            blocklist: Exclude these portals
        """
        self.path = Path(path)
        self.allowlist = set(allowlist) if allowlist else None
        self.blocklist = set(blocklist) if blocklist else set()

    def parse(self) -> dict[str, Credential]:
        """Parse the portals file.

        Returns:
            Dictionary mapping portal hostname to its credential. Portals
            without a token are skipped.
        """
        if not self.path.exists():
            logger.warning("Portals file not found: %s", self.path)
            return {}

        try:
            content = self.path.read_text()
            acquired_at = self.path.stat().st_mtime
        except OSError as e:
            logger.warning("Cannot read portals file %s: %s", self.path, e)
            return {}

        portals: dict[str, Credential] = {}
        current: str | None = None
        current_data: dict[str, str] = {}

        def flush() -> None:
            if current and current_data.get("token") and self._is_portal_allowed(current):
                portals[current] = Credential(
                    portal=current,
                    token=current_data["token"],
                    acquired_at=acquired_at,
                )

        for line in content.splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            portal_match = _PORTAL_DIRECTIVE.match(line)
            if portal_match:
                flush()
                current = portal_match.group(1).lower()
                current_data = {}
                continue

            kv_match = _KEY_VALUE.match(line)
            if kv_match and current:
                current_data[kv_match.group(1).lower()] = kv_match.group(2).strip()

        flush()

        logger.info("Parsed %d portal(s) from %s", len(portals), self.path)
        return portals

    def _is_portal_allowed(self, name: str) -> bool:
        """Check if portal passes allowlist/blocklist filters."""
        # Allowlist takes precedence
        if self.allowlist:
            return name in self.allowlist

        if self.blocklist:
            return name not in self.blocklist

        return True
