"""Credential acquisition and the file-backed portal provider."""

import logging
from typing import TYPE_CHECKING

from courier_mcp.models import Credential

if TYPE_CHECKING:
    from courier_mcp.config.parser import PortalsFileParser
    from courier_mcp.protocols import CredentialProvider

logger = logging.getLogger(__name__)


async def acquire_credential(
    provider: "CredentialProvider",
    portal: str,
) -> Credential | None:
    """Get a credential for a portal with multi-level fallback.

    1. Cached credential
    2. Active refresh for this portal
    3. Full rediscovery, then one more cache read

    Returns:
        Credential, or None if every level failed
    """
    credential = provider.get_credential(portal)
    if credential is not None:
        logger.debug("Using cached credential for %s", portal)
        return credential

    logger.info("No cached credential for %s, attempting refresh", portal)
    credential = await provider.refresh_credential(portal)
    if credential is not None:
        logger.info("Credential for %s refreshed", portal)
        return credential

    logger.info("Credential refresh for %s failed, rediscovering portals", portal)
    await provider.rediscover()

    credential = provider.get_credential(portal)
    if credential is not None:
        logger.info("Credential for %s acquired after rediscovery", portal)
        return credential

    logger.warning("Failed to acquire credential for %s after all attempts", portal)
    return None


class FilePortalProvider:
    """Credential provider backed by the portals token file.

    The cache is loaded lazily on first use. Refresh and rediscovery both
    re-read the file, so rotating a token only requires rewriting it.
    """

    def __init__(self, parser: "PortalsFileParser", max_age: int = 600) -> None:
        """Initialize provider.

        Args:
            parser: Portals file parser
            max_age: Seconds after which a cached credential is considered
                stale and not served from cache (0 disables)
        """
        self.parser = parser
        self.max_age = max_age
        self._cache: dict[str, Credential] | None = None

    def _portals(self) -> dict[str, Credential]:
        if self._cache is None:
            self._cache = self.parser.parse()
        return self._cache

    @property
    def portals(self) -> list[str]:
        """Hostnames of all known portals."""
        return sorted(self._portals())

    def get_credential(self, portal: str) -> Credential | None:
        credential = self._portals().get(portal.lower())
        if credential is None:
            return None
        if self.max_age and credential.age > self.max_age:
            logger.debug("Cached credential for %s is stale (%s)", portal, credential)
            return None
        return credential

    async def refresh_credential(self, portal: str) -> Credential | None:
        fresh = self.parser.parse()
        credential = fresh.get(portal.lower())
        if credential is None:
            return None
        # Single synchronous write; other portals keep their cached entries
        self._portals()[portal.lower()] = credential
        return credential

    async def rediscover(self) -> None:
        portals = self.parser.parse()
        removed = set(self._portals()) - set(portals)
        if removed:
            logger.info("Portals no longer configured: %s", ", ".join(sorted(removed)))
        self._cache = portals
