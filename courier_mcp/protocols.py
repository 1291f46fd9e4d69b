"""Protocol interfaces for dependency inversion.

Session and portal discovery live outside the execution core. Anything that
can hand out portal tokens plugs in through ``CredentialProvider``.

Usage Example:

    from courier_mcp.protocols import CredentialProvider

    class BrowserSessionProvider:
        def get_credential(self, portal):
            return self._cache.get(portal)

        async def refresh_credential(self, portal):
            return await self._handshake(portal)

        async def rediscover(self):
            await self._scan_sessions()

    executor = ScriptExecutor(job_client, BrowserSessionProvider())
"""

from typing import Protocol, runtime_checkable

from courier_mcp.models import Credential


@runtime_checkable
class CredentialProvider(Protocol):
    """Protocol for portal credential sources.

    ``get_credential`` must not block: it only reads what is cached.
    The async methods may perform network I/O and may fail by returning
    None (refresh) or leaving the cache unchanged (rediscover).
    """

    def get_credential(self, portal: str) -> Credential | None:
        """Return the cached credential for a portal, if any."""
        ...

    async def refresh_credential(self, portal: str) -> Credential | None:
        """Actively re-acquire the credential for a portal.

        Returns:
            Fresh credential, or None if re-acquisition failed
        """
        ...

    async def rediscover(self) -> None:
        """Re-enumerate every known portal and session."""
        ...
