"""Tests for credential acquisition and the portals file provider."""

import os
import time
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from courier_mcp.config.parser import PortalsFileParser
from courier_mcp.models import Credential
from courier_mcp.protocols import CredentialProvider
from courier_mcp.services.credentials import FilePortalProvider, acquire_credential

PORTAL = "acme.logicmonitor.com"


def _write(path: Path, tokens: dict[str, str]) -> None:
    path.write_text(
        "".join(f"Portal {name}\n    Token {token}\n\n" for name, token in tokens.items())
    )


class TestAcquireCredential:
    """Tests for the three-level acquisition cascade."""

    @pytest.mark.asyncio
    async def test_cached(self, credentials: MagicMock, credential: Credential) -> None:
        result = await acquire_credential(credentials, PORTAL)

        assert result is credential
        credentials.refresh_credential.assert_not_awaited()
        credentials.rediscover.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_refresh_when_not_cached(self, credentials: MagicMock) -> None:
        credentials.get_credential.return_value = None

        result = await acquire_credential(credentials, PORTAL)

        assert result is not None
        assert result.token == "token-2"
        credentials.rediscover.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rediscover_as_last_resort(self, credential: Credential) -> None:
        provider = MagicMock()
        provider.get_credential.side_effect = [None, credential]
        provider.refresh_credential = AsyncMock(return_value=None)
        provider.rediscover = AsyncMock()

        result = await acquire_credential(provider, PORTAL)

        assert result is credential
        provider.rediscover.assert_awaited_once()
        assert provider.get_credential.call_count == 2

    @pytest.mark.asyncio
    async def test_all_levels_fail(self, no_credentials: MagicMock) -> None:
        assert await acquire_credential(no_credentials, PORTAL) is None


class TestFilePortalProvider:
    """Tests for FilePortalProvider."""

    def test_satisfies_protocol(self, tmp_path: Path) -> None:
        provider = FilePortalProvider(PortalsFileParser(tmp_path / "portals"))

        assert isinstance(provider, CredentialProvider)

    def test_get_credential(self, tmp_path: Path) -> None:
        portals = tmp_path / "portals"
        _write(portals, {PORTAL: "abc"})
        provider = FilePortalProvider(PortalsFileParser(portals))

        credential = provider.get_credential("ACME.logicmonitor.com")

        assert credential is not None
        assert credential.token == "abc"
        assert provider.portals == [PORTAL]

    def test_unknown_portal(self, tmp_path: Path) -> None:
        portals = tmp_path / "portals"
        _write(portals, {PORTAL: "abc"})
        provider = FilePortalProvider(PortalsFileParser(portals))

        assert provider.get_credential("other.logicmonitor.com") is None

    def test_stale_credential_not_served(self, tmp_path: Path) -> None:
        portals = tmp_path / "portals"
        _write(portals, {PORTAL: "abc"})
        old = time.time() - 3600
        os.utime(portals, (old, old))
        provider = FilePortalProvider(PortalsFileParser(portals), max_age=600)

        assert provider.get_credential(PORTAL) is None

    def test_max_age_zero_never_stale(self, tmp_path: Path) -> None:
        portals = tmp_path / "portals"
        _write(portals, {PORTAL: "abc"})
        old = time.time() - 3600
        os.utime(portals, (old, old))
        provider = FilePortalProvider(PortalsFileParser(portals), max_age=0)

        assert provider.get_credential(PORTAL) is not None

    @pytest.mark.asyncio
    async def test_refresh_rereads_file(self, tmp_path: Path) -> None:
        portals = tmp_path / "portals"
        _write(portals, {PORTAL: "old", "other.logicmonitor.com": "keep"})
        provider = FilePortalProvider(PortalsFileParser(portals))
        assert provider.get_credential(PORTAL).token == "old"

        _write(portals, {PORTAL: "new"})
        refreshed = await provider.refresh_credential(PORTAL)

        assert refreshed is not None
        assert refreshed.token == "new"
        assert provider.get_credential(PORTAL).token == "new"
        # Only the refreshed portal changes
        assert provider.get_credential("other.logicmonitor.com").token == "keep"

    @pytest.mark.asyncio
    async def test_refresh_missing_portal(self, tmp_path: Path) -> None:
        portals = tmp_path / "portals"
        _write(portals, {PORTAL: "abc"})
        provider = FilePortalProvider(PortalsFileParser(portals))

        assert await provider.refresh_credential("gone.logicmonitor.com") is None

    @pytest.mark.asyncio
    async def test_rediscover_replaces_cache(self, tmp_path: Path) -> None:
        portals = tmp_path / "portals"
        _write(portals, {PORTAL: "abc", "old.logicmonitor.com": "x"})
        provider = FilePortalProvider(PortalsFileParser(portals))
        assert len(provider.portals) == 2

        _write(portals, {PORTAL: "abc", "new.logicmonitor.com": "y"})
        await provider.rediscover()

        assert provider.portals == [PORTAL, "new.logicmonitor.com"]
        assert provider.get_credential("old.logicmonitor.com") is None
