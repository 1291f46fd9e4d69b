"""Tests for dependency injection container."""

from unittest.mock import MagicMock

import httpx
import pytest

from courier_mcp.config import Config
from courier_mcp.dependencies import Dependencies
from courier_mcp.services import get_dependencies, set_dependencies
from courier_mcp.services.credentials import FilePortalProvider


class TestDependencies:
    """Test Dependencies container."""

    def test_from_config_wires_services(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COURIER_MAX_POLL_ATTEMPTS", "5")
        monkeypatch.setenv("COURIER_THROTTLE_THRESHOLD", "4")
        config = Config.from_env()

        deps = Dependencies.from_config(config)

        assert deps.config is config
        assert isinstance(deps.http_client, httpx.AsyncClient)
        assert isinstance(deps.credentials, FilePortalProvider)
        assert deps.job_client.max_attempts == 5
        assert deps.rate_limiter.throttle_threshold == 4
        assert deps.executor.job_client is deps.job_client
        assert deps.fanout.job_client is deps.job_client
        assert deps.executor.credentials is deps.fanout.credentials

    def test_custom_credentials_and_client(self) -> None:
        provider = MagicMock()
        client = httpx.AsyncClient()

        deps = Dependencies.from_config(Config.from_env(), credentials=provider, http_client=client)

        assert deps.credentials is provider
        assert deps.executor.credentials is provider
        assert deps.http_client is client
        assert deps.job_client.client is client

    @pytest.mark.asyncio
    async def test_cleanup_closes_client(self) -> None:
        deps = Dependencies.create()

        await deps.cleanup()

        assert deps.http_client.is_closed


class TestState:
    """Tests for the global container."""

    def test_get_dependencies_is_cached(self) -> None:
        assert get_dependencies() is get_dependencies()

    def test_set_dependencies(self) -> None:
        deps = MagicMock()
        set_dependencies(deps)

        assert get_dependencies() is deps
