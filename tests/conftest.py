"""Shared fixtures for Courier MCP tests."""

from collections.abc import Iterator
from unittest.mock import AsyncMock, MagicMock

import pytest

from courier_mcp.models import Credential
from courier_mcp.services.state import reset_state

PORTAL = "acme.logicmonitor.com"


@pytest.fixture(autouse=True)
def clean_state() -> Iterator[None]:
    """Drop the global dependency container between tests."""
    reset_state()
    yield
    reset_state()


@pytest.fixture
def credential() -> Credential:
    return Credential(portal=PORTAL, token="token-1")


@pytest.fixture
def credentials(credential: Credential) -> MagicMock:
    """Credential provider mock that always has a cached token."""
    provider = MagicMock()
    provider.get_credential.return_value = credential
    provider.refresh_credential = AsyncMock(
        return_value=Credential(portal=PORTAL, token="token-2")
    )
    provider.rediscover = AsyncMock()
    return provider


@pytest.fixture
def no_credentials() -> MagicMock:
    """Credential provider mock with no session for any portal."""
    provider = MagicMock()
    provider.get_credential.return_value = None
    provider.refresh_credential = AsyncMock(return_value=None)
    provider.rediscover = AsyncMock()
    return provider


@pytest.fixture
def job_client() -> MagicMock:
    """Job client mock; tests set ``execute_and_poll`` behaviour."""
    client = MagicMock()
    client.execute_and_poll = AsyncMock(return_value="output")
    return client
