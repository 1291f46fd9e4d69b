"""Dependency injection container for Courier MCP."""

from dataclasses import dataclass

import httpx

from courier_mcp.config import Config
from courier_mcp.protocols import CredentialProvider
from courier_mcp.services.credentials import FilePortalProvider
from courier_mcp.services.executor import ScriptExecutor
from courier_mcp.services.fanout import FanoutCoordinator
from courier_mcp.services.jobs import JobClient
from courier_mcp.services.ratelimit import RateLimiter


@dataclass
class Dependencies:
    """Container for Courier MCP dependencies.

    Holds configuration, the shared HTTP client and every service built on
    it. Pass this to functions/tools that need access to them.

    Example:
        deps = Dependencies.create()
        result = await deps.executor.execute(request)
    """

    config: Config
    http_client: httpx.AsyncClient
    rate_limiter: RateLimiter
    job_client: JobClient
    credentials: CredentialProvider
    executor: ScriptExecutor
    fanout: FanoutCoordinator

    @classmethod
    def create(cls) -> "Dependencies":
        """Create dependencies with configuration from the environment."""
        return cls.from_config(Config.from_env())

    @classmethod
    def from_config(
        cls,
        config: Config,
        credentials: CredentialProvider | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> "Dependencies":
        """Create dependencies with custom configuration.

        Args:
            config: Config instance
            credentials: Credential provider; defaults to the portals file
            http_client: HTTP client; defaults to one built from settings

        Returns:
            Dependencies with every service wired together
        """
        settings = config.settings
        if http_client is None:
            http_client = httpx.AsyncClient(
                timeout=settings.http_timeout,
                verify=settings.verify_ssl,
            )
        if credentials is None:
            credentials = FilePortalProvider(
                config.parser, max_age=settings.credential_max_age
            )

        rate_limiter = RateLimiter(
            throttle_threshold=settings.throttle_threshold,
            retry_options=config.retry_options,
        )
        job_client = JobClient(
            http_client,
            rate_limiter,
            api_version=settings.api_version,
            poll_interval=settings.poll_interval,
            max_attempts=settings.max_poll_attempts,
        )
        return cls(
            config=config,
            http_client=http_client,
            rate_limiter=rate_limiter,
            job_client=job_client,
            credentials=credentials,
            executor=ScriptExecutor(
                job_client, credentials, max_script_length=settings.max_script_length
            ),
            fanout=FanoutCoordinator(job_client, credentials),
        )

    async def cleanup(self) -> None:
        """Close the shared HTTP client."""
        await self.http_client.aclose()
