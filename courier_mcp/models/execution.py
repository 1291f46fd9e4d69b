"""Script execution request and result models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from courier_mcp.models.target import Target

if TYPE_CHECKING:
    from courier_mcp.services.cancellation import CancellationToken


class Dialect(str, Enum):
    """Script interpreter selected on the collector."""

    GROOVY = "groovy"
    POWERSHELL = "powershell"


class ExecutionStatus(str, Enum):
    """Terminal status of an interactive execution."""

    COMPLETE = "complete"
    ERROR = "error"
    CANCELLED = "cancelled"


@dataclass
class ExecutionContext:
    """Device context injected into the groovy preamble."""

    hostname: str | None = None
    wildvalue: str | None = None
    datasource_id: str | None = None


@dataclass
class ExecutionRequest:
    """Interactive script execution on a single collector."""

    portal: str
    collector_id: int
    script: str
    dialect: Dialect = Dialect.GROOVY
    context: ExecutionContext = field(default_factory=ExecutionContext)
    execution_id: str | None = None
    cancel_token: "CancellationToken | None" = None

    @property
    def target(self) -> Target:
        return Target(portal=self.portal, collector_id=self.collector_id)


@dataclass
class ExecutionResult:
    """Result returned to the caller of an interactive execution."""

    id: str
    status: ExecutionStatus
    raw_output: str
    duration_ms: int
    start_time_ms: int
    error: str | None = None
    warnings: list[str] = field(default_factory=list)
