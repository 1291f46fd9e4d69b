"""Multi-collector debug command models."""

from dataclasses import dataclass, field


@dataclass
class DebugCommandRequest:
    """Debug command to run on several collectors of one portal."""

    portal: str
    collector_ids: list[int]
    command: str
    parameters: dict[str, str] = field(default_factory=dict)
    positional_args: list[str] = field(default_factory=list)
    execution_id: str | None = None


@dataclass
class TargetResult:
    """Result from a single collector in a fan-out operation."""

    collector_id: int
    success: bool
    output: str = ""
    error: str | None = None
    cancelled: bool = False
    duration_ms: int = 0
