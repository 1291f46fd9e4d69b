"""Remote job polling models."""

from dataclasses import dataclass
from enum import Enum


class JobStatus(str, Enum):
    """Status reported by a single poll."""

    PENDING = "pending"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass(frozen=True)
class PollResult:
    """Outcome of polling a submitted job once."""

    status: JobStatus
    output: str = ""
    error_message: str | None = None

    @classmethod
    def pending(cls) -> "PollResult":
        return cls(status=JobStatus.PENDING)

    @classmethod
    def complete(cls, output: str) -> "PollResult":
        return cls(status=JobStatus.COMPLETE, output=output)

    @classmethod
    def failed(cls, message: str) -> "PollResult":
        return cls(status=JobStatus.FAILED, error_message=message)
