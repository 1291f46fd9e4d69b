"""Collector target and portal credential models."""

import time
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Target:
    """A collector reachable through a portal."""

    portal: str
    collector_id: int

    @property
    def label(self) -> str:
        """Short identifier used in logs and error messages."""
        return f"{self.portal}#{self.collector_id}"


@dataclass
class Credential:
    """Session token scoped to one portal.

    Tokens are short-lived and rotated out-of-band, so holders must expect
    them to be rejected at any time.
    """

    portal: str
    token: str
    acquired_at: float = field(default_factory=time.time)

    @property
    def age(self) -> float:
        """Seconds since the token was acquired."""
        return time.time() - self.acquired_at

    def __repr__(self) -> str:
        return f"Credential(portal={self.portal!r}, age={self.age:.0f}s)"
