"""Error taxonomy for remote execution."""


class CourierError(Exception):
    """Base class for all execution failures."""


class AuthMissingError(CourierError):
    """No usable session for the portal (HTTP 401 or no token at all)."""


class AuthExpiredError(CourierError):
    """Session token was rejected (HTTP 403); a refresh may recover it."""


class NetworkError(CourierError):
    """Request never produced an HTTP response."""


class ProtocolError(CourierError):
    """Portal answered with something the client cannot use."""


class RateLimitExceededError(CourierError):
    """Portal kept answering 429 after every retry was spent."""

    def __init__(self, key: str, attempts: int):
        self.key = key
        self.attempts = attempts
        super().__init__(
            f"Rate limit exceeded for {key} after {attempts} attempt(s) - "
            "please wait before making more requests"
        )


class JobFailedError(CourierError):
    """Collector reported a failure while the job was being polled."""


class ExecutionTimeoutError(CourierError):
    """Job was still pending after every poll attempt."""

    def __init__(self, attempts: int, interval: float):
        self.attempts = attempts
        self.interval = interval
        super().__init__(
            f"Execution timed out after {attempts} poll attempts "
            f"({attempts * interval:.0f}s)"
        )


class ExecutionCancelledError(CourierError):
    """Execution was cancelled before it reached a result."""

    def __init__(self, message: str = "Execution cancelled"):
        super().__init__(message)
