from pathgate.errors import PathgateError


class ThrottlerError(PathgateError):
    """Base class for throttler-related errors."""
    pass


class QuotaExceedsError(ThrottlerError):
    """Raised when a client exceeds its rate limit quota."""

    time_remains: float

    def __init__(self, identity: str, quota: int, duration_s: float, time_remains: float):
        msg = f"Rate limit exceeded for {identity}: {quota} requests allowed per {duration_s:g} seconds, retry after {time_remains:.2f}s"
        self.identity = identity
        self.quota = quota
        self.duration_s = duration_s
        self.time_remains = time_remains
        super().__init__(msg)
