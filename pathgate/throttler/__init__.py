from pathgate.throttler.errors import QuotaExceedsError
from pathgate.throttler.handler import AsyncDefaultHandler, AsyncRedisHandler
from pathgate.throttler.interface import Admission, AsyncThrottleHandler, KeyMaker
from pathgate.throttler.throttler import Throttler

__all__ = [
    "Admission",
    "AsyncDefaultHandler",
    "AsyncRedisHandler",
    "AsyncThrottleHandler",
    "KeyMaker",
    "QuotaExceedsError",
    "Throttler",
]
