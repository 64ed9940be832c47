from pathgate.providers import AsyncCounterProvider, AsyncInMemoryCounter
from pathgate.providers.redis import AsyncRedisCounter
from pathgate.throttler.interface import AsyncThrottleHandler, CountDown


class AsyncDefaultHandler(AsyncThrottleHandler):
    def __init__(self, counter: AsyncCounterProvider | None = None):
        # an empty counter is falsy (it defines __len__)
        self._counter = counter if counter is not None else AsyncInMemoryCounter()

    async def fixed_window(self, key: str, quota: int, duration: float) -> tuple[int, CountDown]:
        # rejected requests are charged too, the count is never rolled back
        count, ttl = await self._counter.incr(key, duration)
        if count > quota:
            return count, ttl
        return count, -1

    async def clear(self, keyspace: str = ""):
        await self._counter.clear(keyspace)

    async def close(self) -> None:
        await self._counter.close()


class AsyncRedisHandler(AsyncDefaultHandler):
    """Counters shared by every gateway instance pointing at the same redis."""

    def __init__(self, counter: AsyncRedisCounter):
        super().__init__(counter)

    @classmethod
    def from_url(cls, url: str) -> "AsyncRedisHandler":
        return cls(AsyncRedisCounter.from_url(url))
