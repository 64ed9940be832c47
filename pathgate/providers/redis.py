from redis.asyncio.client import Redis as AIORedis


class AsyncRedisCounter:
    def __init__(self, redis: AIORedis):
        self._redis = redis

    @classmethod
    def from_url(cls, url: str) -> "AsyncRedisCounter":
        return cls(AIORedis.from_url(url))

    async def incr(self, key: str, ex: float) -> tuple[int, float]:
        # SET NX only creates the window, so INCR never extends its ttl
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.set(key, 0, px=max(int(ex * 1000), 1), nx=True)
            pipe.incr(key)
            pipe.pttl(key)
            _, count, pttl = await pipe.execute()
        return int(count), max(int(pttl), 0) / 1000

    async def clear(self, keyspace: str = "") -> None:
        if keyspace:
            keys = [key async for key in self._redis.scan_iter(match=f"{keyspace}*")]
            if keys:
                await self._redis.delete(*keys)
        else:
            await self._redis.flushdb()

    async def close(self) -> None:
        await self._redis.aclose()
