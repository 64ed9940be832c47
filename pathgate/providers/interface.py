from typing import Protocol, runtime_checkable


@runtime_checkable
class AsyncCounterProvider(Protocol):
    async def incr(self, key: str, ex: float) -> tuple[int, float]:
        """Increment the counter stored under key and return (count, ttl).

        A missing or expired counter starts over at 1 and lives for `ex`
        seconds; later increments do not extend its lifetime.
        The read-increment-write must be atomic per key.
        """
        ...

    async def clear(self, keyspace: str = "") -> None:
        """Clear all keys with the given prefix. If empty, clear all."""
        ...

    async def close(self) -> None:
        """Close the provider."""
        ...
