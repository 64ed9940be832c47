import asyncio
import time
from typing import Callable, Dict


class AsyncInMemoryCounter:
    def __init__(self, timer_func: Callable[[], float] = time.monotonic):
        self._counts: Dict[str, int] = {}
        self._expiry: Dict[str, float] = {}
        self._timer_func = timer_func
        self._lock = asyncio.Lock()
        self._next_sweep: float | None = None

    def _sweep(self, now: float, ex: float) -> None:
        if self._next_sweep is not None and now <= self._next_sweep:
            return
        expired = [k for k, expires_at in self._expiry.items() if now > expires_at]
        for k in expired:
            self._counts.pop(k, None)
            self._expiry.pop(k, None)
        self._next_sweep = now + ex

    async def incr(self, key: str, ex: float) -> tuple[int, float]:
        async with self._lock:
            now = self._timer_func()
            # at most one full scan per window length
            self._sweep(now, ex)
            expires_at = self._expiry.get(key)

            if expires_at is None or now > expires_at:
                # window over, start a new one at this request
                expires_at = now + ex
                self._expiry[key] = expires_at
                self._counts[key] = 0

            count = self._counts[key] + 1
            self._counts[key] = count
            return count, max(expires_at - now, 0.0)

    async def clear(self, keyspace: str = "") -> None:
        async with self._lock:
            if not keyspace:
                self._counts.clear()
                self._expiry.clear()
            else:
                keys = [k for k in self._counts if k.startswith(keyspace)]
                for k in keys:
                    self._counts.pop(k, None)
                    self._expiry.pop(k, None)

    def __len__(self) -> int:
        return len(self._counts)

    async def close(self) -> None:
        pass
