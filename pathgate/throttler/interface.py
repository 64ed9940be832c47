from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Literal

KeyMaker = Callable[[dict], str]
CountDown = Literal[-1] | float


@dataclass(frozen=True, slots=True, kw_only=True)
class Admission:
    admitted: bool
    count: int
    quota: int
    reset_after: float

    @property
    def remaining(self) -> int:
        return max(self.quota - self.count, 0)


class AsyncThrottleHandler(ABC):

    @abstractmethod
    async def fixed_window(self, key: str, quota: int, duration: float) -> tuple[int, CountDown]:
        """Charge one request to key.

        Returns the post-increment count and -1 when admitted, otherwise
        the seconds left before the window resets.
        """

    @abstractmethod
    async def clear(self, keyspace: str = "") -> None:
        pass

    @abstractmethod
    async def close(self) -> None:
        pass
