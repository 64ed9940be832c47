from pathgate._logs import logger as default_logger
from pathgate.interface import ILogger
from pathgate.throttler.errors import QuotaExceedsError
from pathgate.throttler.handler import AsyncDefaultHandler
from pathgate.throttler.interface import Admission, AsyncThrottleHandler


class Throttler:
    """
    Fixed window admission gate keyed by client identity
    """

    _aiohandler: AsyncThrottleHandler
    _keyspace: str

    def __init__(
        self,
        handler: AsyncThrottleHandler | None = None,
        keyspace: str = "pathgate:throttler",
        logger: ILogger | None = None,
    ):
        self._aiohandler = handler or AsyncDefaultHandler()
        self._keyspace = keyspace
        self._logger = logger or default_logger

    @property
    def keyspace(self) -> str:
        return self._keyspace

    def make_key(self, identity: str) -> str:
        return f"{self._keyspace}:fixed_window:{identity}"

    async def admit(self, identity: str, quota: int, duration: float) -> Admission:
        count, countdown = await self._aiohandler.fixed_window(
            self.make_key(identity), quota=quota, duration=duration
        )
        if countdown == -1:
            return Admission(admitted=True, count=count, quota=quota, reset_after=0.0)

        self._logger.info(
            "Rate limit exceeded for %s (%d/%d)", identity, count, quota
        )
        return Admission(
            admitted=False, count=count, quota=quota, reset_after=countdown
        )

    async def ensure(self, identity: str, quota: int, duration: float) -> Admission:
        admission = await self.admit(identity, quota, duration)
        if not admission.admitted:
            raise QuotaExceedsError(identity, quota, duration, admission.reset_after)
        return admission

    async def clear(self, keyspace: str | None = None):
        if keyspace is None:
            keyspace = self._keyspace
        await self._aiohandler.clear(keyspace)

    async def close(self) -> None:
        await self._aiohandler.close()
