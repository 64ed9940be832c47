from enum import Enum
from typing import Any, Protocol


class ILogger(Protocol):
    def error(self, msg: str, *args: Any, **kwargs: Any): ...

    def info(self, msg: str, *args: Any, **kwargs: Any): ...

    def debug(self, msg: str, *args: Any, **kwargs: Any): ...


class LowerNameEnum(Enum):
    @staticmethod
    def _generate_next_value_(name: str, _start: int, _count: int, _last_values: list[Any]):
        return name.lower()  # type: ignore
