from pathgate.providers.interface import AsyncCounterProvider
from pathgate.providers.memory import AsyncInMemoryCounter

__all__ = [
    "AsyncCounterProvider",
    "AsyncInMemoryCounter",
]
