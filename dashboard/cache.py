import time
from typing import Callable


def epoch_millis() -> int:
    return int(time.time() * 1000)


class ConfigCache:
    """
    One cached config document and the time it was stored.

    An entry is fresh while its age is below ``duration_ms``. Stale entries are
    never refreshed in the background; the next read simply misses.
    """

    def __init__(self, duration_ms: int, clock: Callable[[], int] = epoch_millis):
        self.duration_ms = duration_ms
        self._clock = clock
        self.data: str | None = None
        self.timestamp = 0

    @property
    def age_ms(self) -> int:
        return self._clock() - self.timestamp

    def is_fresh(self) -> bool:
        return self.data is not None and self.age_ms < self.duration_ms

    def get(self) -> str | None:
        return self.data if self.is_fresh() else None

    def store(self, text: str) -> None:
        self.data = text
        self.timestamp = self._clock()

    def clear(self) -> None:
        self.data = None
        self.timestamp = 0
