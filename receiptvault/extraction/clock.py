import time
from abc import ABC, abstractmethod


class Clock(ABC):
    """Time source for retry and polling loops."""

    @abstractmethod
    def monotonic(self) -> float:
        """Seconds from an arbitrary fixed point."""

    @abstractmethod
    def sleep(self, seconds: float) -> None:
        """Block for ``seconds``."""


class SystemClock(Clock):
    def monotonic(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)
