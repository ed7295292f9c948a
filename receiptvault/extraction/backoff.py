"""Backoff curves for analysis submission and result polling."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SubmitRetryPolicy:
    """Bounded retry for the analysis submission request.

    Delay before retry ``n`` (0-based index of the failed attempt) is
    ``base_delay * 2**n``: 1s, 2s, 4s, ...
    """

    attempts: int = 3
    base_delay: float = 1.0

    def delay_after(self, failed_attempt: int) -> float:
        return self.base_delay * (2**failed_attempt)


@dataclass(frozen=True)
class PollSchedule:
    """Polling intervals for an asynchronous analysis job.

    Steady-state intervals grow by ``growth_factor`` per poll; transport
    faults double the interval instead. Both curves are capped at
    ``max_interval`` and the whole loop at ``timeout`` seconds.
    """

    initial_interval: float = 0.5
    growth_factor: float = 1.5
    max_interval: float = 4.0
    timeout: float = 30.0

    def after_poll(self, interval: float) -> float:
        return min(interval * self.growth_factor, self.max_interval)

    def after_fault(self, interval: float) -> float:
        return min(interval * 2, self.max_interval)
