"""Per-destination circuit breaker for one routing batch.

Calls are never retried. After ``failure_threshold`` consecutive failed
issue creations in a destination, the breaker opens for that destination
and stays open until ``reset()`` starts the next batch.
"""

from dataclasses import dataclass

from loguru import logger


@dataclass
class _DestinationState:
    consecutive_failures: int = 0
    total_failures: int = 0
    open: bool = False


class CircuitBreaker:
    """Skips destinations that keep failing for the rest of a batch."""

    def __init__(self, failure_threshold: int = 3):
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be >= 1")
        self._failure_threshold = failure_threshold
        self._states: dict[str, _DestinationState] = {}

    def _get(self, destination: str) -> _DestinationState:
        return self._states.setdefault(destination, _DestinationState())

    def is_open(self, destination: str) -> bool:
        return self._get(destination).open

    def open_destinations(self) -> list[str]:
        return sorted(d for d, s in self._states.items() if s.open)

    def record_success(self, destination: str) -> None:
        self._get(destination).consecutive_failures = 0

    def record_failure(self, destination: str) -> None:
        s = self._get(destination)
        s.consecutive_failures += 1
        s.total_failures += 1
        if not s.open and s.consecutive_failures >= self._failure_threshold:
            s.open = True
            logger.warning(
                f"CircuitBreaker: {destination} open for this batch "
                f"({s.consecutive_failures} consecutive failures)"
            )

    def reset(self) -> None:
        """Forget all state; called at the start of every batch."""
        if self.open_destinations():
            logger.info(f"CircuitBreaker: closing {', '.join(self.open_destinations())}")
        self._states.clear()
