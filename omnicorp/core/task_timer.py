from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from omnicorp.core.ledger import ResourceLedger


DEFAULT_TASK_DURATION_MS = 30_000
DEFAULT_TASK_REWARD = 10.0


@dataclass(frozen=True, slots=True)
class TaskProgress:
    time_elapsed: int
    time_remaining: int
    progress_percent: float
    is_complete: bool
    reward_amount: float
    duration: int


class TaskTimer:
    """Free-running repeating reward, independent of the economy."""

    def __init__(
        self,
        *,
        ledger: ResourceLedger,
        now_ms: Callable[[], int],
        duration_ms: int = DEFAULT_TASK_DURATION_MS,
        reward: float = DEFAULT_TASK_REWARD,
    ) -> None:
        if duration_ms <= 0:
            raise ValueError("Task duration must be positive")
        self._ledger = ledger
        self._now_ms = now_ms
        self.duration_ms = duration_ms
        self.reward = reward
        self.start_time: int = now_ms()

    def progress(self) -> TaskProgress:
        elapsed = self._now_ms() - self.start_time
        return TaskProgress(
            time_elapsed=elapsed,
            time_remaining=max(0, self.duration_ms - elapsed),
            progress_percent=min(100.0, 100.0 * elapsed / self.duration_ms),
            is_complete=elapsed >= self.duration_ms,
            reward_amount=self.reward,
            duration=self.duration_ms,
        )

    def complete_task(self) -> bool:
        if not self.progress().is_complete:
            return False
        self._ledger.add(self.reward)
        self.start_time = self._now_ms()
        return True
