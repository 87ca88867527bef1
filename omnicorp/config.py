from __future__ import annotations

import os
from dataclasses import dataclass

from omnicorp.core.task_timer import DEFAULT_TASK_DURATION_MS, DEFAULT_TASK_REWARD


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e
    if value <= 0:
        raise ValueError(f"{name} must be positive")
    return value


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().casefold() in {"1", "true", "yes", "on"}


@dataclass(frozen=True, slots=True)
class GameSettings:
    tick_ms: int = 100
    autosave_ms: int = 5_000
    task_duration_ms: int = DEFAULT_TASK_DURATION_MS
    task_reward: float = DEFAULT_TASK_REWARD
    save_key: str = "omnicorp:save"
    narrative_stream_key: str = "omnicorp:narrative"
    # Start the clock as soon as the app boots.
    autostart: bool = True

    @staticmethod
    def from_env() -> "GameSettings":
        return GameSettings(
            tick_ms=_env_int("OMNICORP_TICK_MS", 100),
            autosave_ms=_env_int("OMNICORP_AUTOSAVE_MS", 5_000),
            task_duration_ms=_env_int("OMNICORP_TASK_DURATION_MS", DEFAULT_TASK_DURATION_MS),
            task_reward=_env_float("OMNICORP_TASK_REWARD", DEFAULT_TASK_REWARD),
            save_key=os.environ.get("OMNICORP_SAVE_KEY", "omnicorp:save"),
            narrative_stream_key=os.environ.get("OMNICORP_NARRATIVE_STREAM", "omnicorp:narrative"),
            autostart=_env_bool("OMNICORP_AUTOSTART", True),
        )
