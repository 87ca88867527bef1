from __future__ import annotations

import logging
import math
from collections import deque
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from omnicorp.core.events import NarrativeEvent, TriggerType


logger = logging.getLogger(__name__)

NarrativeListener = Callable[[NarrativeEvent], None]

STABILITY_MIN = 0.0
STABILITY_MAX = 100.0


@dataclass(frozen=True, slots=True)
class NarrativeStatistics:
    total_events: int
    viewed_events: int
    societal_stability: float
    pending_events: int
    decay_factor: float


class NarrativeEngine:
    """Matches economic/time signals against a fixed catalog of story events.

    Firing an event marks it viewed, records it, nudges societal stability
    (clamped to [0, 100]), queues it for display and notifies listeners
    synchronously in registration order. Listeners must not mutate narrative
    state; a listener that raises is logged and skipped.
    """

    def __init__(self, events: Iterable[NarrativeEvent], *, now_ms: Callable[[], int]) -> None:
        self._events: list[NarrativeEvent] = list(events)
        self._by_id: dict[str, NarrativeEvent] = {e.id: e for e in self._events}
        self._now_ms = now_ms
        self._listeners: list[NarrativeListener] = []

        self.viewed_events: list[str] = []
        self.societal_stability: float = STABILITY_MAX
        self.pending_events: deque[NarrativeEvent] = deque()
        self.game_start_time: int = now_ms()

        # Trigger bookkeeping; both are persisted with the save.
        self.has_triggered_game_start: bool = False
        self.last_content_units_check: float = 0.0

    @property
    def events(self) -> tuple[NarrativeEvent, ...]:
        return tuple(self._events)

    def get(self, event_id: str) -> NarrativeEvent | None:
        return self._by_id.get(event_id)

    # ------------------------------------------------------------------
    # Subscribers
    # ------------------------------------------------------------------

    def subscribe(self, callback: NarrativeListener) -> None:
        self._listeners.append(callback)

    def unsubscribe(self, callback: NarrativeListener) -> None:
        try:
            self._listeners.remove(callback)
        except ValueError:
            pass

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def check_trigger(
        self,
        trigger_type: TriggerType,
        value: float | None = None,
        condition: str | None = None,
    ) -> list[NarrativeEvent]:
        eligible = [
            e for e in self._events if e.matches(trigger_type=trigger_type, value=value, condition=condition)
        ]
        # sorted() is stable, so equal priorities keep catalog order.
        eligible = sorted(eligible, key=lambda e: -e.priority)

        for event in eligible:
            self._fire(event)
        return eligible

    def _fire(self, event: NarrativeEvent) -> None:
        event.is_viewed = True
        self.viewed_events.append(event.id)
        self.societal_stability = min(
            STABILITY_MAX,
            max(STABILITY_MIN, self.societal_stability + event.societal_stability_impact),
        )
        self.pending_events.append(event)

        logger.info("Narrative event fired: %s (stability %.1f%%)", event.title, self.societal_stability)

        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Narrative listener failed for event %s", event.id)

    def force_event(self, event_id: str) -> bool:
        """Fire an event by id regardless of its trigger. Still one-shot."""

        event = self._by_id.get(event_id)
        if event is None or event.is_viewed:
            return False
        self._fire(event)
        return True

    # ------------------------------------------------------------------
    # Signals
    # ------------------------------------------------------------------

    def trigger_game_start(self) -> list[NarrativeEvent]:
        if self.has_triggered_game_start:
            return []
        self.has_triggered_game_start = True
        return self.check_trigger(TriggerType.game_start)

    def observe_content_units(self, amount: float) -> list[NarrativeEvent]:
        """Fire `contentUnits` only when the whole-unit count moved past the watermark."""

        if math.floor(amount) <= math.floor(self.last_content_units_check):
            return []
        fired = self.check_trigger(TriggerType.content_units, value=amount)
        self.last_content_units_check = amount
        return fired

    def time_elapsed(self) -> int:
        return self._now_ms() - self.game_start_time

    def observe_time_elapsed(self) -> list[NarrativeEvent]:
        return self.check_trigger(TriggerType.time_elapsed, value=self.time_elapsed())

    # ------------------------------------------------------------------
    # Display queue
    # ------------------------------------------------------------------

    def get_next_pending_event(self) -> NarrativeEvent | None:
        if not self.pending_events:
            return None
        return self.pending_events.popleft()

    def has_pending_events(self) -> bool:
        return bool(self.pending_events)

    # ------------------------------------------------------------------
    # Derived
    # ------------------------------------------------------------------

    @property
    def visual_decay_factor(self) -> float:
        """0 = pristine society, 1 = full decay. Consumed by the decay renderer."""

        return 1 - self.societal_stability / STABILITY_MAX

    def viewed_event_records(self) -> list[NarrativeEvent]:
        return [e for e in self._events if e.is_viewed]

    def statistics(self) -> NarrativeStatistics:
        return NarrativeStatistics(
            total_events=len(self._events),
            viewed_events=len(self.viewed_events),
            societal_stability=self.societal_stability,
            pending_events=len(self.pending_events),
            decay_factor=self.visual_decay_factor,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset_for_prestige(self) -> None:
        # Viewed events and stability carry over between runs.
        self.pending_events.clear()
        self.last_content_units_check = 0.0

    def restore(
        self,
        *,
        viewed_events: Iterable[str],
        societal_stability: float,
        game_start_time: int,
        has_triggered_game_start: bool,
        last_content_units_check: float,
    ) -> None:
        self.viewed_events = list(viewed_events)
        viewed = set(self.viewed_events)
        for event in self._events:
            event.is_viewed = event.id in viewed

        self.societal_stability = min(STABILITY_MAX, max(STABILITY_MIN, societal_stability))
        self.game_start_time = game_start_time
        self.has_triggered_game_start = has_triggered_game_start
        self.last_content_units_check = last_content_units_check
        self.pending_events.clear()
