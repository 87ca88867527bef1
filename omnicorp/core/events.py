from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class TriggerType(StrEnum):
    game_start = "gameStart"
    content_units = "contentUnits"
    generator_purchase = "generatorPurchase"
    upgrade = "upgrade"
    prestige = "prestige"
    time_elapsed = "timeElapsed"


@dataclass(slots=True)
class NarrativeEvent:
    """A one-shot story beat.

    - `trigger_value`: numeric threshold; satisfied when the observed value is >= it.
    - `trigger_condition`: exact-match key (generator id, upgrade id, ...).
    - `is_viewed` only ever goes False -> True.
    """

    id: str
    title: str
    trigger_type: TriggerType
    content: str = ""
    trigger_value: float | None = None
    trigger_condition: str | None = None
    priority: int = 0
    societal_stability_impact: float = 0.0
    is_viewed: bool = False

    def matches(self, *, trigger_type: TriggerType, value: float | None, condition: str | None) -> bool:
        if self.is_viewed or self.trigger_type != trigger_type:
            return False
        if self.trigger_value is not None and (value is None or value < self.trigger_value):
            return False
        if self.trigger_condition is not None and condition != self.trigger_condition:
            return False
        return True
