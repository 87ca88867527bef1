from __future__ import annotations

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


SAVE_VERSION = "1.0.0"


class CamelModel(BaseModel):
    """Snake-case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SavedModel(CamelModel):
    """Persisted snapshot models. NaN and infinities are rejected."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, allow_inf_nan=False)


class ClockPhase(StrEnum):
    stopped = "stopped"
    running = "running"


# ---------------------------------------------------------------------------
# Persisted snapshot
# ---------------------------------------------------------------------------


class SavedGenerator(SavedModel):
    owned: int = Field(..., ge=0)


class SavedNarrative(SavedModel):
    viewed_events: list[str] = Field(default_factory=list)
    societal_stability: float = Field(default=100.0, ge=0, le=100)
    game_start_time: int = Field(..., ge=0)


class SavedGame(SavedModel):
    """Serialized form written to the save slot.

    Only what cannot be derived is stored: generator definitions come from the
    catalog, so a generator entry is just its owned count. `global_multiplier`
    is derived from the prestige level and stored so a reader can sanity-check it.
    """

    version: str = SAVE_VERSION
    timestamp: int = Field(default=0, ge=0)

    content_units: float = Field(..., ge=0)
    lifetime_content_units: float = Field(..., ge=0)
    prestige_level: int = Field(..., ge=0)
    global_multiplier: float = Field(default=1.0, ge=1)

    generators: dict[str, SavedGenerator] = Field(default_factory=dict)
    purchased_upgrades: list[str] = Field(default_factory=list)
    narrative: SavedNarrative | None = None

    has_triggered_game_start: bool = False
    task_start_time: int | None = None
    last_content_units_check: float = Field(default=0.0, ge=0)

    # Non-primary resource quantities.
    resources: dict[str, float] = Field(default_factory=dict)


class SaveMetadata(SavedModel):
    version: str
    timestamp: int


# ---------------------------------------------------------------------------
# UI-facing snapshot (read-only projection, published every tick)
# ---------------------------------------------------------------------------


class ViewModel(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class ResourceView(ViewModel):
    id: str
    name: str
    symbol: str
    current: float
    max: float | None = None
    is_depletable: bool
    is_unlocked: bool
    rate: float


class GeneratorView(ViewModel):
    id: str
    name: str
    category: str
    owned: int
    cost: int
    production_rate: float
    can_afford: bool
    is_unlocked: bool
    is_operating: bool


class UpgradeView(ViewModel):
    id: str
    name: str
    description: str
    cost: float
    target_generator: str | None
    effect_type: str
    effect_value: float
    is_purchased: bool
    requirements_met: bool
    can_purchase: bool


class PrestigeView(ViewModel):
    level: int
    global_multiplier: float
    threshold: float
    can_prestige: bool
    next_multiplier: float


class NarrativeEventView(ViewModel):
    id: str
    title: str
    content: str
    trigger_type: str
    priority: int
    societal_stability_impact: float


class NarrativeView(ViewModel):
    societal_stability: float
    decay_factor: float
    pending_events: list[NarrativeEventView]
    viewed_events: list[str]


class TaskProgressView(ViewModel):
    time_elapsed: int
    time_remaining: int
    progress_percent: float
    is_complete: bool
    reward_amount: float
    duration: int


class GameView(ViewModel):
    is_running: bool
    content_units: float
    lifetime_content_units: float
    formatted_content_units: str
    production_rate: float
    prestige: PrestigeView
    generators: list[GeneratorView]
    upgrades: list[UpgradeView]
    resources: list[ResourceView]
    narrative: NarrativeView
    task_progress: TaskProgressView


# ---------------------------------------------------------------------------
# API envelopes
# ---------------------------------------------------------------------------


ActionName = Literal["click", "purchase_generator", "purchase_upgrade", "prestige", "complete_task"]


class ActionRequest(CamelModel):
    action: ActionName
    target_id: str | None = None


class ActionResponse(CamelModel):
    ok: bool
    state: GameView


class NextEventResponse(CamelModel):
    event: NarrativeEventView | None = None


class SaveResponse(CamelModel):
    ok: bool
