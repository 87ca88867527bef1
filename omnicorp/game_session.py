from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from omnicorp.api.models import SAVE_VERSION, GameView, SavedGame, SavedGenerator, SavedNarrative
from omnicorp.assets.registry import GameAssets, load_game_assets
from omnicorp.config import GameSettings
from omnicorp.core.events import NarrativeEvent, TriggerType
from omnicorp.core.game_view import project_view
from omnicorp.core.generators import GeneratorCatalog
from omnicorp.core.ledger import ResourceLedger
from omnicorp.core.narrative import NarrativeEngine
from omnicorp.core.prestige import PrestigeController, PrestigeState
from omnicorp.core.production import ProductionEngine
from omnicorp.core.task_timer import DEFAULT_TASK_DURATION_MS, DEFAULT_TASK_REWARD, TaskTimer
from omnicorp.core.upgrades import UpgradeCatalog


logger = logging.getLogger(__name__)

ViewListener = Callable[[GameView], None]

CLICK_VALUE = 1.0


def _now_ms() -> int:
    return int(datetime.now(tz=UTC).timestamp() * 1000)


class GameSession:
    """Explicit context object for one running economy.

    Owns one of each core component, performs the user actions (each one
    republishes the UI snapshot immediately) and converts to and from the
    persisted snapshot. Construct one per process, or one per test.
    """

    def __init__(
        self,
        *,
        assets: GameAssets | None = None,
        now_ms: Callable[[], int] = _now_ms,
        task_duration_ms: int = DEFAULT_TASK_DURATION_MS,
        task_reward: float = DEFAULT_TASK_REWARD,
    ) -> None:
        assets = assets or load_game_assets()
        self.now_ms = now_ms

        self.ledger = ResourceLedger(assets.resources)
        self.generators = GeneratorCatalog(assets.generators, ledger=self.ledger)
        self.upgrades = UpgradeCatalog(assets.upgrades, ledger=self.ledger, generators=self.generators)
        self.prestige_state = PrestigeState()
        self.narrative = NarrativeEngine(assets.narrative_events, now_ms=now_ms)
        self.production = ProductionEngine(
            ledger=self.ledger,
            generators=self.generators,
            upgrades=self.upgrades,
            prestige=self.prestige_state,
        )
        self.prestige = PrestigeController(
            state=self.prestige_state,
            ledger=self.ledger,
            generators=self.generators,
            upgrades=self.upgrades,
            narrative=self.narrative,
        )
        self.task_timer = TaskTimer(
            ledger=self.ledger,
            now_ms=now_ms,
            duration_ms=task_duration_ms,
            reward=task_reward,
        )

        # Mirrors the clock state for the UI snapshot; only GameClock sets it.
        self.is_running = False
        self.loaded_from_save = False
        self._view_listeners: list[ViewListener] = []

    @staticmethod
    def from_settings(settings: GameSettings, *, now_ms: Callable[[], int] = _now_ms) -> "GameSession":
        return GameSession(
            now_ms=now_ms,
            task_duration_ms=settings.task_duration_ms,
            task_reward=settings.task_reward,
        )

    # ------------------------------------------------------------------
    # Snapshot publishing
    # ------------------------------------------------------------------

    def subscribe_view(self, listener: ViewListener) -> None:
        self._view_listeners.append(listener)

    def unsubscribe_view(self, listener: ViewListener) -> None:
        if listener in self._view_listeners:
            self._view_listeners.remove(listener)

    def view(self) -> GameView:
        return project_view(self)

    def publish(self) -> GameView:
        view = self.view()
        for listener in list(self._view_listeners):
            try:
                listener(view)
            except Exception:
                logger.exception("View listener failed")
        return view

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    def click(self) -> bool:
        self.ledger.add(CLICK_VALUE * self.prestige_state.global_multiplier)
        self.narrative.check_trigger(TriggerType.content_units, value=self.ledger.current)
        self.publish()
        return True

    def purchase_generator(self, generator_id: str) -> bool:
        ok = self.generators.purchase(generator_id)
        if ok:
            self.narrative.check_trigger(TriggerType.generator_purchase, condition=generator_id)
        self.publish()
        return ok

    def purchase_upgrade(self, upgrade_id: str) -> bool:
        ok = self.upgrades.purchase(upgrade_id)
        if ok:
            self.narrative.check_trigger(TriggerType.upgrade, condition=upgrade_id)
        self.publish()
        return ok

    def perform_prestige(self) -> bool:
        ok = self.prestige.perform_prestige()
        self.publish()
        return ok

    def complete_task(self) -> bool:
        ok = self.task_timer.complete_task()
        self.publish()
        return ok

    def next_pending_event(self) -> NarrativeEvent | None:
        event = self.narrative.get_next_pending_event()
        if event is not None:
            self.publish()
        return event

    # ------------------------------------------------------------------
    # Persistence mapping
    # ------------------------------------------------------------------

    def to_saved(self) -> SavedGame:
        primary = self.ledger.primary_id
        return SavedGame(
            version=SAVE_VERSION,
            timestamp=self.now_ms(),
            content_units=self.ledger.current,
            lifetime_content_units=self.ledger.lifetime_total,
            prestige_level=self.prestige_state.level,
            global_multiplier=self.prestige_state.global_multiplier,
            generators={gid: SavedGenerator(owned=n) for gid, n in self.generators.owned_counts().items()},
            purchased_upgrades=self.upgrades.purchased_ids(),
            narrative=SavedNarrative(
                viewed_events=list(self.narrative.viewed_events),
                societal_stability=self.narrative.societal_stability,
                game_start_time=self.narrative.game_start_time,
            ),
            has_triggered_game_start=self.narrative.has_triggered_game_start,
            task_start_time=self.task_timer.start_time,
            last_content_units_check=self.narrative.last_content_units_check,
            resources={r.id: r.current for r in self.ledger if r.id != primary},
        )

    def apply_saved(self, saved: SavedGame) -> None:
        self.ledger.set_amount(
            self.ledger.primary_id,
            saved.content_units,
            lifetime=saved.lifetime_content_units,
        )
        for resource_id, amount in saved.resources.items():
            if resource_id != self.ledger.primary_id:
                self.ledger.set_amount(resource_id, amount)

        self.prestige_state.level = saved.prestige_level

        self.generators.reset()
        self.generators.restore_owned({gid: g.owned for gid, g in saved.generators.items()})
        self.upgrades.restore_purchased(saved.purchased_upgrades)

        narrative = saved.narrative
        self.narrative.restore(
            viewed_events=narrative.viewed_events if narrative else self.narrative.viewed_events,
            societal_stability=narrative.societal_stability if narrative else self.narrative.societal_stability,
            game_start_time=narrative.game_start_time if narrative else self.narrative.game_start_time,
            has_triggered_game_start=saved.has_triggered_game_start,
            last_content_units_check=saved.last_content_units_check,
        )

        self.task_timer.start_time = saved.task_start_time if saved.task_start_time is not None else self.now_ms()
        self.loaded_from_save = True
