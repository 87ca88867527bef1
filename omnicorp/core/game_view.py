from __future__ import annotations

from typing import TYPE_CHECKING

from omnicorp.api.models import (
    GameView,
    GeneratorView,
    NarrativeEventView,
    NarrativeView,
    PrestigeView,
    ResourceView,
    TaskProgressView,
    UpgradeView,
)
from omnicorp.core.events import NarrativeEvent

if TYPE_CHECKING:
    from omnicorp.game_session import GameSession


def narrative_event_view(event: NarrativeEvent) -> NarrativeEventView:
    return NarrativeEventView(
        id=event.id,
        title=event.title,
        content=event.content,
        trigger_type=event.trigger_type.value,
        priority=event.priority,
        societal_stability_impact=event.societal_stability_impact,
    )


def project_view(session: GameSession) -> GameView:
    """Deterministic read-only projection of a session for the UI.

    Pure with respect to the session: nothing here mutates game state.
    """

    ledger = session.ledger
    generators = session.generators
    upgrades = session.upgrades
    narrative = session.narrative

    rates = session.production.rates()
    prestige = session.prestige.info()
    task = session.task_timer.progress()

    generator_views = [
        GeneratorView(
            id=g.id,
            name=g.name,
            category=g.category,
            owned=g.owned,
            cost=generators.cost(g.id),
            production_rate=session.production.generator_rate(g.id),
            can_afford=generators.can_purchase(g.id),
            is_unlocked=generators.is_unlocked(g.id),
            is_operating=g.owned > 0 and session.production.can_operate(g),
        )
        for g in generators
    ]

    upgrade_views = [
        UpgradeView(
            id=u.id,
            name=u.name,
            description=u.description,
            cost=u.cost,
            target_generator=u.target_generator,
            effect_type=u.effect_type.value,
            effect_value=u.effect_value,
            is_purchased=u.is_purchased,
            requirements_met=upgrades.requirements_met(u.id),
            can_purchase=upgrades.can_purchase(u.id),
        )
        for u in upgrades
    ]

    resource_views = [
        ResourceView(
            id=r.id,
            name=r.name,
            symbol=r.symbol,
            current=r.current,
            max=r.max,
            is_depletable=r.is_depletable,
            is_unlocked=generators.requirements_met(r.unlock_requirements),
            rate=rates.get(r.id, 0.0),
        )
        for r in ledger
    ]

    return GameView(
        is_running=session.is_running,
        content_units=ledger.current,
        lifetime_content_units=ledger.lifetime_total,
        formatted_content_units=ledger.format(),
        production_rate=rates.get(ledger.primary_id, 0.0),
        prestige=PrestigeView(
            level=prestige.level,
            global_multiplier=prestige.global_multiplier,
            threshold=prestige.threshold,
            can_prestige=prestige.can_prestige,
            next_multiplier=prestige.next_multiplier,
        ),
        generators=generator_views,
        upgrades=upgrade_views,
        resources=resource_views,
        narrative=NarrativeView(
            societal_stability=narrative.societal_stability,
            decay_factor=narrative.visual_decay_factor,
            pending_events=[narrative_event_view(e) for e in narrative.pending_events],
            viewed_events=list(narrative.viewed_events),
        ),
        task_progress=TaskProgressView(
            time_elapsed=task.time_elapsed,
            time_remaining=task.time_remaining,
            progress_percent=task.progress_percent,
            is_complete=task.is_complete,
            reward_amount=task.reward_amount,
            duration=task.duration,
        ),
    )
