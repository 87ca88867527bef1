from __future__ import annotations

from dataclasses import dataclass

from omnicorp.api.models import ActionName, GameView
from omnicorp.game_session import GameSession


@dataclass(frozen=True, slots=True)
class ActionResult:
    ok: bool
    state: GameView


def _require_target(action: str, target_id: str | None) -> str:
    if not target_id:
        raise ValueError(f"{action} requires a target id")
    return target_id


def dispatch_action(*, session: GameSession, action: ActionName, target_id: str | None = None) -> ActionResult:
    """Entry point for the typed generic action endpoint.

    `ok` is False when the game refused the action (not affordable, already
    purchased, below the prestige threshold, task not finished). Malformed
    requests raise ValueError.
    """

    if action == "click":
        ok = session.click()
    elif action == "purchase_generator":
        ok = session.purchase_generator(_require_target(action, target_id))
    elif action == "purchase_upgrade":
        ok = session.purchase_upgrade(_require_target(action, target_id))
    elif action == "prestige":
        ok = session.perform_prestige()
    elif action == "complete_task":
        ok = session.complete_task()
    else:
        raise ValueError(f"Unknown action: {action}")

    return ActionResult(ok=ok, state=session.view())
