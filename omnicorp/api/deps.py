from __future__ import annotations

from fastapi import Request, WebSocket

from omnicorp.game_session import GameSession
from omnicorp.runtime import GameRuntime


def get_runtime(request: Request) -> GameRuntime:
    return request.app.state.runtime


def get_ws_runtime(websocket: WebSocket) -> GameRuntime:
    return websocket.app.state.runtime


def get_session(request: Request) -> GameSession:
    return get_runtime(request).session
