from __future__ import annotations

import asyncio

import fakeredis
import pytest
from fastapi.testclient import TestClient

from omnicorp.game_session import GameSession
from omnicorp.websocket_hub import GameWebSocketHub


def test_ws_game_updates_broadcast(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis

    with client.websocket_connect("/ws/game") as ws:
        # Trigger a state change (manual click)
        res = client.post("/game/click")
        assert res.status_code == 200

        msg = ws.receive_json()
        assert msg["type"] == "game_updated"
        assert msg["state"]["contentUnits"] == 1
        assert msg["state"]["narrative"]["pendingEvents"][0]["id"] == "firstClick"


def test_ws_disconnect_removes_connection(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    hub = client.app.state.runtime.hub  # type: ignore[attr-defined]

    with client.websocket_connect("/ws/game") as ws:
        client.post("/game/click")
        ws.receive_json()
        assert hub.connection_count == 1

    # Further updates go nowhere and do not fail.
    assert client.post("/game/click").json()["ok"] is True


class _RecordingSocket:
    def __init__(self) -> None:
        self.sent: list[dict[str, object]] = []

    async def accept(self) -> None:
        return None

    async def send_json(self, payload: dict[str, object]) -> None:
        await asyncio.sleep(0)
        self.sent.append(payload)


@pytest.mark.asyncio
async def test_rapid_updates_collapse_into_latest_view(session: GameSession) -> None:
    hub = GameWebSocketHub()
    ws = _RecordingSocket()
    await hub.connect(ws)  # type: ignore[arg-type]
    session.subscribe_view(hub.publish_soon)

    for _ in range(50):
        session.click()

    for _ in range(10):
        await asyncio.sleep(0)

    assert len(ws.sent) == 1
    assert ws.sent[0]["state"]["contentUnits"] == 50  # type: ignore[index]

    session.click()
    for _ in range(10):
        await asyncio.sleep(0)

    assert len(ws.sent) == 2
    assert ws.sent[1]["state"]["contentUnits"] == 51  # type: ignore[index]
