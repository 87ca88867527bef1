from __future__ import annotations

import fakeredis
from fastapi.testclient import TestClient

from omnicorp.config import GameSettings
from omnicorp.main import create_app
from omnicorp.runtime import GameRuntime


def _runtime(client: TestClient) -> GameRuntime:
    return client.app.state.runtime  # type: ignore[attr-defined]


def test_healthcheck_and_info(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis

    assert client.get("/healthcheck").json() == {"status": "ok"}
    info = client.get("/info").json()
    assert info["name"] == "omnicorp-idle"


def test_get_game_returns_camel_case_view(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis

    resp = client.get("/game")
    assert resp.status_code == 200
    state = resp.json()

    assert state["isRunning"] is False
    assert state["contentUnits"] == 0
    assert state["formattedContentUnits"] == "0.00 HCU"
    assert state["prestige"]["threshold"] == 1000
    assert state["taskProgress"]["duration"] == 30_000
    assert {g["id"] for g in state["generators"]} >= {"basicAdBotFarm", "politicalPropaganda"}
    assert {r["id"] for r in state["resources"]} == {"hcu", "rd", "ha", "pt", "sc", "es", "aa"}


def test_click_then_buy_generator(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis

    for _ in range(10):
        resp = client.post("/game/click")
        assert resp.status_code == 200
        assert resp.json()["ok"] is True

    resp = client.post("/game/generators/basicAdBotFarm/purchase")
    body = resp.json()
    assert body["ok"] is True
    assert body["state"]["contentUnits"] == 0
    bot = next(g for g in body["state"]["generators"] if g["id"] == "basicAdBotFarm")
    assert bot["owned"] == 1
    assert bot["cost"] == 11


def test_refused_actions_return_ok_false(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis

    assert client.post("/game/generators/basicAdBotFarm/purchase").json()["ok"] is False
    assert client.post("/game/generators/noSuchThing/purchase").json()["ok"] is False
    assert client.post("/game/upgrades/automatedContentScript/purchase").json()["ok"] is False
    assert client.post("/game/prestige").json()["ok"] is False
    assert client.post("/game/task/complete").json()["ok"] is False


def test_prestige_via_api(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    _runtime(client).session.ledger.add(1000)

    body = client.post("/game/prestige").json()
    assert body["ok"] is True
    assert body["state"]["prestige"]["level"] == 1
    assert body["state"]["prestige"]["threshold"] == 10_000
    assert body["state"]["lifetimeContentUnits"] == 1000


def test_generic_action_endpoint(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    _runtime(client).session.ledger.add(10)

    resp = client.post("/game/actions", json={"action": "purchase_generator", "targetId": "basicAdBotFarm"})
    assert resp.status_code == 200
    assert resp.json()["ok"] is True


def test_generic_action_endpoint_rejects_bad_requests(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis

    # Missing target for a targeted action.
    resp = client.post("/game/actions", json={"action": "purchase_upgrade"})
    assert resp.status_code == 422
    assert "target" in resp.json()["detail"]

    # Not one of the known actions: rejected by request validation.
    resp = client.post("/game/actions", json={"action": "sell_everything"})
    assert resp.status_code == 422


def test_narrative_next_pops_fifo(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis

    client.post("/game/click")
    first = client.get("/game/narrative/next").json()
    assert first["event"]["id"] == "firstClick"
    assert first["event"]["triggerType"] == "contentUnits"

    assert client.get("/game/narrative/next").json() == {"event": None}


def test_start_and_stop(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis

    started = client.post("/game/start").json()
    assert started["isRunning"] is True
    assert started["narrative"]["pendingEvents"][0]["id"] == "gameStart"

    stopped = client.post("/game/stop").json()
    assert stopped["isRunning"] is False


def test_save_metadata_and_clear(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, r = client_and_redis

    assert client.get("/game/save/metadata").status_code == 404

    assert client.post("/game/save").json() == {"ok": True}
    assert r.exists("omnicorp:save")

    meta = client.get("/game/save/metadata").json()
    assert meta["version"] == "1.0.0"
    assert meta["timestamp"] > 0

    assert client.delete("/game/save").json() == {"ok": True}
    assert client.get("/game/save/metadata").status_code == 404


def test_startup_restores_saved_game() -> None:
    server = fakeredis.FakeServer()

    def _factory() -> fakeredis.FakeRedis:
        return fakeredis.FakeRedis(server=server, decode_responses=True)

    settings = GameSettings(autostart=False)

    with TestClient(create_app(redis_factory=_factory, settings=settings)) as first:
        _runtime(first).session.ledger.add(321)
        assert first.post("/game/save").json() == {"ok": True}

    with TestClient(create_app(redis_factory=_factory, settings=settings)) as second:
        state = second.get("/game").json()
        assert state["contentUnits"] == 321
        assert _runtime(second).session.loaded_from_save
