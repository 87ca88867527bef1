from __future__ import annotations

import asyncio

import fakeredis
import pytest

from omnicorp.api.models import ClockPhase
from omnicorp.fsm import ClockFSM
from omnicorp.game_clock import GameClock
from omnicorp.game_session import GameSession
from omnicorp.game_store import RedisSaveStore

from tests.conftest import FakeTime


def test_clock_fsm_transitions() -> None:
    fsm = ClockFSM()
    assert fsm.phase == ClockPhase.stopped
    assert not fsm.is_running

    fsm.resume()
    assert fsm.phase == ClockPhase.running
    assert fsm.is_running

    fsm.halt()
    assert fsm.phase == ClockPhase.stopped


def test_clock_fsm_can_start_running() -> None:
    fsm = ClockFSM(ClockPhase.running)
    assert fsm.is_running


def test_tick_applies_production_and_observers(session: GameSession, fake_time: FakeTime) -> None:
    clock = GameClock(session=session)
    session.generators.restore_owned({"basicAdBotFarm": 2})

    fake_time.advance(1_000)
    clock.tick()

    assert session.ledger.current == pytest.approx(2.0)
    # Watermark moved and the contentUnits trigger ran.
    assert session.narrative.last_content_units_check == pytest.approx(2.0)
    assert "firstClick" in session.narrative.viewed_events
    # Decay ran once.
    assert session.ledger.amount("pt") == pytest.approx(100 - 100 * 0.0001)


def test_tick_completes_task_automatically(session: GameSession, fake_time: FakeTime) -> None:
    clock = GameClock(session=session)

    fake_time.advance(30_000)
    clock.tick()

    assert session.ledger.current == pytest.approx(10.0)
    assert session.task_timer.start_time == fake_time.now


def test_tick_publishes_view(session: GameSession, fake_time: FakeTime) -> None:
    clock = GameClock(session=session)
    seen = []
    session.subscribe_view(seen.append)

    fake_time.advance(100)
    clock.tick()

    assert len(seen) == 1
    assert seen[0].is_running is False


def test_save_now_without_store(session: GameSession) -> None:
    clock = GameClock(session=session)
    assert not clock.save_now()
    assert clock.last_save_time is None


def test_save_now_records_last_save_time(session: GameSession, fake_time: FakeTime) -> None:
    store = RedisSaveStore(r=fakeredis.FakeRedis(decode_responses=True), now_ms=fake_time)
    clock = GameClock(session=session, store=store)

    assert clock.flush()
    assert clock.last_save_time == fake_time.now
    assert store.has_save()


def test_intervals_must_be_positive(session: GameSession) -> None:
    with pytest.raises(ValueError):
        GameClock(session=session, tick_ms=0)


@pytest.mark.asyncio
async def test_start_is_idempotent_and_fires_game_start_once() -> None:
    session = GameSession()
    store = RedisSaveStore(r=fakeredis.FakeRedis(decode_responses=True))
    clock = GameClock(session=session, store=store, tick_ms=10, autosave_ms=1_000)

    assert clock.start()
    assert not clock.start()
    assert clock.is_running
    assert session.is_running
    assert clock.is_autosave_active
    assert session.narrative.viewed_events.count("gameStart") == 1

    assert clock.stop()
    assert not clock.stop()
    assert not session.is_running


@pytest.mark.asyncio
async def test_loop_ticks_until_stopped() -> None:
    session = GameSession()
    session.generators.restore_owned({"basicAdBotFarm": 100})
    clock = GameClock(session=session, tick_ms=5)

    clock.start()
    await asyncio.sleep(0.1)
    clock.stop()

    produced = session.ledger.current
    assert produced > 0

    await asyncio.sleep(0.05)
    assert session.ledger.current == produced
    assert not clock.is_autosave_active


@pytest.mark.asyncio
async def test_autosave_loop_writes_snapshot() -> None:
    r = fakeredis.FakeRedis(decode_responses=True)
    session = GameSession()
    clock = GameClock(session=session, store=RedisSaveStore(r=r), tick_ms=5, autosave_ms=20)

    clock.start()
    await asyncio.sleep(0.1)

    assert clock.last_save_time is not None
    assert r.exists("omnicorp:save")

    await clock.shutdown()
    assert not clock.is_running


@pytest.mark.asyncio
async def test_autosave_keeps_running_after_a_failed_save(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    r = fakeredis.FakeRedis(decode_responses=True)
    session = GameSession()
    clock = GameClock(session=session, store=RedisSaveStore(r=r), tick_ms=1_000, autosave_ms=10)

    real_to_saved = session.to_saved
    calls = {"n": 0}

    def flaky_to_saved() -> object:
        calls["n"] += 1
        if calls["n"] == 1:
            raise RuntimeError("snapshot failed")
        return real_to_saved()

    monkeypatch.setattr(session, "to_saved", flaky_to_saved)

    clock.start()
    await asyncio.sleep(0.1)

    assert calls["n"] > 1
    assert clock.is_autosave_active
    assert r.exists("omnicorp:save")
    assert "Autosave failed" in caplog.text

    await clock.shutdown()
