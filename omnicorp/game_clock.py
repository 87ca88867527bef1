from __future__ import annotations

import asyncio
import logging

from omnicorp.fsm import ClockFSM
from omnicorp.game_session import GameSession
from omnicorp.game_store import RedisSaveStore


logger = logging.getLogger(__name__)

DEFAULT_TICK_MS = 100
DEFAULT_AUTOSAVE_MS = 5_000


class GameClock:
    """Drives a session: a tick loop and an autosave loop on the running event loop.

    Both loops are asyncio tasks. Every HTTP/WebSocket handler runs on the same
    loop, so a tick never interleaves with an action.
    """

    def __init__(
        self,
        *,
        session: GameSession,
        store: RedisSaveStore | None = None,
        tick_ms: int = DEFAULT_TICK_MS,
        autosave_ms: int = DEFAULT_AUTOSAVE_MS,
    ) -> None:
        if tick_ms <= 0 or autosave_ms <= 0:
            raise ValueError("Clock intervals must be positive")
        self.session = session
        self.store = store
        self.tick_ms = tick_ms
        self.autosave_ms = autosave_ms

        self.fsm = ClockFSM()
        self.last_tick: int = session.now_ms()
        self.last_save_time: int | None = None

        self._tick_task: asyncio.Task[None] | None = None
        self._autosave_task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self.fsm.is_running

    @property
    def is_autosave_active(self) -> bool:
        return self._autosave_task is not None and not self._autosave_task.done()

    def start(self) -> bool:
        """Start ticking. Must be called from inside a running event loop."""

        if self.fsm.is_running:
            return False

        loop = asyncio.get_running_loop()
        self.fsm.resume()
        self.session.is_running = True
        self.last_tick = self.session.now_ms()

        self._tick_task = loop.create_task(self._tick_loop())
        if self.store is not None:
            self._autosave_task = loop.create_task(self._autosave_loop())

        self.session.narrative.trigger_game_start()
        logger.info("Game clock started (tick=%sms, autosave=%sms)", self.tick_ms, self.autosave_ms)
        self.session.publish()
        return True

    def stop(self) -> bool:
        if not self.fsm.is_running:
            return False

        self.fsm.halt()
        self.session.is_running = False
        for task in (self._tick_task, self._autosave_task):
            if task is not None:
                task.cancel()
        self._tick_task = None
        self._autosave_task = None

        logger.info("Game clock stopped")
        self.session.publish()
        return True

    def tick(self) -> None:
        session = self.session
        now = session.now_ms()
        delta = max(0, now - self.last_tick)
        self.last_tick = now

        session.production.step(delta)
        session.task_timer.complete_task()
        session.narrative.observe_content_units(session.ledger.current)
        session.narrative.observe_time_elapsed()
        session.ledger.apply_decay()

        session.publish()

    def save_now(self) -> bool:
        if self.store is None:
            return False
        ok = self.store.save(self.session.to_saved())
        if ok:
            self.last_save_time = self.session.now_ms()
        return ok

    def flush(self) -> bool:
        """Final save before the host goes away."""

        ok = self.save_now()
        if ok and self.store is not None:
            logger.info("Flushed game state to %s", self.store.key)
        return ok

    async def shutdown(self) -> None:
        tasks = [t for t in (self._tick_task, self._autosave_task) if t is not None]
        self.stop()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self.flush()

    async def _tick_loop(self) -> None:
        interval = self.tick_ms / 1000
        while self.fsm.is_running:
            await asyncio.sleep(interval)
            if not self.fsm.is_running:
                break
            try:
                self.tick()
            except Exception:
                logger.exception("Tick failed")

    async def _autosave_loop(self) -> None:
        interval = self.autosave_ms / 1000
        while self.fsm.is_running:
            await asyncio.sleep(interval)
            if not self.fsm.is_running:
                break
            try:
                self.save_now()
            except Exception:
                logger.exception("Autosave failed")
