from __future__ import annotations

import logging
from dataclasses import dataclass

import redis

from omnicorp.config import GameSettings
from omnicorp.game_clock import GameClock
from omnicorp.game_session import GameSession
from omnicorp.game_store import RedisSaveStore
from omnicorp.streams import NarrativeStreamPublisher
from omnicorp.websocket_hub import GameWebSocketHub


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class GameRuntime:
    """Everything the web app needs for the one game it hosts."""

    settings: GameSettings
    r: redis.Redis
    session: GameSession
    store: RedisSaveStore
    clock: GameClock
    hub: GameWebSocketHub

    @staticmethod
    def build(*, r: redis.Redis, settings: GameSettings) -> "GameRuntime":
        session = GameSession.from_settings(settings)
        store = RedisSaveStore(r=r, key=settings.save_key)
        clock = GameClock(
            session=session,
            store=store,
            tick_ms=settings.tick_ms,
            autosave_ms=settings.autosave_ms,
        )
        hub = GameWebSocketHub()

        session.narrative.subscribe(NarrativeStreamPublisher(r=r, key=settings.narrative_stream_key))
        session.subscribe_view(hub.publish_soon)

        return GameRuntime(settings=settings, r=r, session=session, store=store, clock=clock, hub=hub)

    def restore(self) -> bool:
        saved = self.store.load()
        if saved is None:
            logger.info("No usable save in %s; starting a fresh game", self.store.key)
            return False
        self.session.apply_saved(saved)
        return True

    async def startup(self) -> None:
        self.restore()
        if self.settings.autostart:
            self.clock.start()

    async def shutdown(self) -> None:
        await self.clock.shutdown()
        try:
            self.r.close()
        except redis.RedisError:
            logger.debug("Redis client close failed", exc_info=True)
