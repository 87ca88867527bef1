from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

import redis
from pydantic import ValidationError

from omnicorp.api.models import SAVE_VERSION, SavedGame, SaveMetadata


logger = logging.getLogger(__name__)

SAVE_KEY = "omnicorp:save"


def _now_ms() -> int:
    return int(datetime.now(tz=UTC).timestamp() * 1000)


class RedisSaveStore:
    """Single save slot backed by a Redis string key.

    Redis being unreachable is not fatal to the game: writes report False,
    reads report None, and the economy keeps running in memory.
    """

    def __init__(self, *, r: redis.Redis, key: str = SAVE_KEY, now_ms: Callable[[], int] = _now_ms) -> None:
        self._r = r
        self.key = key
        self._now_ms = now_ms

    def save(self, snapshot: SavedGame) -> bool:
        stamped = snapshot.model_copy(update={"version": SAVE_VERSION, "timestamp": self._now_ms()})
        try:
            self._r.set(self.key, stamped.model_dump_json(by_alias=True))
        except redis.RedisError:
            logger.warning("Failed to write save slot %s", self.key, exc_info=True)
            return False
        logger.debug("Saved game to %s at %s", self.key, stamped.timestamp)
        return True

    def _read_raw(self) -> str | None:
        try:
            raw = self._r.get(self.key)
        except redis.RedisError:
            logger.warning("Failed to read save slot %s", self.key, exc_info=True)
            return None
        if not raw:
            return None
        return raw

    def load(self) -> SavedGame | None:
        raw = self._read_raw()
        if raw is None:
            return None

        try:
            saved = SavedGame.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Discarding invalid save in %s: %s", self.key, e.error_count())
            return None

        if saved.version != SAVE_VERSION:
            # Loaded anyway; there is only one save format so far.
            logger.warning("Save version mismatch: %s != %s", saved.version, SAVE_VERSION)

        logger.info("Loaded save from %s (timestamp %s)", self.key, saved.timestamp)
        return saved

    def has_save(self) -> bool:
        try:
            return bool(self._r.exists(self.key))
        except redis.RedisError:
            logger.warning("Failed to check save slot %s", self.key, exc_info=True)
            return False

    def clear(self) -> bool:
        try:
            self._r.delete(self.key)
        except redis.RedisError:
            logger.warning("Failed to clear save slot %s", self.key, exc_info=True)
            return False
        logger.info("Cleared save slot %s", self.key)
        return True

    def metadata(self) -> SaveMetadata | None:
        saved = self.load()
        if saved is None:
            return None
        return SaveMetadata(version=saved.version, timestamp=saved.timestamp)
