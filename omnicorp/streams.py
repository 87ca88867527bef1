from __future__ import annotations

import logging
from typing import Mapping, cast

import redis

from omnicorp.core.events import NarrativeEvent


logger = logging.getLogger(__name__)

NARRATIVE_STREAM_KEY = "omnicorp:narrative"


def publish_to_stream(*, r: redis.Redis, key: str, fields: Mapping[str, object]) -> str:
    """Append an entry to a Redis stream."""

    # Streams hold flat string fields.
    stream_id = r.xadd(key, {str(k): str(v) for k, v in fields.items()})
    return cast(str, stream_id)


def narrative_fields(event: NarrativeEvent) -> dict[str, str]:
    return {
        "type": "narrative_event",
        "event_id": event.id,
        "title": event.title,
        "trigger_type": event.trigger_type.value,
        "priority": str(event.priority),
        "societal_stability_impact": str(event.societal_stability_impact),
    }


class NarrativeStreamPublisher:
    """Narrative listener that mirrors fired events into a Redis stream."""

    def __init__(self, *, r: redis.Redis, key: str = NARRATIVE_STREAM_KEY) -> None:
        self._r = r
        self.key = key

    def __call__(self, event: NarrativeEvent) -> None:
        try:
            publish_to_stream(r=self._r, key=self.key, fields=narrative_fields(event))
        except redis.RedisError:
            logger.warning("Failed to publish narrative event %s to %s", event.id, self.key, exc_info=True)
