from __future__ import annotations

import fakeredis
import redis

from omnicorp.core.events import NarrativeEvent, TriggerType
from omnicorp.game_session import GameSession
from omnicorp.streams import NARRATIVE_STREAM_KEY, NarrativeStreamPublisher, publish_to_stream


def test_publish_to_stream_stringifies_fields(redis_client: fakeredis.FakeRedis) -> None:
    stream_id = publish_to_stream(r=redis_client, key="omnicorp:test", fields={"n": 3, "ok": True})

    entries = redis_client.xrange("omnicorp:test")
    assert entries == [(stream_id, {"n": "3", "ok": "True"})]


def test_fired_narrative_events_land_in_stream(redis_client: fakeredis.FakeRedis, session: GameSession) -> None:
    session.narrative.subscribe(NarrativeStreamPublisher(r=redis_client))

    session.narrative.trigger_game_start()
    session.click()

    entries = redis_client.xrange(NARRATIVE_STREAM_KEY)
    assert [fields["event_id"] for _, fields in entries] == ["gameStart", "firstClick"]

    _, first = entries[0]
    assert first["type"] == "narrative_event"
    assert first["trigger_type"] == "gameStart"
    assert first["priority"] == "1000"


class _DownRedis:
    def xadd(self, *args: object, **kwargs: object) -> str:
        raise redis.ConnectionError("redis is down")


def test_stream_failures_do_not_break_the_game(session: GameSession) -> None:
    session.narrative.subscribe(NarrativeStreamPublisher(r=_DownRedis()))  # type: ignore[arg-type]

    fired = session.narrative.check_trigger(TriggerType.content_units, value=1)

    assert [e.id for e in fired] == ["firstClick"]
    assert session.narrative.viewed_events == ["firstClick"]


def test_publisher_uses_configured_key(redis_client: fakeredis.FakeRedis) -> None:
    publisher = NarrativeStreamPublisher(r=redis_client, key="omnicorp:narrative:alt")
    publisher(NarrativeEvent(id="x", title="X", trigger_type=TriggerType.upgrade))

    assert redis_client.xlen("omnicorp:narrative:alt") == 1
