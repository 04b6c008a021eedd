from __future__ import annotations

import json

import fakeredis

from cauldron.core.models import FieldChange, GameEvent
from cauldron.streams import EventStream, publish_event, publish_events


def _event(game_id: str, index: int) -> GameEvent:
    return GameEvent(
        game_id=game_id,
        event_index=index,
        observed_at=100 + index,
        changes={"inning": FieldChange(before=index, after=index + 1)},
    )


def test_event_stream_key_is_per_game() -> None:
    assert EventStream(game_id="G1").key == "cauldron:events:G1"


def test_publish_event_appends_camel_case_payload() -> None:
    r = fakeredis.FakeRedis(decode_responses=True)

    stream_id = publish_event(r=r, event=_event("G1", 0))

    entries = r.xrange("cauldron:events:G1")
    assert [mid for mid, _ in entries] == [stream_id]
    _, fields = entries[0]
    assert fields["game_id"] == "G1"
    assert fields["event_index"] == "0"
    payload = json.loads(fields["event"])
    assert payload["gameId"] == "G1"
    assert payload["changes"]["inning"] == {"before": 0, "after": 1}


def test_publish_events_routes_each_event_to_its_game() -> None:
    r = fakeredis.FakeRedis(decode_responses=True)

    ids = publish_events(r=r, events=[_event("A", 0), _event("B", 0), _event("A", 1)])

    assert len(ids) == 3
    assert [f["event_index"] for _, f in r.xrange("cauldron:events:A")] == ["0", "1"]
    assert len(r.xrange("cauldron:events:B")) == 1
