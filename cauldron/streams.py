from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import cast

import redis

from cauldron.core.models import GameEvent

EVENT_STREAM_PREFIX = "cauldron:events:"  # + {game_id}


@dataclass(frozen=True, slots=True)
class EventStream:
    game_id: str

    @property
    def key(self) -> str:
        return f"{EVENT_STREAM_PREFIX}{self.game_id}"


def _fields_for(event: GameEvent) -> dict[str, str]:
    return {
        "game_id": event.game_id,
        "event_index": str(event.event_index),
        "event": event.to_json(),
    }


def publish_event(*, r: redis.Redis, event: GameEvent) -> str:
    """Append an event to its game's stream."""

    stream_id = r.xadd(EventStream(game_id=event.game_id).key, _fields_for(event))
    return cast(str, stream_id)


def publish_events(*, r: redis.Redis, events: Iterable[GameEvent]) -> list[str]:
    ids: list[str] = []
    for event in events:
        ids.append(publish_event(r=r, event=event))
    return ids
