from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from cauldron.core.models import GameCounters, GameEvent, RunSummary


class ProcessResponse(BaseModel):
    lines_read: int
    decode_errors: int
    events: list[GameEvent] = Field(default_factory=list)
    # Set when the events could not be appended to their Redis Streams.
    sink_error: str | None = None


class SummaryResponse(RunSummary):
    text: str = ""


class GameListResponse(BaseModel):
    games: list[GameCounters]


class StreamMessage(BaseModel):
    id: str
    fields: dict[str, Any]


class GameEventsResponse(BaseModel):
    game_id: str
    stream: str
    messages: list[StreamMessage]
