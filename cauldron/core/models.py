from __future__ import annotations

import json
from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

# Clients stamp updates with epoch millis, but some feeds send ISO strings.
Timestamp = int | float | str


class WireModel(BaseModel):
    """Base for models that cross the NDJSON boundary (camelCase field names)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ClientMeta(WireModel):
    timestamp: Timestamp = Field(validation_alias=AliasChoices("timestamp", "observedAt"))


class GameSnapshot(WireModel):
    """One game's full state as reported by an update.

    Only the id is interpreted here; every other field is kept verbatim in `state`.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    game_id: str = Field(validation_alias=AliasChoices("_id", "id", "gameId"))

    @property
    def state(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


class Update(WireModel):
    client_meta: ClientMeta
    # Other top-level sections of the feed (leagues, standings, ...) are ignored.
    schedule: list[GameSnapshot] = Field(default_factory=list)

    @property
    def observed_at(self) -> Timestamp:
        return self.client_meta.timestamp

    @property
    def snapshots(self) -> list[GameSnapshot]:
        return self.schedule


class FieldChange(WireModel):
    before: Any = None
    after: Any = None


class GameEvent(WireModel):
    game_id: str
    event_index: int
    observed_at: Timestamp
    changes: dict[str, FieldChange]
    event_text: str | None = None
    is_last_game_event: bool = False

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    def to_payload(self) -> dict[str, Any]:
        return json.loads(self.to_json())


class ParserPhase(StrEnum):
    uninitialized = "uninitialized"
    tracking = "tracking"


class GameCounters(BaseModel):
    game_id: str
    phase: ParserPhase
    processed: int
    discarded_duplicates: int
    errors: int
    last_error: str | None = None
    last_observed_at: Timestamp | None = None


class RunSummary(BaseModel):
    lines_read: int = 0
    decode_errors: int = 0
    processed: int = 0
    discarded_duplicates: int = 0
    errors: int = 0
    error_game_ids: list[str] = Field(default_factory=list)
    games_tracked: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def games_with_errors(self) -> int:
        return len(self.error_game_ids)
