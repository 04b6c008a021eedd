from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from cauldron.core.diff import diff_snapshots
from cauldron.core.fsm import SnapshotFSM
from cauldron.core.models import GameCounters, GameEvent, GameSnapshot, ParserPhase, Timestamp
from cauldron.core.validators import SnapshotContext, SnapshotError, ValidatorPipeline, default_pipeline

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ParserOptions:
    # Fields that never count as a change (and are not shape-checked).
    ignored_fields: frozenset[str] = frozenset()
    # Numeric field that must not decrease between accepted snapshots; None disables the check.
    sequence_field: str | None = "playCount"
    # Copied into GameEvent.event_text when the new snapshot carries it.
    text_field: str | None = "lastUpdate"
    # `true` here in the new snapshot marks the event as the game's last.
    complete_field: str | None = "gameComplete"


class ParseOutcome(StrEnum):
    seeded = "seeded"
    accepted = "accepted"
    duplicate = "duplicate"
    error = "error"


@dataclass(frozen=True, slots=True)
class ParseResult:
    outcome: ParseOutcome
    event: GameEvent | None = None


@dataclass(slots=True)
class TrackedGame:
    game_id: str
    phase: ParserPhase = ParserPhase.uninitialized
    last_accepted: GameSnapshot | None = None
    last_observed_at: Timestamp | None = None
    processed: int = 0
    discarded_duplicates: int = 0
    errors: int = 0
    last_error: str | None = None


class GameEventParser:
    """Turns one game's sequence of full-state snapshots into change events.

    The first snapshot only seeds the baseline. After that every snapshot is either
    rejected (invalid for diffing), discarded (no change), or accepted, and only an
    accepted snapshot produces an event. Nothing here raises for bad input.
    """

    def __init__(
        self,
        game_id: str,
        *,
        options: ParserOptions | None = None,
        validators: ValidatorPipeline | None = None,
    ) -> None:
        self._options = options or ParserOptions()
        self._validators = validators or default_pipeline(
            ignored_fields=self._options.ignored_fields,
            sequence_field=self._options.sequence_field,
        )
        self._game = TrackedGame(game_id=game_id)
        self._fsm = SnapshotFSM(self._game)

    @property
    def game_id(self) -> str:
        return self._game.game_id

    @property
    def phase(self) -> ParserPhase:
        return self._game.phase

    @property
    def processed(self) -> int:
        return self._game.processed

    @property
    def discarded_duplicates(self) -> int:
        return self._game.discarded_duplicates

    @property
    def errors(self) -> int:
        return self._game.errors

    @property
    def last_accepted(self) -> GameSnapshot | None:
        return self._game.last_accepted

    def counters(self) -> GameCounters:
        g = self._game
        return GameCounters(
            game_id=g.game_id,
            phase=g.phase,
            processed=g.processed,
            discarded_duplicates=g.discarded_duplicates,
            errors=g.errors,
            last_error=g.last_error,
            last_observed_at=g.last_observed_at,
        )

    def parse(self, snapshot: GameSnapshot, *, observed_at: Timestamp) -> ParseResult:
        ctx = SnapshotContext(game_id=self._game.game_id, baseline=self._game.last_accepted)
        try:
            self._validators.validate(ctx=ctx, snapshot=snapshot)
        except SnapshotError as e:
            return self._reject(str(e))

        if self._game.phase == ParserPhase.uninitialized:
            return self._seed(snapshot, observed_at)

        baseline = self._game.last_accepted
        if baseline is None:
            raise RuntimeError(f"Game {self._game.game_id} is tracking without a baseline snapshot")

        changes = diff_snapshots(baseline, snapshot, ignored=self._options.ignored_fields)
        if not changes:
            self._fsm.discard()
            self._game.discarded_duplicates += 1
            logger.debug("Discarded duplicate snapshot for game %s", self._game.game_id)
            return ParseResult(outcome=ParseOutcome.duplicate)

        event = GameEvent(
            game_id=self._game.game_id,
            # The seed is the first processed snapshot and has no event.
            event_index=self._game.processed - 1,
            observed_at=observed_at,
            changes=changes,
            event_text=self._event_text(snapshot),
            is_last_game_event=self._is_complete(snapshot),
        )

        self._fsm.accept()
        self._game.last_accepted = snapshot
        self._game.last_observed_at = observed_at
        self._game.processed += 1
        return ParseResult(outcome=ParseOutcome.accepted, event=event)

    def _seed(self, snapshot: GameSnapshot, observed_at: Timestamp) -> ParseResult:
        self._fsm.seed()
        self._fsm.sync_phase_to_model()
        self._game.last_accepted = snapshot
        self._game.last_observed_at = observed_at
        self._game.processed += 1
        logger.debug("Started tracking game %s", self._game.game_id)
        return ParseResult(outcome=ParseOutcome.seeded)

    def _reject(self, reason: str) -> ParseResult:
        self._fsm.reject()
        self._game.errors += 1
        self._game.last_error = reason
        logger.warning("Rejected snapshot for game %s: %s", self._game.game_id, reason)
        return ParseResult(outcome=ParseOutcome.error)

    def _event_text(self, snapshot: GameSnapshot) -> str | None:
        if not self._options.text_field:
            return None
        text = snapshot.state.get(self._options.text_field)
        return text if isinstance(text, str) else None

    def _is_complete(self, snapshot: GameSnapshot) -> bool:
        if not self._options.complete_field:
            return False
        return snapshot.state.get(self._options.complete_field) is True
