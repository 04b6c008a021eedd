from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from cauldron.core.diff import comparable_state, json_kind
from cauldron.core.models import GameSnapshot


class SnapshotError(ValueError):
    """A snapshot that decoded fine but cannot be diffed against the game's baseline."""


@dataclass(frozen=True, slots=True)
class SnapshotContext:
    """Inputs available to validators.

    `baseline` is None until the game has been seeded.
    """

    game_id: str
    baseline: GameSnapshot | None


class SnapshotValidator(ABC):
    """A small, composable validity check for an incoming snapshot."""

    @abstractmethod
    def validate(self, *, ctx: SnapshotContext, snapshot: GameSnapshot) -> None:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class GameIdValidator(SnapshotValidator):
    """The snapshot must belong to the game this parser tracks."""

    def validate(self, *, ctx: SnapshotContext, snapshot: GameSnapshot) -> None:
        if snapshot.game_id != ctx.game_id:
            raise SnapshotError(f"Snapshot for game '{snapshot.game_id}' routed to game '{ctx.game_id}'")


@dataclass(frozen=True, slots=True)
class FieldShapeValidator(SnapshotValidator):
    """Fields known from the baseline must still be present and keep their JSON kind.

    New fields are allowed. A null on either side is not a kind change.
    """

    ignored_fields: frozenset[str] = frozenset()

    def validate(self, *, ctx: SnapshotContext, snapshot: GameSnapshot) -> None:
        if ctx.baseline is None:
            return

        old = comparable_state(ctx.baseline, ignored=self.ignored_fields)
        new = comparable_state(snapshot, ignored=self.ignored_fields)

        missing = sorted(k for k in old if k not in new)
        if missing:
            raise SnapshotError(f"Snapshot is missing known fields: {','.join(missing)}")

        for key, prev in old.items():
            before, after = json_kind(prev), json_kind(new[key])
            if "null" in (before, after) or before == after:
                continue
            raise SnapshotError(f"Field '{key}' changed type from {before} to {after}")


@dataclass(frozen=True, slots=True)
class SequenceValidator(SnapshotValidator):
    """A numeric sequence field (e.g. the feed's play counter) must never go backwards."""

    field: str

    def validate(self, *, ctx: SnapshotContext, snapshot: GameSnapshot) -> None:
        if ctx.baseline is None:
            return

        prev = ctx.baseline.state.get(self.field)
        cur = snapshot.state.get(self.field)
        if json_kind(prev) != "number" or json_kind(cur) != "number":
            return
        if cur < prev:
            raise SnapshotError(f"Field '{self.field}' went backwards ({prev} -> {cur})")


@dataclass(frozen=True, slots=True)
class ValidatorPipeline:
    validators: tuple[SnapshotValidator, ...]

    def validate(self, *, ctx: SnapshotContext, snapshot: GameSnapshot) -> None:
        for v in self.validators:
            v.validate(ctx=ctx, snapshot=snapshot)


def default_pipeline(
    *,
    ignored_fields: frozenset[str] = frozenset(),
    sequence_field: str | None = "playCount",
) -> ValidatorPipeline:
    validators: list[SnapshotValidator] = [
        GameIdValidator(),
        FieldShapeValidator(ignored_fields=ignored_fields),
    ]
    if sequence_field:
        validators.append(SequenceValidator(field=sequence_field))
    return ValidatorPipeline(validators=tuple(validators))
