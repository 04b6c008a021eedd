from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from cauldron.core.models import FieldChange, GameSnapshot


def json_kind(value: Any) -> str:
    """Name the JSON type of a decoded value (bool is not a number here)."""

    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def json_equal(a: Any, b: Any) -> bool:
    """Structural equality over decoded JSON, kind-aware at every depth.

    Plain `==` treats `True == 1` and `0 == False`, which JSON does not.
    """

    kind = json_kind(a)
    if kind != json_kind(b):
        return False
    if kind == "object":
        return a.keys() == b.keys() and all(json_equal(a[k], b[k]) for k in a)
    if kind == "array":
        return len(a) == len(b) and all(json_equal(x, y) for x, y in zip(a, b))
    return a == b


def comparable_state(snapshot: GameSnapshot, *, ignored: Iterable[str] = ()) -> dict[str, Any]:
    skip = set(ignored)
    return {k: v for k, v in snapshot.state.items() if k not in skip}


def diff_snapshots(
    before: GameSnapshot,
    after: GameSnapshot,
    *,
    ignored: Iterable[str] = (),
) -> dict[str, FieldChange]:
    """Field-level delta from `before` to `after`, in `after`'s key order.

    An empty result means the two snapshots are duplicates.
    """

    old = comparable_state(before, ignored=ignored)
    new = comparable_state(after, ignored=ignored)

    changes: dict[str, FieldChange] = {}
    for key, value in new.items():
        prev = old.get(key)
        if key not in old or not json_equal(prev, value):
            changes[key] = FieldChange(before=prev, after=value)
    for key, value in old.items():
        if key not in new:
            changes[key] = FieldChange(before=value, after=None)
    return changes
