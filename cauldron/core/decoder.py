from __future__ import annotations

from dataclasses import dataclass

from pydantic import ValidationError

from cauldron.core.models import Update


@dataclass(frozen=True, slots=True)
class DecodeError:
    """A line that could not be decoded into an Update.

    Returned instead of raised: the caller skips the line and keeps reading.
    """

    raw_line: str
    cause: str


def _describe(exc: ValidationError) -> str:
    parts: list[str] = []
    for err in exc.errors(include_url=False):
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts) or str(exc)


def decode_update(raw_line: str) -> Update | DecodeError:
    if not raw_line.strip():
        return DecodeError(raw_line=raw_line, cause="empty line")
    try:
        return Update.model_validate_json(raw_line)
    except ValidationError as e:
        return DecodeError(raw_line=raw_line, cause=_describe(e))
