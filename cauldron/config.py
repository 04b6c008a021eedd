from __future__ import annotations

import os
from dataclasses import dataclass

from cauldron.core.parser import ParserOptions
from cauldron.infra.redis_client import get_redis_url


@dataclass(frozen=True, slots=True)
class Settings:
    redis_url: str
    log_level: str
    parser: ParserOptions


def _csv(value: str | None) -> frozenset[str]:
    return frozenset(s.strip() for s in (value or "").split(",") if s.strip())


def _optional(name: str, default: str) -> str | None:
    # Set but empty disables the feature.
    value = os.environ.get(name, default).strip()
    return value or None


def parser_options_from_env() -> ParserOptions:
    return ParserOptions(
        ignored_fields=_csv(os.environ.get("CAULDRON_IGNORED_FIELDS")),
        sequence_field=_optional("CAULDRON_SEQUENCE_FIELD", "playCount"),
        text_field=_optional("CAULDRON_TEXT_FIELD", "lastUpdate"),
        complete_field=_optional("CAULDRON_COMPLETE_FIELD", "gameComplete"),
    )


def settings_from_env() -> Settings:
    return Settings(
        redis_url=get_redis_url(),
        log_level=os.environ.get("CAULDRON_LOG_LEVEL", "INFO").upper(),
        parser=parser_options_from_env(),
    )
