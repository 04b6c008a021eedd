from __future__ import annotations

import json

from cauldron.core.decoder import DecodeError, decode_update
from cauldron.core.models import Update


def test_decodes_client_timestamp_and_schedule() -> None:
    line = json.dumps(
        {
            "clientMeta": {"timestamp": 1601000000000},
            "schedule": [
                {"_id": "G1", "inning": 3, "topOfInning": True},
                {"_id": "G2", "inning": 0, "topOfInning": False},
            ],
        }
    )

    update = decode_update(line)

    assert isinstance(update, Update)
    assert update.observed_at == 1601000000000
    assert [s.game_id for s in update.snapshots] == ["G1", "G2"]
    assert update.snapshots[0].state == {"inning": 3, "topOfInning": True}


def test_accepts_observed_at_and_plain_id_aliases() -> None:
    line = json.dumps({"clientMeta": {"observedAt": 3}, "schedule": [{"id": "G1", "state": "live"}]})

    update = decode_update(line)

    assert isinstance(update, Update)
    assert update.observed_at == 3
    assert update.snapshots[0].game_id == "G1"
    assert update.snapshots[0].state == {"state": "live"}


def test_missing_schedule_is_an_update_with_no_games() -> None:
    update = decode_update(json.dumps({"clientMeta": {"timestamp": 1}, "leagues": []}))

    assert isinstance(update, Update)
    assert update.snapshots == []


def test_malformed_json_is_reported_not_raised() -> None:
    raw = '{"clientMeta": {"timestamp": 1}, "schedule": ['

    result = decode_update(raw)

    assert isinstance(result, DecodeError)
    assert result.raw_line == raw
    assert result.cause


def test_empty_line_is_a_decode_error() -> None:
    result = decode_update("   ")

    assert isinstance(result, DecodeError)
    assert result.cause == "empty line"


def test_non_object_line_is_a_decode_error() -> None:
    assert isinstance(decode_update("[1, 2, 3]"), DecodeError)


def test_missing_client_meta_names_the_field() -> None:
    result = decode_update(json.dumps({"schedule": []}))

    assert isinstance(result, DecodeError)
    assert "clientMeta" in result.cause


def test_schedule_entry_without_string_id_is_a_decode_error() -> None:
    assert isinstance(decode_update(json.dumps({"clientMeta": {"timestamp": 1}, "schedule": [{"inning": 1}]})), DecodeError)
    assert isinstance(decode_update(json.dumps({"clientMeta": {"timestamp": 1}, "schedule": [{"_id": 7}]})), DecodeError)
