from __future__ import annotations

import asyncio
import json

import fakeredis
from fastapi.testclient import TestClient

from cauldron.core.models import FieldChange, GameEvent
from cauldron.websocket_hub import GameWebSocketHub


def _line(observed_at: int, state: str) -> str:
    return json.dumps({"clientMeta": {"timestamp": observed_at}, "schedule": [{"_id": "G1", "state": state}]})


def test_ws_game_events_broadcast(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis

    with client.websocket_connect("/ws/games/G1") as ws:
        res = client.post("/updates", content="\n".join([_line(1, "pre"), _line(2, "live")]))
        assert res.status_code == 200

        msg = ws.receive_json()
        assert msg["type"] == "game_event"
        assert msg["game_id"] == "G1"
        assert msg["event"]["observedAt"] == 2
        assert msg["event"]["changes"]["state"]["after"] == "live"


class _RecordingSocket:
    def __init__(self, *, fail: bool = False) -> None:
        self.sent: list[dict[str, object]] = []
        self.fail = fail

    async def accept(self) -> None:
        return None

    async def send_json(self, payload: dict[str, object]) -> None:
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(payload)


def test_broadcast_event_sends_wire_payload_and_drops_dead_sockets() -> None:
    hub = GameWebSocketHub()
    live, dead, other = _RecordingSocket(), _RecordingSocket(fail=True), _RecordingSocket()
    event = GameEvent(
        game_id="G1",
        event_index=0,
        observed_at=2,
        changes={"state": FieldChange(before="pre", after="live")},
        event_text="Play ball!",
    )

    async def scenario() -> None:
        await hub.connect("G1", live)  # type: ignore[arg-type]
        await hub.connect("G1", dead)  # type: ignore[arg-type]
        await hub.connect("G2", other)  # type: ignore[arg-type]
        await hub.broadcast_event(event)
        await hub.broadcast_event(event)

    asyncio.run(scenario())

    assert len(live.sent) == 2
    assert live.sent[0] == {"type": "game_event", "game_id": "G1", "event": event.to_payload()}
    assert live.sent[0]["event"]["eventText"] == "Play ball!"  # type: ignore[index]
    assert other.sent == []
    assert dead not in hub._by_game["G1"]
