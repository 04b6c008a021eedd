from __future__ import annotations

import asyncio
from collections import defaultdict

from fastapi import WebSocket

from cauldron.core.models import GameEvent


class GameWebSocketHub:
    """Fans emitted GameEvents out to the sockets watching each game.

    Sockets subscribe with `connect(game_id, websocket)`; the updates route hands
    every event it emits to `broadcast_event`. A socket that fails a send is
    dropped from its game.
    """

    def __init__(self) -> None:
        self._by_game: dict[str, set[WebSocket]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def connect(self, game_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        async with self._lock:
            self._by_game[game_id].add(websocket)

    async def disconnect(self, game_id: str, websocket: WebSocket) -> None:
        async with self._lock:
            conns = self._by_game.get(game_id)
            if not conns:
                return
            conns.discard(websocket)
            if not conns:
                self._by_game.pop(game_id, None)

    async def broadcast_event(self, event: GameEvent) -> None:
        await self.broadcast(
            event.game_id,
            {"type": "game_event", "game_id": event.game_id, "event": event.to_payload()},
        )

    async def broadcast(self, game_id: str, payload: dict[str, object]) -> None:
        async with self._lock:
            conns = list(self._by_game.get(game_id, set()))

        if not conns:
            return

        dead: list[WebSocket] = []
        for ws in conns:
            try:
                await ws.send_json(payload)
            except Exception:
                dead.append(ws)

        if dead:
            async with self._lock:
                conns_now = self._by_game.get(game_id)
                if conns_now is None:
                    return
                conns_now.difference_update(dead)
                if not conns_now:
                    self._by_game.pop(game_id, None)


hub = GameWebSocketHub()
