from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, WebSocket, WebSocketDisconnect, status
import redis

from cauldron.api.deps import get_redis
from cauldron.api.models import (
    GameEventsResponse,
    GameListResponse,
    ProcessResponse,
    StreamMessage,
    SummaryResponse,
)
from cauldron.core.models import GameCounters
from cauldron.core.summary import format_summary
from cauldron.runtime import get_processor
from cauldron.streams import EventStream, publish_events
from cauldron.websocket_hub import hub

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws/games/{game_id}")
async def game_events_ws(websocket: WebSocket, game_id: str) -> None:
    await hub.connect(game_id, websocket)

    try:
        # Keep the socket open; client can optionally send pings.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await hub.disconnect(game_id, websocket)
    except Exception:
        await hub.disconnect(game_id, websocket)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/updates", response_model=ProcessResponse)
async def process_updates_route(request: Request, r: redis.Redis = Depends(get_redis)) -> ProcessResponse:
    """Feed a newline-delimited JSON body of game updates through the shared processor.

    Runs on the event loop, so bodies are applied one at a time in arrival order.
    """

    body = (await request.body()).decode("utf-8", errors="replace")

    processor = get_processor()
    lines_before = processor.lines_read
    decode_errors_before = processor.decode_errors

    events = processor.process_text(body)

    # The parsers have already advanced; a sink failure must not lose these events.
    sink_error: str | None = None
    try:
        publish_events(r=r, events=events)
    except redis.RedisError as e:
        sink_error = str(e) or type(e).__name__
        logger.warning("Failed to publish %d event(s) to Redis: %s", len(events), sink_error)

    for event in events:
        await hub.broadcast_event(event)

    return ProcessResponse(
        lines_read=processor.lines_read - lines_before,
        decode_errors=processor.decode_errors - decode_errors_before,
        events=events,
        sink_error=sink_error,
    )


@router.get("/summary", response_model=SummaryResponse)
async def summary_route() -> SummaryResponse:
    summary = get_processor().summarize()
    return SummaryResponse(**summary.model_dump(exclude={"games_with_errors"}), text=format_summary(summary))


@router.get("/games", response_model=GameListResponse)
async def list_games_route() -> GameListResponse:
    return GameListResponse(games=[p.counters() for p in get_processor().tracker])


@router.get("/games/{game_id}", response_model=GameCounters)
async def get_game_route(game_id: str) -> GameCounters:
    parser = get_processor().tracker.get(game_id)
    if parser is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Game not found")
    return parser.counters()


@router.get("/games/{game_id}/events", response_model=GameEventsResponse)
async def get_game_events_route(
    game_id: str,
    count: int = 20,
    start: str = "-",
    end: str = "+",
    r: redis.Redis = Depends(get_redis),
) -> GameEventsResponse:
    """Debug endpoint: read a game's published events back from its Redis Stream."""

    if count < 1 or count > 200:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="count must be between 1 and 200")

    stream_key = EventStream(game_id=game_id).key
    try:
        entries = r.xrange(stream_key, min=start, max=end, count=count)
    except redis.RedisError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    messages = [StreamMessage(id=mid, fields=fields) for mid, fields in entries]
    return GameEventsResponse(game_id=game_id, stream=stream_key, messages=messages)
