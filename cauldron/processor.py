from __future__ import annotations

import io
import logging
from collections.abc import Callable, Iterable, Iterator
from typing import TextIO

from cauldron.core.decoder import DecodeError, decode_update
from cauldron.core.models import GameEvent, RunSummary
from cauldron.core.parser import ParserOptions
from cauldron.core.summary import summarize
from cauldron.core.tracker import GameStateTracker

logger = logging.getLogger(__name__)


class Processor:
    """Reads game update lines and produces GameEvents in encounter order.

    Keeps the run-level counters that have no game to be attributed to.
    """

    def __init__(self, *, options: ParserOptions | None = None) -> None:
        self.tracker = GameStateTracker(options=options)
        self.lines_read = 0
        self.decode_errors = 0

    def process_line(self, line: str) -> list[GameEvent]:
        self.lines_read += 1

        update = decode_update(line)
        if isinstance(update, DecodeError):
            self.decode_errors += 1
            logger.warning("Skipping undecodable line (%s) while processing: %s", update.cause, update.raw_line)
            return []

        events: list[GameEvent] = []
        for snapshot in update.snapshots:
            parser = self.tracker.route(snapshot.game_id)
            result = parser.parse(snapshot, observed_at=update.observed_at)
            if result.event is not None:
                events.append(result.event)
        return events

    def process(self, lines: Iterable[str]) -> Iterator[GameEvent]:
        for line in lines:
            yield from self.process_line(line.rstrip("\r\n"))

    def process_text(self, text: str) -> list[GameEvent]:
        # Only \r, \n and \r\n end a line; JSON strings may carry other line separators.
        return list(self.process(io.StringIO(text, newline=None)))

    def process_stream(
        self,
        source: TextIO,
        sink: TextIO,
        *,
        on_event: Callable[[GameEvent], None] | None = None,
    ) -> RunSummary:
        for event in self.process(source):
            sink.write(event.to_json() + "\n")
            if on_event is not None:
                on_event(event)
        sink.flush()
        return self.summarize()

    def summarize(self) -> RunSummary:
        return summarize(self.tracker, lines_read=self.lines_read, decode_errors=self.decode_errors)
