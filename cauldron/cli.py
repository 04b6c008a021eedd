from __future__ import annotations

import dataclasses
import logging
import sys
from pathlib import Path
from typing import TextIO

import typer

from cauldron.config import settings_from_env
from cauldron.core.models import GameEvent
from cauldron.core.summary import format_summary
from cauldron.infra.redis_client import create_redis
from cauldron.processor import Processor
from cauldron.streams import publish_event

app = typer.Typer(add_completion=False)


def _open_source(source: Path) -> TextIO:
    if str(source) == "-":
        return sys.stdin
    return source.open("r", encoding="utf-8")


def _open_sink(output: Path | None) -> TextIO:
    if output is None or str(output) == "-":
        return sys.stdout
    output.parent.mkdir(parents=True, exist_ok=True)
    return output.open("w", encoding="utf-8")


@app.callback()
def main_callback() -> None:
    """Reduce a stream of game updates to game events."""


@app.command("process")
def cmd_process(
    source: Path = typer.Argument(..., help="newline-delimited JSON updates ('-' for stdin)"),
    output: Path | None = typer.Option(None, "--output", "-o", help="where to write events (default: stdout)"),
    redis_events: bool = typer.Option(
        False,
        "--redis/--no-redis",
        help="also publish each event to its game's Redis stream (REDIS_URL)",
    ),
    ignore_field: list[str] = typer.Option([], "--ignore-field", help="snapshot field that never counts as a change"),
    sequence_field: str | None = typer.Option(
        None,
        help="numeric field that must not go backwards (default: CAULDRON_SEQUENCE_FIELD or playCount)",
    ),
    log_level: str | None = typer.Option(None, help="log level (default: CAULDRON_LOG_LEVEL or INFO)"),
) -> None:
    """Process an update stream, write events as NDJSON, and print a run summary to stderr."""
    settings = settings_from_env()
    logging.basicConfig(level=(log_level or settings.log_level).upper(), stream=sys.stderr)

    if str(source) != "-" and not source.is_file():
        typer.echo(f"input not found: {source}", err=True)
        raise typer.Exit(code=1)

    options = settings.parser
    if ignore_field:
        options = dataclasses.replace(options, ignored_fields=options.ignored_fields | frozenset(ignore_field))
    if sequence_field is not None:
        options = dataclasses.replace(options, sequence_field=sequence_field or None)

    r = create_redis(settings.redis_url) if redis_events else None

    def on_event(event: GameEvent) -> None:
        if r is not None:
            publish_event(r=r, event=event)

    processor = Processor(options=options)
    src = _open_source(source)
    sink = _open_sink(output)
    try:
        summary = processor.process_stream(src, sink, on_event=on_event)
    finally:
        if src is not sys.stdin:
            src.close()
        if sink is not sys.stdout:
            sink.close()
        if r is not None:
            r.close()

    typer.echo(format_summary(summary), err=True)


def main(argv: list[str] | None = None) -> None:
    app(prog_name="cauldron", args=argv)


if __name__ == "__main__":
    main()
