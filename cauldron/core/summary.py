from __future__ import annotations

from collections.abc import Iterable

from cauldron.core.models import RunSummary
from cauldron.core.parser import GameEventParser


def summarize(parsers: Iterable[GameEventParser], *, lines_read: int = 0, decode_errors: int = 0) -> RunSummary:
    """Fold per-game counters into run-wide totals. Read-only."""

    summary = RunSummary(lines_read=lines_read, decode_errors=decode_errors)
    for p in parsers:
        summary.games_tracked += 1
        summary.processed += p.processed
        summary.discarded_duplicates += p.discarded_duplicates
        summary.errors += p.errors
        if p.errors > 0:
            summary.error_game_ids.append(p.game_id)
    return summary


def format_summary(summary: RunSummary) -> str:
    lines = ["Error Games:"]
    lines.extend(summary.error_game_ids)
    lines.append("=========")
    lines.extend(
        [
            f"Lines Read: {summary.lines_read}",
            f"Undecodable Lines: {summary.decode_errors}",
            f"Updates Processed: {summary.processed}",
            f"Duplicates Discarded: {summary.discarded_duplicates}",
            f"Games With Errors: {summary.games_with_errors}",
            f"Errors: {summary.errors}",
            f"Games Found: {summary.games_tracked}",
        ]
    )
    return "\n".join(lines)
