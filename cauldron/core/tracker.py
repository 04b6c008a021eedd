from __future__ import annotations

from collections.abc import Callable, Iterator

from cauldron.core.parser import GameEventParser, ParserOptions


class GameStateTracker:
    """Owns one GameEventParser per game id for the lifetime of the run.

    Parsers are created on first sighting and never removed, so the same instance
    (and its baseline) is reused for every later snapshot of that game.
    """

    def __init__(self, *, options: ParserOptions | None = None) -> None:
        self.options = options or ParserOptions()
        self._by_game: dict[str, GameEventParser] = {}

    def route(self, game_id: str) -> GameEventParser:
        parser = self._by_game.get(game_id)
        if parser is None:
            parser = GameEventParser(game_id, options=self.options)
            self._by_game[game_id] = parser
        return parser

    def get(self, game_id: str) -> GameEventParser | None:
        return self._by_game.get(game_id)

    def for_each(self, fn: Callable[[GameEventParser], None]) -> None:
        for parser in self._by_game.values():
            fn(parser)

    def __iter__(self) -> Iterator[GameEventParser]:
        return iter(list(self._by_game.values()))

    def __len__(self) -> int:
        return len(self._by_game)

    def __contains__(self, game_id: object) -> bool:
        return game_id in self._by_game
