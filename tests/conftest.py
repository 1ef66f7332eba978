"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/helpers required for testing multiple layers.
"""

from typing import Callable

import pytest

from src.chess.game import Game, parse_uci
from src.chess.position import Position


def play(game: Game, *uci_moves: str) -> Game:
    """Play a sequence of UCI moves on the game (raises on the first illegal one)."""
    for uci in uci_moves:
        from_square, to_square, promote_to = parse_uci(uci)
        game.make_move(from_square, to_square, promote_to)
    return game


@pytest.fixture
def new_game() -> Game:
    return Game.new_game()


@pytest.fixture
def position_after() -> Callable[..., Position]:
    """Call the inner function with UCI moves, get the position reached from the starting position."""

    def _position_after(*uci_moves: str) -> Position:
        return play(Game.new_game(), *uci_moves).position

    return _position_after
