"""
Type definitions used across layers
"""

from enum import StrEnum


class GameStatus(StrEnum):
    """Derived from a position (+ the history of position keys). Never stored as the source of truth."""

    ACTIVE = "active"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    DRAW_FIFTY_MOVES = "draw by fifty moves"
    DRAW_REPETITION = "draw by repetition"
    RESIGNED = "resigned"

    @property
    def is_terminal(self) -> bool:
        return self not in (GameStatus.ACTIVE, GameStatus.CHECK)


# --- Boundary versions of Color and PieceType. The chess domain has its own enums in src/chess/pieces.py
# --- Convert between the two by member name: `Color[domain_color.name]`


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"


class PieceType(StrEnum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"
