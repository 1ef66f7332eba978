"""Helpers for implementing Castling rules. Need to be imported by multiple sources"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from src.chess.pieces import Color
from src.chess.square import Square


class CastlingDirection(Enum):
    """The four castling directions. Values represent their encodings in FEN string."""

    WHITE_KING_SIDE = "K"
    WHITE_QUEEN_SIDE = "Q"
    BLACK_KING_SIDE = "k"
    BLACK_QUEEN_SIDE = "q"

    @property
    def color(self) -> Color:
        return Color.WHITE if self.value.isupper() else Color.BLACK

    @property
    def is_king_side(self) -> bool:
        return self.value.lower() == "k"


CASTLING_ORDER: tuple[CastlingDirection, ...] = (
    CastlingDirection.WHITE_KING_SIDE,
    CastlingDirection.WHITE_QUEEN_SIDE,
    CastlingDirection.BLACK_KING_SIDE,
    CastlingDirection.BLACK_QUEEN_SIDE,
)


@dataclass(frozen=True)
class CastlingSquares:
    """
    Store the squares where king/rook start from/end up in by castling.
    NOTE: If castling rights have not been revoked, we expect the king / rook to still be at their starting squares.
    """

    king_from: Square
    king_to: Square
    rook_from: Square
    rook_to: Square

    @classmethod
    def from_algebraic(
        cls, k_from: str, k_to: str, r_from: str, r_to: str
    ) -> CastlingSquares:
        """Convenience method: to make mapping shown below (from CastlingDirection) more readable"""
        king_from = Square.from_algebraic(k_from)
        king_to = Square.from_algebraic(k_to)
        rook_from = Square.from_algebraic(r_from)
        rook_to = Square.from_algebraic(r_to)
        return cls(king_from, king_to, rook_from, rook_to)

    def squares_between(self) -> list[Square]:
        """Squares strictly between king and rook. All of them must be empty to castle."""
        low, high = sorted((self.king_from.file, self.rook_from.file))
        return [Square(file, self.king_from.rank) for file in range(low + 1, high)]

    def king_path(self) -> list[Square]:
        """Start square, every square the king transits, and its destination. None of them may be attacked."""
        step = 1 if self.king_to.file > self.king_from.file else -1
        return [
            Square(file, self.king_from.rank)
            for file in range(self.king_from.file, self.king_to.file + step, step)
        ]


# The moves (in classical chess) made when castling
CASTLING_RULES: dict[CastlingDirection, CastlingSquares] = {
    CastlingDirection.WHITE_KING_SIDE: CastlingSquares.from_algebraic(
        "e1", "g1", "h1", "f1"
    ),
    CastlingDirection.WHITE_QUEEN_SIDE: CastlingSquares.from_algebraic(
        "e1", "c1", "a1", "d1"
    ),
    CastlingDirection.BLACK_KING_SIDE: CastlingSquares.from_algebraic(
        "e8", "g8", "h8", "f8"
    ),
    CastlingDirection.BLACK_QUEEN_SIDE: CastlingSquares.from_algebraic(
        "e8", "c8", "a8", "d8"
    ),
}


def castling_directions(color: Color) -> tuple[CastlingDirection, ...]:
    return tuple(direction for direction in CASTLING_ORDER if direction.color == color)


@dataclass(frozen=True)
class CastlingRights:
    """
    Four independent flags. Rights only ever get revoked, never granted back.
    ---

    Revoked when:
    * the king leaves its starting square (both directions)
    * a rook leaves its starting square (direction of that rook)
    * a rook gets captured on its starting square (direction of that rook)
    """

    white_king_side: bool = True
    white_queen_side: bool = True
    black_king_side: bool = True
    black_queen_side: bool = True

    @classmethod
    def none(cls) -> CastlingRights:
        return cls(False, False, False, False)

    @classmethod
    def from_fen(cls, castle_fen: str) -> CastlingRights:
        """parse the part of the FEN string that encodes castling rights"""
        return cls(
            white_king_side=CastlingDirection.WHITE_KING_SIDE.value in castle_fen,
            white_queen_side=CastlingDirection.WHITE_QUEEN_SIDE.value in castle_fen,
            black_king_side=CastlingDirection.BLACK_KING_SIDE.value in castle_fen,
            black_queen_side=CastlingDirection.BLACK_QUEEN_SIDE.value in castle_fen,
        )

    def to_fen(self) -> str:
        """create the part of the FEN string that encodes castling rights"""
        castling_chars = "".join(
            direction.value for direction in CASTLING_ORDER if self.has(direction)
        )
        return castling_chars or "-"

    def has(self, direction: CastlingDirection) -> bool:
        return getattr(self, _FIELD_NAMES[direction])

    def has_any(self, color: Color) -> bool:
        return any(self.has(direction) for direction in castling_directions(color))

    def revoke(self, *directions: CastlingDirection) -> CastlingRights:
        changes = {_FIELD_NAMES[direction]: False for direction in directions}
        return replace(self, **changes)

    def revoke_all(self, color: Color) -> CastlingRights:
        return self.revoke(*castling_directions(color))


_FIELD_NAMES: dict[CastlingDirection, str] = {
    CastlingDirection.WHITE_KING_SIDE: "white_king_side",
    CastlingDirection.WHITE_QUEEN_SIDE: "white_queen_side",
    CastlingDirection.BLACK_KING_SIDE: "black_king_side",
    CastlingDirection.BLACK_QUEEN_SIDE: "black_queen_side",
}
