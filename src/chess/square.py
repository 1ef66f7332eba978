"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass
from string import ascii_lowercase

from src.core.exceptions import InvalidSquareError

# Chess board is always 8x8. Just in case we want to try some funky stuff, make it adjustable
BOARD_DIMENSIONS = (8, 8)
FILE_NAMES = ascii_lowercase[: BOARD_DIMENSIONS[0]]


@dataclass(frozen=True)
class Square:
    """Files and ranks are counted from 1: a1 is (1, 1), h8 is (8, 8)."""

    file: int
    rank: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a1' - 'h8' get converted to (1,1) - (8,8)"""
        if not is_valid_square_name(sq):
            raise InvalidSquareError(sq)
        file = FILE_NAMES.index(sq[0]) + 1
        rank = int(sq[1:])
        return cls(file, rank)

    @classmethod
    def from_indices(cls, file_index: int, rank_index: int) -> Square:
        """Zero-based grid coordinates: (0, 0) is a1."""
        return cls(file_index + 1, rank_index + 1)

    def to_algebraic(self) -> str:
        return f"{chr(self.file + ord('a') - 1)}{self.rank}"

    @property
    def file_index(self) -> int:
        return self.file - 1

    @property
    def rank_index(self) -> int:
        return self.rank - 1

    @property
    def file_name(self) -> str:
        return FILE_NAMES[self.file_index]

    def is_within_bounds(self) -> bool:
        return (1 <= self.file <= BOARD_DIMENSIONS[0]) and (
            1 <= self.rank <= BOARD_DIMENSIONS[1]
        )

    def offset(self, df: int, dr: int) -> Square:
        """The square shifted by (df, dr). Might be off the board, check with `is_within_bounds()`."""
        return Square(self.file + df, self.rank + dr)

    def __str__(self) -> str:
        return self.to_algebraic()


def is_valid_square_name(square: str) -> bool:
    """Valid square should be a letter for the file + a number for the rank"""
    if not isinstance(square, str) or len(square) < 2:
        return False

    # NOTE: The following works as long as we do not go beyond 26 files. Seems like a reasonable assumption for now ;-)
    file_char, rank_char = square[0], square[1:]
    if file_char not in FILE_NAMES:
        return False

    if not rank_char.isdigit():
        return False

    return 1 <= int(rank_char) <= BOARD_DIMENSIONS[1]


ALL_SQUARES: tuple[Square, ...] = tuple(
    Square(file, rank)
    for rank in range(1, BOARD_DIMENSIONS[1] + 1)
    for file in range(1, BOARD_DIMENSIONS[0] + 1)
)
