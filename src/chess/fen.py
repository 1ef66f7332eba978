"""
Syntax of FEN strings: validation and splitting into fields.

Building a Position out of the fields is done in position.py.
"""

from dataclasses import dataclass

from src.chess.pieces import FEN_TO_PIECE
from src.chess.square import BOARD_DIMENSIONS, is_valid_square_name
from src.core.exceptions import MalformedFenError

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
NUM_FEN_FIELDS = 6
VALID_EMPTY_RUNS = "12345678"
VALID_CASTLING_ENCODINGS = [
    "-",
    "K",
    "Q",
    "k",
    "q",
    "KQ",
    "Kk",
    "Kq",
    "Qk",
    "Qq",
    "kq",
    "KQk",
    "KQq",
    "Kkq",
    "Qkq",
    "KQkq",
]


@dataclass(frozen=True)
class FENFields:
    """
    The six space separated parts of a FEN string, still as text.
    ----

    FEN, or Forsyth-Edwards Notation, is a standard notation for describing a particular board position of a chess game.
    The purpose of FEN is to provide all the necessary information to restart a game from a particular position.

    <board position string> <active color> <castling rights> <en passant square> <half move clock> <full move number>

    * The string to describe the board position is described in the Board class
    * The active color is either "w" or "b"
    * Castling rights are denoted as "k" for king-side or "q" for queen-side. Capital letters for the white pieces, small letters for the black pieces.
        In the starting position: KQkq (all rights available). Letters disappear as rights get revoked, "-" if none are left.
    * The en passant square is the square a pawn skipped with its double step. If not available a "-" is used.
    * The half move clock counts the number of half moves made since the last pawn move or capture. (Used for the fifty-move rule)
    * The full move number starts at 1 and increments after every move black makes.

    ex) The standard starting position has a FEN
    rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1
    i.e. it is white to move, all castling options available, no en passant square, no half moves and we are in the first turn.
    """

    placement: str
    active_color: str
    castling: str
    en_passant: str
    half_move_clock: str
    full_move_number: str


def split_fen(fen: str) -> FENFields:
    """Validate the FEN string and split it into its fields. Raises MalformedFenError with the reason on failure."""
    if not isinstance(fen, str):
        raise MalformedFenError(str(fen), "not a string")

    parts = fen.split(" ")
    if len(parts) != NUM_FEN_FIELDS:
        raise MalformedFenError(
            fen, f"expected {NUM_FEN_FIELDS} space-separated fields, got {len(parts)}"
        )

    placement, color, castling, en_passant, half_moves, full_moves = parts
    _check_position(fen, placement)

    if not is_valid_color_code(color):
        raise MalformedFenError(fen, f"invalid active color {color!r}")

    if not is_valid_castling_rights(castling):
        raise MalformedFenError(fen, f"invalid castling rights {castling!r}")

    if not is_valid_en_passant(en_passant):
        raise MalformedFenError(fen, f"invalid en passant square {en_passant!r}")

    if not (is_valid_move_counter(half_moves) and is_valid_move_counter(full_moves)):
        raise MalformedFenError(fen, "move counters must be non-negative integers")

    return FENFields(placement, color, castling, en_passant, half_moves, full_moves)


def is_valid_fen(fen: str) -> bool:
    """
    Check if given string follows proper FEN notation.
    """
    try:
        split_fen(fen)
    except MalformedFenError:
        return False
    return True


def _check_position(fen: str, position: str) -> None:
    """Only check the part of the FEN encoding for the board position."""
    num_files, num_ranks = BOARD_DIMENSIONS
    rank_fens = position.split("/")
    if len(rank_fens) != num_ranks:
        raise MalformedFenError(
            fen, f"expected {num_ranks} ranks, got {len(rank_fens)}"
        )

    for rank_idx, rank_fen in enumerate(rank_fens):
        file_count = 0
        for character in rank_fen:
            # make sure every character is valid
            if character in VALID_EMPTY_RUNS:
                file_count += int(character)
            elif character.lower() in FEN_TO_PIECE:
                file_count += 1
            else:
                # immediately invalidate if the character is anything else
                raise MalformedFenError(fen, f"invalid character {character!r}")

        # make sure you are creating a correctly sized board
        if file_count != num_files:
            rank = num_ranks - rank_idx
            raise MalformedFenError(
                fen, f"rank {rank} covers {file_count} files instead of {num_files}"
            )


def is_valid_position(position: str) -> bool:
    try:
        _check_position(position, position)
    except MalformedFenError:
        return False
    return True


def is_valid_color_code(color: str) -> bool:
    return color in {"w", "b"}


def is_valid_castling_rights(castling: str) -> bool:
    """A valid castling encoding has either KQkq, KQk, etc. or a '-' if all rights have been revoked."""
    return castling in VALID_CASTLING_ENCODINGS


def is_valid_en_passant(en_passant: str) -> bool:
    """Valid en passant square encoding should be a square that exists on the board or a '-'"""
    return (en_passant == "-") or is_valid_square_name(en_passant)


def is_valid_move_counter(counter: str) -> bool:
    return counter.isascii() and counter.isdigit()

