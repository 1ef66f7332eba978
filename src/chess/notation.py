"""
Standard Algebraic Notation (SAN) for single moves, and PGN-style move text for a list of them.

SAN rendering is a display concern on top of already validated moves: it never raises.
Malformed input renders as "?", a move that is not among the legal moves supplied renders as "??".
"""

import logging
import re
from typing import Optional, Sequence

from src.chess.evaluation import is_checkmate, is_in_check
from src.chess.legality import legal_moves as generate_legal_moves
from src.chess.moves import Move, MoveKind
from src.chess.pieces import PIECE_TO_SAN
from src.chess.position import Position

logger = logging.getLogger(__name__)

MALFORMED_SAN = "?"
UNKNOWN_MOVE_SAN = "??"
KING_SIDE_CASTLE = "O-O"
QUEEN_SIDE_CASTLE = "O-O-O"

SAN_PATTERN = re.compile(
    r"^([KQRBN])?([a-h]?[1-8]?)x?([a-h][1-8])(=[QRBN])?[+#]?$|^O-O(-O)?[+#]?$"
)


def to_san(
    move: Move, position: Position, legal_moves: Optional[Sequence[Move]] = None
) -> str:
    """
    SAN of a move played in `position` (the position BEFORE the move)
    ----

    1. castling: O-O / O-O-O
    2. piece letter (none for pawns)
    3. disambiguation, if another piece of the same kind can reach the same square
    4. capture marker 'x' (pawn captures name the file they come from)
    5. target square
    6. promotion: =Q, =R, =B, =N
    7. check (+) or mate (#), determined on the position after the move. Must come last.

    `legal_moves` are all legal moves of the side to move; generated if not supplied.
    """
    try:
        if legal_moves is None:
            legal_moves = generate_legal_moves(position)

        if not _is_among(move, legal_moves):
            logger.warning("Cannot render SAN, move %s is not legal here", move)
            return UNKNOWN_MOVE_SAN

        san = _san_without_suffix(move, legal_moves)
        return san + _check_suffix(move, position)
    except Exception:
        logger.warning("Cannot render SAN for move %r", move, exc_info=True)
        return MALFORMED_SAN


def _is_among(move: Move, legal_moves: Sequence[Move]) -> bool:
    """The promotion piece is chosen by the player, so it is ignored when comparing."""
    return any(
        candidate.from_square == move.from_square
        and candidate.to_square == move.to_square
        and candidate.piece == move.piece
        and candidate.kind == move.kind
        for candidate in legal_moves
    )


def _san_without_suffix(move: Move, legal_moves: Sequence[Move]) -> str:
    if move.kind == MoveKind.CASTLE_KING_SIDE:
        return KING_SIDE_CASTLE
    if move.kind == MoveKind.CASTLE_QUEEN_SIDE:
        return QUEEN_SIDE_CASTLE
    if move.kind == MoveKind.PROMOTION and move.promote_to is None:
        raise ValueError(f"Promotion move {move} without a piece to promote into")

    piece_letter = move.piece.to_san()
    disambiguation = disambiguate(move, legal_moves)

    san = piece_letter + disambiguation
    if move.is_capture:
        if piece_letter == "" and not disambiguation:
            san += move.from_square.file_name
        san += "x"

    san += move.to_square.to_algebraic()

    if move.promote_to is not None:
        san += "=" + PIECE_TO_SAN[move.promote_to]
    return san


def disambiguate(move: Move, legal_moves: Sequence[Move]) -> str:
    """
    Minimal origin information needed to tell the move apart
    ---

    Among the other legal moves of the same piece (type and color) onto the same square:
    * none share the origin file? --> the file
    * none share the origin rank? --> the rank
    * otherwise --> the full origin square
    """
    rivals = {
        candidate.from_square
        for candidate in legal_moves
        if candidate.piece == move.piece
        and candidate.to_square == move.to_square
        and candidate.from_square != move.from_square
    }
    if not rivals:
        return ""

    origin = move.from_square
    if all(square.file != origin.file for square in rivals):
        return origin.file_name
    if all(square.rank != origin.rank for square in rivals):
        return str(origin.rank)
    return origin.to_algebraic()


def _check_suffix(move: Move, position: Position) -> str:
    position_after = position.apply_move(move)
    if is_checkmate(position_after):
        return "#"
    if is_in_check(position_after):
        return "+"
    return ""


def moves_to_pgn(
    sans: Sequence[str], first_move_number: int = 1, black_moves_first: bool = False
) -> str:
    """
    Move text: "1. e4 e5 2. Nf3 Nc6"
    ---

    A game started from a custom position with Black to move begins with "<n>... <san>".
    """
    tokens: list[str] = []
    move_number = first_move_number
    # ply 0 is White's move unless the list starts with a Black move
    offset = 1 if black_moves_first else 0
    for idx, san in enumerate(sans):
        ply = idx + offset
        if ply % 2 == 0:
            tokens.append(f"{move_number}.")
        elif idx == 0:
            tokens.append(f"{move_number}...")
        tokens.append(san or MALFORMED_SAN)
        if ply % 2 == 1:
            move_number += 1
    return " ".join(tokens)


def is_valid_san(san: str) -> bool:
    """Structural check only: does the string look like SAN?"""
    if not isinstance(san, str) or not san:
        return False
    return SAN_PATTERN.match(san) is not None
