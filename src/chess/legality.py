"""
Legality filter: a pseudo-legal move is legal if it does not leave (or put) your own king under attack.

Every candidate gets played on a scratch copy of the board, the live board never changes.
"""

from typing import Optional

from src.chess.board import Board
from src.chess.moves import (
    GenerationContext,
    Move,
    all_pseudo_legal_moves,
    attacks_square,
    pseudo_legal_moves,
)
from src.chess.pieces import Color
from src.chess.position import Position
from src.chess.square import Square


def leaves_king_safe(board: Board, move: Move, color: Color) -> bool:
    """
    Return True if the move does not leave you in check

    plan:
    1. Copy the board (apply_move hands back a scratch copy)
    2. make the candidate move
    3. determine if the king is attacked on the new board
    """
    board_after = board.apply_move(move)
    king = board_after.king_square(color)
    if king is None:
        # Custom positions without a king: nothing to protect
        return True
    return not attacks_square(board_after, king, color.opponent)


def is_legal(
    board: Board,
    from_square: Square,
    to_square: Square,
    color: Color,
    context: GenerationContext,
) -> bool:
    """Is moving the `color` piece on `from_square` to `to_square` a legal move?"""
    return _find_move(board, from_square, to_square, color, context) is not None


def _find_move(
    board: Board,
    from_square: Square,
    to_square: Square,
    color: Color,
    context: GenerationContext,
) -> Optional[Move]:
    piece = board.piece(from_square)
    if piece is None or piece.color != color:
        return None

    for move in pseudo_legal_moves(piece, from_square, board, context):
        if move.to_square == to_square and leaves_king_safe(board, move, color):
            return move
    return None


def legal_moves(position: Position) -> list[Move]:
    """
    List of legal moves for the side to move
    ----

    1. generate candidate moves (castling and en passant included), using the movement rules for all pieces
    2. remove the ones that put (or leave) you in check
    """
    color = position.color_to_move
    candidate_moves = all_pseudo_legal_moves(
        position.board, color, position.generation_context()
    )
    return [
        move
        for move in candidate_moves
        if leaves_king_safe(position.board, move, color)
    ]


def has_legal_move(position: Position) -> bool:
    """Stops at the first legal move found. Cheaper than `legal_moves()` when only asking for mate/stalemate."""
    color = position.color_to_move
    board = position.board
    context = position.generation_context()
    for square in board.locate_color(color):
        piece = board.piece(square)
        assert piece is not None
        for move in pseudo_legal_moves(piece, square, board, context):
            if leaves_king_safe(board, move, color):
                return True
    return False


def legal_moves_from(position: Position, square: Square) -> list[Move]:
    """Legal moves of the piece on a single square. Empty if the square holds no piece of the side to move."""
    piece = position.board.piece(square)
    if piece is None or piece.color != position.color_to_move:
        return []

    candidate_moves = pseudo_legal_moves(
        piece, square, position.board, position.generation_context()
    )
    return [
        move
        for move in candidate_moves
        if leaves_king_safe(position.board, move, piece.color)
    ]


def legal_destinations(position: Position, square: Square) -> list[Square]:
    """The squares to highlight when a player picks up the piece on `square`."""
    destinations: list[Square] = []
    for move in legal_moves_from(position, square):
        if move.to_square not in destinations:
            destinations.append(move.to_square)
    return destinations


def find_legal_move(
    position: Position, from_square: Square, to_square: Square
) -> Optional[Move]:
    """The legal move matching the from/to pair, if any (promotion piece not filled in yet)."""
    return _find_move(
        position.board,
        from_square,
        to_square,
        position.color_to_move,
        position.generation_context(),
    )

