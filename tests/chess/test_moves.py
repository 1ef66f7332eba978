"""Unit tests for /src/chess/moves.py"""

from typing import Callable
from unittest.mock import Mock, patch

import pytest

from src.chess.board import Board
from src.chess.castling import CastlingDirection, CastlingRights
from src.chess.moves import (
    ATTACK_CONTEXT,
    GenerationContext,
    Move,
    MoveKind,
    all_pseudo_legal_moves,
    attacking_squares,
    attacks_square,
    castling_moves,
    pseudo_legal_moves,
)
from src.chess.pieces import Color, Piece, PieceType
from src.chess.square import Square

EMPTY_CONTEXT = GenerationContext()


@pytest.fixture
def targets_from() -> Callable[[str, str], set[str]]:
    """Call the inner function with a board FEN and a square, get the pseudo-legal target squares of that piece"""

    def _targets_from(placement: str, square_name: str) -> set[str]:
        board = Board.from_fen(placement)
        square = Square.from_algebraic(square_name)
        piece = board.piece(square)
        assert piece is not None
        return {
            move.to_square.to_algebraic()
            for move in pseudo_legal_moves(piece, square, board, EMPTY_CONTEXT)
        }

    return _targets_from


# --- DISPATCH ---
@pytest.mark.parametrize("piece_type", list(PieceType))
def test_pseudo_legal_moves_dispatches_on_piece_type(piece_type: PieceType) -> None:
    """Every piece type has its own movement rule, and only that one gets called"""
    mock_rules = {pt: Mock(return_value=[]) for pt in PieceType}
    piece = Piece(piece_type, Color.WHITE)
    board = Board.empty()
    square = Square.from_algebraic("d4")

    with patch.dict("src.chess.moves.MOVEMENT_RULES", mock_rules):
        pseudo_legal_moves(piece, square, board, EMPTY_CONTEXT)

    mock_rules[piece_type].assert_called_once_with(piece, square, board, EMPTY_CONTEXT)
    for other_type, mock_rule in mock_rules.items():
        if other_type != piece_type:
            mock_rule.assert_not_called()


# --- GEOMETRY ---
@pytest.mark.parametrize(
    "fen_char, square, expected_count",
    [
        ("N", "d4", 8),
        ("N", "a1", 2),
        ("B", "d4", 13),
        ("B", "a1", 7),
        ("R", "d4", 14),
        ("R", "a1", 14),
        ("Q", "d4", 27),
        ("Q", "a1", 21),
        ("K", "d4", 8),
        ("K", "a1", 3),
    ],
)
def test_number_of_moves_on_empty_board(
    fen_char: str, square: str, expected_count: int
) -> None:
    board = Board.empty().place_piece(Piece.from_fen(fen_char), Square.from_algebraic(square))
    piece = board.piece(Square.from_algebraic(square))
    assert piece is not None
    moves = pseudo_legal_moves(piece, Square.from_algebraic(square), board, EMPTY_CONTEXT)
    assert len(moves) == expected_count


def test_rays_stop_at_pieces(targets_from: Callable[[str, str], set[str]]) -> None:
    """Rook on d4: own pawn on d6 blocks (not included), black pawn on f4 can be taken (included)"""
    targets = targets_from("8/8/3P4/8/3R1p2/8/8/8", "d4")
    assert targets == {"d5", "e4", "f4", "c4", "b4", "a4", "d3", "d2", "d1"}


def test_capture_move_records_captured_piece() -> None:
    board = Board.from_fen("8/8/8/8/3R1p2/8/8/8")
    rook = Piece(PieceType.ROOK, Color.WHITE)
    moves = pseudo_legal_moves(rook, Square.from_algebraic("d4"), board, EMPTY_CONTEXT)
    capture = next(move for move in moves if move.to_square == Square.from_algebraic("f4"))
    assert capture.kind == MoveKind.CAPTURE
    assert capture.captured_piece == Piece(PieceType.PAWN, Color.BLACK)
    assert capture.captured_square == Square.from_algebraic("f4")


# --- PAWNS ---
@pytest.mark.parametrize(
    "placement, square, expected",
    [
        ("8/8/8/8/8/8/4P3/8", "e2", {"e3", "e4"}),
        ("8/8/8/8/8/4P3/8/8", "e3", {"e4"}),
        ("8/8/8/8/4p3/8/4P3/8", "e2", {"e3"}),
        ("8/8/8/8/8/4p3/4P3/8", "e2", set()),
        ("8/8/8/8/8/3p1p2/4P3/8", "e2", {"e3", "e4", "d3", "f3"}),
        ("8/4p3/8/8/8/8/8/8", "e7", {"e6", "e5"}),
        ("8/8/8/8/8/3P1P2/4p3/3R1R2", "e2", {"e1", "d1", "f1"}),
    ],
)
def test_pawn_moves(
    targets_from: Callable[[str, str], set[str]],
    placement: str,
    square: str,
    expected: set[str],
) -> None:
    """pushes only onto empty squares, double step from the start rank only, diagonal captures only"""
    assert targets_from(placement, square) == expected


def test_pawn_does_not_capture_own_pieces(targets_from: Callable[[str, str], set[str]]) -> None:
    assert targets_from("8/8/8/8/8/3P1P2/4P3/8", "e2") == {"e3", "e4"}


def test_pawn_reaching_final_rank_is_flagged_for_promotion() -> None:
    """Promotion moves are generated without the piece to promote into"""
    board = Board.from_fen("1n6/P7/8/8/8/8/8/8")
    pawn = Piece(PieceType.PAWN, Color.WHITE)
    moves = pseudo_legal_moves(pawn, Square.from_algebraic("a7"), board, EMPTY_CONTEXT)

    assert {move.to_uci() for move in moves} == {"a7a8", "a7b8"}
    assert all(move.kind == MoveKind.PROMOTION for move in moves)
    assert all(move.promote_to is None for move in moves)

    capture = next(move for move in moves if move.to_square == Square.from_algebraic("b8"))
    assert capture.is_capture
    assert capture.with_promotion(PieceType.QUEEN).to_uci() == "a7b8q"


def test_en_passant_only_onto_context_square() -> None:
    board = Board.from_fen("8/8/8/3pP3/8/8/8/8")
    pawn = Piece(PieceType.PAWN, Color.WHITE)
    e5 = Square.from_algebraic("e5")

    without = pseudo_legal_moves(pawn, e5, board, EMPTY_CONTEXT)
    assert {move.to_uci() for move in without} == {"e5e6"}

    context = GenerationContext(en_passant_square=Square.from_algebraic("d6"))
    with_ep = pseudo_legal_moves(pawn, e5, board, context)
    en_passant = next(move for move in with_ep if move.kind == MoveKind.EN_PASSANT)
    assert en_passant.to_uci() == "e5d6"
    assert en_passant.captured_piece == Piece(PieceType.PAWN, Color.BLACK)
    assert en_passant.captured_square == Square.from_algebraic("d5")


def test_all_pseudo_legal_moves_starting_position() -> None:
    board = Board.from_fen("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR")
    assert len(all_pseudo_legal_moves(board, Color.WHITE, EMPTY_CONTEXT)) == 20
    assert len(all_pseudo_legal_moves(board, Color.BLACK, EMPTY_CONTEXT)) == 20


# --- ATTACKS ---
@pytest.mark.parametrize(
    "placement, square, by_color, expected",
    [
        ("8/8/8/8/3R4/8/8/8", "d8", Color.WHITE, True),
        ("8/8/3p4/8/3R4/8/8/8", "d8", Color.WHITE, False),
        ("8/8/8/8/3N4/8/8/8", "e6", Color.WHITE, True),
        ("8/8/8/8/3N4/8/8/8", "d5", Color.WHITE, False),
        ("8/8/8/8/8/8/4P3/8", "d3", Color.WHITE, True),
        ("8/8/8/8/8/8/4P3/8", "e3", Color.WHITE, False),
        ("8/8/8/8/8/8/8/4k3", "d2", Color.BLACK, True),
        ("8/3p4/8/8/8/8/8/8", "c6", Color.BLACK, True),
        ("8/3p4/8/8/8/8/8/8", "d6", Color.BLACK, False),
    ],
)
def test_attacks_square(
    placement: str, square: str, by_color: Color, expected: bool
) -> None:
    """Pawns attack diagonally (also empty squares), but never the square in front of them"""
    board = Board.from_fen(placement)
    assert attacks_square(board, Square.from_algebraic(square), by_color) == expected


@pytest.mark.parametrize(
    "by_color, expected",
    [(Color.BLACK, {"d5", "e8", "f6"}), (Color.WHITE, set())],
)
def test_attacking_squares(by_color: Color, expected: set[str]) -> None:
    """Rook down the file, knight jump and pawn diagonal hit e4; the bishop on a8 is blocked by the pawn"""
    board = Board.from_fen("b3r3/8/5n2/3p4/8/8/8/8")
    attackers = attacking_squares(board, Square.from_algebraic("e4"), by_color)
    assert {square.to_algebraic() for square in attackers} == expected


def test_attack_context_skips_castling() -> None:
    board = Board.from_fen("8/8/8/8/8/8/8/R3K2R")
    king = Piece(PieceType.KING, Color.WHITE)
    e1 = Square.from_algebraic("e1")
    context = GenerationContext(castling_rights=CastlingRights())

    assert any(move.is_castling for move in pseudo_legal_moves(king, e1, board, context))
    assert not any(
        move.is_castling for move in pseudo_legal_moves(king, e1, board, ATTACK_CONTEXT)
    )


# --- CASTLING ---
def _castling_targets(placement: str, color: Color, rights: str = "KQkq") -> set[str]:
    board = Board.from_fen(placement)
    king_square = board.king_square(color)
    assert king_square is not None
    king = Piece(PieceType.KING, color)
    moves = castling_moves(king, king_square, board, CastlingRights.from_fen(rights))
    return {move.to_square.to_algebraic() for move in moves}


def test_castling_both_sides() -> None:
    assert _castling_targets("r3k2r/8/8/8/8/8/8/R3K2R", Color.WHITE) == {"g1", "c1"}
    assert _castling_targets("r3k2r/8/8/8/8/8/8/R3K2R", Color.BLACK) == {"g8", "c8"}


def test_castling_needs_rights() -> None:
    assert _castling_targets("r3k2r/8/8/8/8/8/8/R3K2R", Color.WHITE, "Qkq") == {"c1"}
    assert _castling_targets("r3k2r/8/8/8/8/8/8/R3K2R", Color.WHITE, "-") == set()


def test_castling_needs_empty_squares_in_between() -> None:
    """b1 must be empty for queen side castling, even though the king never crosses it"""
    assert _castling_targets("r3k2r/8/8/8/8/8/8/RN2K1NR", Color.WHITE) == set()


def test_castling_needs_the_rook_in_place() -> None:
    assert _castling_targets("r3k2r/8/8/8/8/8/8/4K2R", Color.WHITE) == {"g1"}


@pytest.mark.parametrize(
    "placement, expected",
    [
        # rook on f8 covers f1: king side blocked, queen side still available
        ("5r2/8/8/8/8/8/8/R3K2R", {"c1"}),
        # rook on g8 covers the landing square g1
        ("6r1/8/8/8/8/8/8/R3K2R", {"c1"}),
        # rook on e8 gives check: no castling at all
        ("4r3/8/8/8/8/8/8/R3K2R", set()),
        # rook on b8 covers b1 only, which the king never crosses
        ("1r6/8/8/8/8/8/8/R3K2R", {"g1", "c1"}),
        # pawn on e2 attacks d1 and f1
        ("8/8/8/8/8/8/4p3/R3K2R", set()),
    ],
)
def test_castling_through_attacked_squares(placement: str, expected: set[str]) -> None:
    """The king may not castle out of, through, or into check"""
    assert _castling_targets(placement, Color.WHITE, "KQ") == expected


def test_castling_move_carries_rook_move() -> None:
    board = Board.from_fen("8/8/8/8/8/8/8/R3K2R")
    king = Piece(PieceType.KING, Color.WHITE)
    moves = castling_moves(king, Square.from_algebraic("e1"), board, CastlingRights())
    king_side: Move = next(move for move in moves if move.kind == MoveKind.CASTLE_KING_SIDE)
    assert king_side.rook_move is not None
    assert king_side.rook_move.rook_from == Square.from_algebraic("h1")
    assert king_side.rook_move.rook_to == Square.from_algebraic("f1")
    assert king_side.to_uci() == "e1g1"
    assert not king_side.is_capture
    assert CastlingDirection.WHITE_KING_SIDE.is_king_side
