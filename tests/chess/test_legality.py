"""Unit tests for /src/chess/legality.py"""

from typing import Callable

import pytest

from src.chess.board import Board
from src.chess.legality import (
    find_legal_move,
    has_legal_move,
    is_legal,
    leaves_king_safe,
    legal_destinations,
    legal_moves,
    legal_moves_from,
)
from src.chess.moves import Move, MoveKind, all_pseudo_legal_moves, attacks_square
from src.chess.pieces import Color, Piece, PieceType
from src.chess.position import Position
from src.chess.square import Square


def _ucis(moves: list[Move]) -> set[str]:
    return {move.to_uci() for move in moves}


def test_twenty_legal_moves_in_starting_position() -> None:
    moves = legal_moves(Position.starting_position())
    assert len(moves) == 20
    assert "e2e4" in _ucis(moves)
    assert "g1f3" in _ucis(moves)


def test_pinned_piece_stays_on_the_pin_line() -> None:
    """White rook on e2 is pinned by the black rook on e8: only moves along the e-file remain"""
    position = Position.from_fen("k3r3/8/8/8/8/8/4R3/4K3 w - - 0 1")
    moves = legal_moves_from(position, Square.from_algebraic("e2"))
    assert _ucis(moves) == {"e2e3", "e2e4", "e2e5", "e2e6", "e2e7", "e2e8"}


def test_check_must_be_answered() -> None:
    """Black king on e8 checked along the e-file: e7 is still attacked"""
    position = Position.from_fen("4k3/8/8/8/8/8/8/4R1K1 b - - 0 1")
    assert _ucis(legal_moves(position)) == {"e8d8", "e8f8", "e8d7", "e8f7"}


def test_king_cannot_capture_protected_piece() -> None:
    position = Position.from_fen("4k3/8/8/8/8/4r3/4q3/4K3 w - - 0 1")
    # queen on e2 is protected by the rook on e3, every other square is covered by the queen
    assert legal_moves(position) == []
    assert not has_legal_move(position)


def test_en_passant_capture_removes_the_pawn(
    position_after: Callable[..., Position],
) -> None:
    """1. e4 a6 2. e5 d5 3. exd6: the pawn on d5 gets removed, although d6 was the target"""
    position = position_after("e2e4", "a7a6", "e4e5", "d7d5")
    assert position.en_passant_square == Square.from_algebraic("d6")

    move = find_legal_move(
        position, Square.from_algebraic("e5"), Square.from_algebraic("d6")
    )
    assert move is not None
    assert move.kind == MoveKind.EN_PASSANT

    after = position.apply_move(move)
    assert after.board.is_empty(Square.from_algebraic("d5"))
    assert after.to_fen() == "rnbqkbnr/1pp1pppp/p2P4/8/8/8/PPPP1PPP/RNBQKBNR b KQkq - 0 3"


def test_en_passant_window_closes(position_after: Callable[..., Position]) -> None:
    """Available right after the double step only"""
    position = position_after("e2e4", "a7a6", "e4e5", "d7d5", "g1f3", "a6a5")
    move = find_legal_move(
        position, Square.from_algebraic("e5"), Square.from_algebraic("d6")
    )
    assert move is None


def test_en_passant_exposing_own_king_is_illegal() -> None:
    """After bxc6 both pawns leave the 5th rank, and the rook on h5 would hit the king on a5"""
    position = Position.from_fen("8/8/8/KPp4r/8/8/8/7k w - c6 0 1")
    assert _ucis(legal_moves_from(position, Square.from_algebraic("b5"))) == {"b5b6"}


def test_castling_is_generated_when_legal() -> None:
    position = Position.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    moves = legal_moves_from(position, Square.from_algebraic("e1"))
    castles = {move.to_uci() for move in moves if move.is_castling}
    assert castles == {"e1g1", "e1c1"}


def test_legal_destinations() -> None:
    position = Position.starting_position()
    assert set(legal_destinations(position, Square.from_algebraic("e2"))) == {
        Square.from_algebraic("e3"),
        Square.from_algebraic("e4"),
    }
    assert set(legal_destinations(position, Square.from_algebraic("g1"))) == {
        Square.from_algebraic("f3"),
        Square.from_algebraic("h3"),
    }


@pytest.mark.parametrize("square", ["e4", "e7", "d1"])
def test_no_destinations_for_empty_blocked_or_opponent_squares(square: str) -> None:
    """e4: empty, e7: black pawn while white is to move, d1: queen without any moves"""
    position = Position.starting_position()
    assert legal_destinations(position, Square.from_algebraic(square)) == []


def test_find_legal_move() -> None:
    position = Position.starting_position()
    e2 = Square.from_algebraic("e2")
    assert find_legal_move(position, e2, Square.from_algebraic("e5")) is None
    move = find_legal_move(position, e2, Square.from_algebraic("e4"))
    assert move is not None
    assert move.piece == Piece(PieceType.PAWN, Color.WHITE)


def test_is_legal() -> None:
    position = Position.from_fen("k3r3/8/8/8/8/8/4R3/4K3 w - - 0 1")
    context = position.generation_context()
    e2 = Square.from_algebraic("e2")
    assert is_legal(position.board, e2, Square.from_algebraic("e5"), Color.WHITE, context)
    assert not is_legal(
        position.board, e2, Square.from_algebraic("d2"), Color.WHITE, context
    )
    # wrong color
    assert not is_legal(
        position.board, e2, Square.from_algebraic("e5"), Color.BLACK, context
    )


def test_candidate_is_played_on_a_scratch_copy() -> None:
    position = Position.from_fen("k3r3/8/8/8/8/8/4R3/4K3 w - - 0 1")
    before = position.to_fen()
    legal_moves(position)
    assert position.to_fen() == before


def test_board_without_king_is_always_safe() -> None:
    board = Board.from_fen("8/8/8/8/3R4/8/8/r7")
    rook = Piece(PieceType.ROOK, Color.WHITE)
    move = Move(Square.from_algebraic("d4"), Square.from_algebraic("d5"), rook)
    assert leaves_king_safe(board, move, Color.WHITE)


TACTICAL_FENS = [
    "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1",
    "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1",
    "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1",
    "r3k2r/Pppp1ppp/1b3nbN/nP6/BBP1P3/q4N2/Pn1P2PP/R2Q1RK1 w kq - 0 1",
    "r2q1rk1/pP1p2pp/Q4n2/bbp1p3/Np6/1B3NBn/pPPP1PPP/R3K2R b KQ - 0 1",
    "rnbq1k1r/pp1Pbppp/2p5/8/2B5/8/PPP1NnPP/RNBQK2R w KQ - 1 8",
    "8/8/8/KPp4r/8/8/8/7k w - c6 0 2",
]


@pytest.mark.parametrize("fen", TACTICAL_FENS)
def test_no_legal_move_leaves_own_king_attacked(fen: str) -> None:
    """Play every legal move through the position model and look at the mover's king afterwards"""
    position = Position.from_fen(fen)
    color = position.color_to_move
    for move in legal_moves(position):
        after = position.apply_move(move)
        king = after.board.king_square(color)
        assert king is not None
        assert not attacks_square(after.board, king, color.opponent), move.to_uci()


@pytest.mark.parametrize("fen", TACTICAL_FENS)
def test_every_rejected_candidate_leaves_own_king_attacked(fen: str) -> None:
    position = Position.from_fen(fen)
    color = position.color_to_move
    legal = _ucis(legal_moves(position))
    candidates = all_pseudo_legal_moves(position.board, color, position.generation_context())
    for move in candidates:
        if move.to_uci() in legal:
            continue
        after = position.board.apply_move(move)
        king = after.king_square(color)
        assert king is not None
        assert attacks_square(after, king, color.opponent), move.to_uci()


@pytest.mark.parametrize(
    "fen, expected",
    [
        (TACTICAL_FENS[0], 20),
        (TACTICAL_FENS[1], 48),
        (TACTICAL_FENS[2], 14),
        (TACTICAL_FENS[3], 6),
        (TACTICAL_FENS[4], 6),
        # d7xc8 is listed once: the promotion piece is picked when the move is made
        (TACTICAL_FENS[5], 41),
    ],
)
def test_number_of_legal_moves(fen: str, expected: int) -> None:
    assert len(legal_moves(Position.from_fen(fen))) == expected
