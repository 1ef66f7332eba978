"""
Representation of a single position of the game. Exactly the information that can be encoded in a FEN string.

Positions are immutable: playing a move derives a new Position, the caller keeps the sequence of snapshots.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from src.chess.board import Board
from src.chess.castling import CASTLING_RULES, CastlingRights, castling_directions
from src.chess.fen import STARTING_FEN, split_fen
from src.chess.moves import GenerationContext, Move
from src.chess.pieces import Color, PieceType
from src.chess.square import Square

# Reduced FEN (no move counters), see `Position.key()`
PositionKey = str


@dataclass(frozen=True)
class Position:
    board: Board
    color_to_move: Color
    castling_rights: CastlingRights
    en_passant_square: Optional[Square]
    half_move_clock: int
    num_turns: int

    @classmethod
    def from_fen(cls, fen: str) -> Position:
        """Parse the FEN into data. Raises MalformedFenError if the string is not structurally valid."""
        fields = split_fen(fen)

        # Check which color is to move
        color_to_move = Color.WHITE if fields.active_color == "w" else Color.BLACK

        # parse en passant target square
        en_passant_square = (
            Square.from_algebraic(fields.en_passant)
            if fields.en_passant != "-"
            else None
        )

        return cls(
            board=Board.from_fen(fields.placement),
            color_to_move=color_to_move,
            castling_rights=CastlingRights.from_fen(fields.castling),
            en_passant_square=en_passant_square,
            half_move_clock=int(fields.half_move_clock),
            num_turns=int(fields.full_move_number),
        )

    def to_fen(self) -> str:
        """reverse operation: write a FEN from the given data"""
        return f"{self.key()} {self.half_move_clock} {self.num_turns}"

    @classmethod
    def starting_position(cls) -> Position:
        return cls.from_fen(STARTING_FEN)

    def key(self) -> PositionKey:
        """FEN without the move counters. Equal keys mean the same position as far as the rules are concerned."""
        active_color = "w" if self.color_to_move == Color.WHITE else "b"
        en_passant_algebraic = (
            self.en_passant_square.to_algebraic()
            if self.en_passant_square is not None
            else "-"
        )
        return f"{self.board.to_fen()} {active_color} {self.castling_rights.to_fen()} {en_passant_algebraic}"

    def generation_context(self) -> GenerationContext:
        return GenerationContext(
            en_passant_square=self.en_passant_square,
            castling_rights=self.castling_rights,
        )

    def apply_move(self, move: Move) -> Position:
        """
        Derive the position after the move
        -----

        NOTE: The move is expected to be legal already (see legality.py). No checks are done here.

        1. update the board (castling moves the rook as well, en passant removes the pawn next to you)
        2. revoke castling rights if needed
        3. set the en passant square if a pawn made a double step
        4. move counters
        5. hand the move over to the opponent
        """
        player_color = self.color_to_move
        board = self.board.apply_move(move)

        is_pawn_move = move.piece.type == PieceType.PAWN
        half_move_clock = 0 if (is_pawn_move or move.is_capture) else self.half_move_clock + 1
        num_turns = self.num_turns + 1 if player_color == Color.BLACK else self.num_turns

        return Position(
            board=board,
            color_to_move=player_color.opponent,
            castling_rights=self._castling_rights_after(move),
            en_passant_square=_en_passant_square_after(move),
            half_move_clock=half_move_clock,
            num_turns=num_turns,
        )

    def _castling_rights_after(self, move: Move) -> CastlingRights:
        """
        Checks which rights should get revoked
        ----

        1. If you are moving your king (castling included) --> revoke both
        2. If you are moving a rook away from its starting square --> revoke the right in that direction
        3. If you are taking a rook on its starting square --> revoke your opponent's right in that direction
        """
        rights = self.castling_rights
        player_color = move.piece.color

        # 1
        if move.piece.type == PieceType.KING:
            rights = rights.revoke_all(player_color)

        # 2
        if move.piece.type == PieceType.ROOK:
            for direction in castling_directions(player_color):
                if move.from_square == CASTLING_RULES[direction].rook_from:
                    rights = rights.revoke(direction)

        # 3
        captured = move.captured_piece
        if captured is not None and captured.type == PieceType.ROOK:
            for direction in castling_directions(captured.color):
                if move.to_square == CASTLING_RULES[direction].rook_from:
                    rights = rights.revoke(direction)

        return rights


def _en_passant_square_after(move: Move) -> Optional[Square]:
    """The square a pawn skipped with its double step. Only available for the very next half move."""
    ranks_moved = abs(move.from_square.rank - move.to_square.rank)
    if move.piece.type != PieceType.PAWN or ranks_moved != 2:
        return None
    return Square(
        file=move.from_square.file,
        rank=(move.from_square.rank + move.to_square.rank) // 2,
    )


def decode(fen: str) -> Position:
    """FEN -> Position. Raises MalformedFenError."""
    return Position.from_fen(fen)


def encode(position: Position) -> str:
    """Position -> FEN. Exact inverse of `decode`."""
    return position.to_fen()
