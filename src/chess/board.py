"""The Game board: which piece stands on which square. Every change produces a new Board."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from src.chess.moves import Move, MoveKind
from src.chess.pieces import Color, Piece, PieceType
from src.chess.square import BOARD_DIMENSIONS, Square
from src.core.exceptions import InvalidSquareError

Rank = tuple[Optional[Piece], ...]
MutableGrid = list[list[Optional[Piece]]]


@dataclass(frozen=True)
class Board:
    """
    8x8 grid, rank-major: `grid[0]` is the 1st rank, `grid[0][0]` is a1.
    An empty square holds None.
    """

    grid: tuple[Rank, ...]

    @classmethod
    def empty(cls) -> Board:
        num_files, num_ranks = BOARD_DIMENSIONS
        return cls(tuple((None,) * num_files for _ in range(num_ranks)))

    @classmethod
    def from_fen(cls, fen_str: str) -> Board:
        """Construct a board using the first part of a FEN string (the part that denotes the board position).

        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * black pieces are on the 8th rank, starting with rook on a8, knight on b8, etc.
        * pawns cover 7th rank entirely
        * ranks 6 through 3 have 8 consecutive empty squares
        * rank 2 are the white pawns (capital letters)
        * 1st rank are the white pieces. Again, left-to-right reads a1-h1.

        NOTE: Expects a valid string, see fen.py for the validation.
        """
        grid: MutableGrid = []
        # FEN string is read from top rank (8th) to bottom rank (1st)
        for fen_one_rank in reversed(fen_str.split("/")):
            rank: list[Optional[Piece]] = []
            for character in fen_one_rank:
                if character.isalpha():
                    # simple case: a letter directly denotes the piece that should be created
                    rank.append(Piece.from_fen(character))
                else:
                    # A number denotes the amount of empty squares after each other
                    rank.extend([None] * int(character))
            grid.append(rank)
        return cls._freeze(grid)

    def to_fen(self) -> str:
        """Ranks are separated by slashes in FEN string."""
        return "/".join(
            self._rank_to_fen(rank) for rank in range(BOARD_DIMENSIONS[1], 0, -1)
        )

    def _rank_to_fen(self, rank: int) -> str:
        """FEN string of a single rank"""
        fen_characters: list[str] = []
        empty_count = 0
        for piece in self.grid[rank - 1]:
            if piece is not None:
                if empty_count > 0:
                    fen_characters.append(str(empty_count))
                    empty_count = 0
                fen_characters.append(piece.to_fen())
            else:
                empty_count += 1

        # if the entire rank is empty, then we still place this number in the string
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    # --- QUERIES ---
    def piece(self, square: Square) -> Optional[Piece]:
        if not square.is_within_bounds():
            raise InvalidSquareError(f"{square.file},{square.rank}")
        return self.grid[square.rank_index][square.file_index]

    def is_empty(self, square: Square) -> bool:
        return self.piece(square) is None

    def occupied_squares(self) -> list[Square]:
        return [
            Square.from_indices(file_index, rank_index)
            for rank_index, rank in enumerate(self.grid)
            for file_index, piece in enumerate(rank)
            if piece is not None
        ]

    def locate_color(self, color: Color) -> list[Square]:
        return [
            Square.from_indices(file_index, rank_index)
            for rank_index, rank in enumerate(self.grid)
            for file_index, piece in enumerate(rank)
            if piece is not None and piece.color == color
        ]

    def locate_pieces(self, piece: Piece) -> list[Square]:
        return [square for square in self.occupied_squares() if self.piece(square) == piece]

    def king_square(self, color: Color) -> Optional[Square]:
        """Normal play keeps exactly one king per color on the board. Custom positions might have none."""
        kings = self.locate_pieces(Piece(PieceType.KING, color))
        return kings[0] if kings else None

    # --- UPDATES (return a new Board) ---
    def place_piece(self, piece: Piece, square: Square) -> Board:
        grid = self._thaw()
        grid[square.rank_index][square.file_index] = piece
        return self._freeze(grid)

    def remove_piece(self, square: Square) -> Board:
        grid = self._thaw()
        grid[square.rank_index][square.file_index] = None
        return self._freeze(grid)

    def apply_move(self, move: Move) -> Board:
        """
        Board after the move, on a scratch copy
        ---

        * castling: the rook hops over the king as well
        * en passant: the pawn taken stands next to the moving pawn, not on the target square
        * promotion: the pawn gets replaced (if no piece type supplied yet, the pawn just moves)
        """
        grid = self._thaw()
        moving_piece = grid[move.from_square.rank_index][move.from_square.file_index]
        grid[move.from_square.rank_index][move.from_square.file_index] = None

        if move.kind == MoveKind.EN_PASSANT:
            taken = move.captured_square
            assert taken is not None
            grid[taken.rank_index][taken.file_index] = None

        if move.rook_move is not None:
            rook_from, rook_to = move.rook_move.rook_from, move.rook_move.rook_to
            rook = grid[rook_from.rank_index][rook_from.file_index]
            grid[rook_from.rank_index][rook_from.file_index] = None
            grid[rook_to.rank_index][rook_to.file_index] = rook

        if moving_piece is not None and move.promote_to is not None:
            moving_piece = moving_piece.promoted_to(move.promote_to)
        grid[move.to_square.rank_index][move.to_square.file_index] = moving_piece
        return self._freeze(grid)

    def _thaw(self) -> MutableGrid:
        return [list(rank) for rank in self.grid]

    @classmethod
    def _freeze(cls, grid: MutableGrid) -> Board:
        return cls(tuple(tuple(rank) for rank in grid))

    def __str__(self) -> str:
        """Plain text diagram, 8th rank on top. Handy when debugging."""
        rows = []
        for rank in range(BOARD_DIMENSIONS[1], 0, -1):
            pieces = (
                piece.to_fen() if piece is not None else "."
                for piece in self.grid[rank - 1]
            )
            rows.append(f"{rank} {' '.join(pieces)}")
        rows.append("  " + " ".join("abcdefgh"[: BOARD_DIMENSIONS[0]]))
        return "\n".join(rows)
