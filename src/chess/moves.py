"""
Geometry/Base movement and capturing/attacking rules

Key idea: Use strategy pattern to define pseudo-legal move sets for each piece type.

Legality (does the move leave your own king attacked?) is checked later, see legality.py.
The only exception is castling: it validates itself here, since the squares the king passes must not be attacked.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Callable, Optional, Protocol

from src.chess.castling import (
    CASTLING_RULES,
    CastlingDirection,
    CastlingRights,
    CastlingSquares,
    castling_directions,
)
from src.chess.pieces import PIECE_TO_FEN, Color, Piece, PieceType
from src.chess.square import BOARD_DIMENSIONS, Square


class Board(Protocol):
    """Just the parts the movement strategies need"""

    def piece(self, square: Square) -> Optional[Piece]: ...
    def locate_color(self, color: Color) -> list[Square]: ...


Vector = tuple[int, int]


class MoveKind(Enum):
    """Closed set of move kinds. Consumers match on this instead of probing optional fields."""

    QUIET = auto()
    CAPTURE = auto()
    EN_PASSANT = auto()
    CASTLE_KING_SIDE = auto()
    CASTLE_QUEEN_SIDE = auto()
    PROMOTION = auto()


@dataclass(frozen=True)
class Move:
    """
    A proposed move. It only becomes part of the game's history once it has been checked for legality and applied.

    NOTE: Promotion moves are generated without a piece to promote into (`promote_to=None`).
    The caller supplies the choice when the move gets played, see `with_promotion()`.
    """

    from_square: Square
    to_square: Square
    piece: Piece
    kind: MoveKind = MoveKind.QUIET
    captured_piece: Optional[Piece] = None
    promote_to: Optional[PieceType] = None
    rook_move: Optional[CastlingSquares] = None

    @property
    def is_capture(self) -> bool:
        return self.captured_piece is not None

    @property
    def is_castling(self) -> bool:
        return self.kind in (MoveKind.CASTLE_KING_SIDE, MoveKind.CASTLE_QUEEN_SIDE)

    @property
    def captured_square(self) -> Optional[Square]:
        """Where the captured piece stood. Differs from the target square only for en passant."""
        if not self.is_capture:
            return None
        if self.kind == MoveKind.EN_PASSANT:
            return Square(self.to_square.file, self.from_square.rank)
        return self.to_square

    def with_promotion(self, piece_type: PieceType) -> Move:
        return replace(self, promote_to=piece_type)

    def to_uci(self) -> str:
        """Convert into UCI notation"""
        piece_char = PIECE_TO_FEN[self.promote_to] if self.promote_to else ""
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}{piece_char}"

    def __str__(self) -> str:
        return self.to_uci()


@dataclass(frozen=True)
class GenerationContext:
    """
    Everything beyond the board itself that move generation needs to know.

    `skip_castling` is set when moves are generated purely to detect attacks: castling never captures anything,
    and generating it would need attack detection again (king moves <-> attacked squares recursion).
    """

    en_passant_square: Optional[Square] = None
    castling_rights: CastlingRights = field(default_factory=CastlingRights.none)
    skip_castling: bool = False


ATTACK_CONTEXT = GenerationContext(skip_castling=True)


# --- MOVEMENT RULES ---
def _move_to(piece: Piece, square: Square, target: Square, board: Board) -> Move:
    """quiet move or capture, depending on what stands on the target square"""
    occupant = board.piece(target)
    if occupant is None:
        return Move(square, target, piece)
    return Move(square, target, piece, MoveKind.CAPTURE, captured_piece=occupant)


def raycasting_move(
    piece: Piece, square: Square, board: Board, directions: list[Vector]
) -> list[Move]:
    """
    Raycasting algorithm
    -----

    ---
    The main trick we use to check the 'line of sight of a piece'.
    We define move directions and move along them until we hit another piece or
    the edge of the board.
    """
    moves: list[Move] = []
    for df, dr in directions:
        target_square = square
        while True:
            target_square = target_square.offset(df, dr)
            if not target_square.is_within_bounds():
                break

            occupant = board.piece(target_square)
            if occupant is not None:
                # only need to add the first occupied square found if it is the opponent's: then it can be captured.
                if occupant.color != piece.color:
                    moves.append(_move_to(piece, square, target_square, board))
                break

            moves.append(Move(square, target_square, piece))
    return moves


def single_step_move(
    piece: Piece, square: Square, board: Board, deltas: list[Vector]
) -> list[Move]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that just can move a single step along a direction"""
    moves: list[Move] = []
    for df, dr in deltas:
        target_square = square.offset(df, dr)
        if not target_square.is_within_bounds():
            continue

        occupant = board.piece(target_square)
        if occupant is None or occupant.color != piece.color:
            moves.append(_move_to(piece, square, target_square, board))
    return moves


def pawn_direction(color: Color) -> int:
    """White moves UP the board, black moves DOWN"""
    return 1 if color == Color.WHITE else -1


def pawn_start_rank(color: Color) -> int:
    return 2 if color == Color.WHITE else BOARD_DIMENSIONS[1] - 1


def promotion_rank(color: Color) -> int:
    return BOARD_DIMENSIONS[1] if color == Color.WHITE else 1


def pawn_attack_squares(piece: Piece, square: Square) -> list[Square]:
    """The two diagonals in front of the pawn (if on the board), occupied or not."""
    dr = pawn_direction(piece.color)
    targets = [square.offset(df, dr) for df in (-1, 1)]
    return [target for target in targets if target.is_within_bounds()]


def candidate_pawn_moves(
    piece: Piece, square: Square, board: Board, context: GenerationContext
) -> list[Move]:
    """
    A pawn:
    - moves by a single square forward (only onto an empty square).
    - It can move by two in their first move (so when on their starting rank), if both squares are empty
    - takes diagonally
    - takes en passant, onto the en passant square of the context only
    - gets flagged for promotion when it reaches the far rank
    """
    moves: list[Move] = []
    dr = pawn_direction(piece.color)

    # Pawn pushes
    one_step = square.offset(0, dr)
    if one_step.is_within_bounds() and board.piece(one_step) is None:
        moves.append(Move(square, one_step, piece))

        two_steps = square.offset(0, 2 * dr)
        if square.rank == pawn_start_rank(piece.color) and board.piece(two_steps) is None:
            moves.append(Move(square, two_steps, piece))

    # pawns take diagonally:
    for target_square in pawn_attack_squares(piece, square):
        occupant = board.piece(target_square)
        if occupant is not None and occupant.color != piece.color:
            moves.append(_move_to(piece, square, target_square, board))
        elif occupant is None and target_square == context.en_passant_square:
            # NOTE: the pawn that gets taken stands next to us, not on the en passant square.
            captured = board.piece(Square(target_square.file, square.rank))
            if captured == Piece(PieceType.PAWN, piece.color.opponent):
                moves.append(
                    Move(
                        square,
                        target_square,
                        piece,
                        MoveKind.EN_PASSANT,
                        captured_piece=captured,
                    )
                )

    return [_flag_promotion(move) for move in moves]


def _flag_promotion(move: Move) -> Move:
    if move.to_square.rank == promotion_rank(move.piece.color):
        return replace(move, kind=MoveKind.PROMOTION)
    return move


KNIGHT_DELTAS: list[Vector] = [
    (2, 1),
    (2, -1),
    (-2, 1),
    (-2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
]
DIAGONALS: list[Vector] = [(1, 1), (-1, 1), (1, -1), (-1, -1)]
STRAIGHTS: list[Vector] = [(1, 0), (-1, 0), (0, 1), (0, -1)]
KING_DELTAS: list[Vector] = STRAIGHTS + DIAGONALS


def candidate_knight_moves(
    piece: Piece, square: Square, board: Board, context: GenerationContext
) -> list[Move]:
    """Knights always move such that |delta_rank| + |delta_file| = 3"""
    return single_step_move(piece, square, board, KNIGHT_DELTAS)


def candidate_bishop_moves(
    piece: Piece, square: Square, board: Board, context: GenerationContext
) -> list[Move]:
    """Bishops move diagonally: |delta_rank| = |delta_file|"""
    return raycasting_move(piece, square, board, DIAGONALS)


def candidate_rook_moves(
    piece: Piece, square: Square, board: Board, context: GenerationContext
) -> list[Move]:
    """Rooks move either horizontally or vertically"""
    return raycasting_move(piece, square, board, STRAIGHTS)


def candidate_queen_moves(
    piece: Piece, square: Square, board: Board, context: GenerationContext
) -> list[Move]:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return raycasting_move(piece, square, board, DIAGONALS + STRAIGHTS)


def candidate_king_moves(
    piece: Piece, square: Square, board: Board, context: GenerationContext
) -> list[Move]:
    """
    The king can move by a single square at the time.

    Castling is modelled as a special king move, skipped when only looking for attacked squares.
    """
    moves = single_step_move(piece, square, board, KING_DELTAS)
    if not context.skip_castling:
        moves.extend(castling_moves(piece, square, board, context.castling_rights))
    return moves


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[[Piece, Square, Board, GenerationContext], list[Move]]
MOVEMENT_RULES: dict[PieceType, CandidateMovesFn] = {
    PieceType.PAWN: candidate_pawn_moves,
    PieceType.KNIGHT: candidate_knight_moves,
    PieceType.BISHOP: candidate_bishop_moves,
    PieceType.ROOK: candidate_rook_moves,
    PieceType.QUEEN: candidate_queen_moves,
    PieceType.KING: candidate_king_moves,
}


def pseudo_legal_moves(
    piece: Piece, square: Square, board: Board, context: GenerationContext
) -> list[Move]:
    """Moves that follow the movement pattern of the piece. Does not check if the own king is left attacked."""
    movement_rule = MOVEMENT_RULES[piece.type]
    return movement_rule(piece, square, board, context)


def all_pseudo_legal_moves(
    board: Board, color: Color, context: GenerationContext
) -> list[Move]:
    candidate_moves: list[Move] = []
    for starting_square in board.locate_color(color):
        piece = board.piece(starting_square)
        assert piece is not None
        candidate_moves.extend(pseudo_legal_moves(piece, starting_square, board, context))
    return candidate_moves


# --- ATTACK DETECTION ---
def attacking_squares(board: Board, square: Square, by_color: Color) -> list[Square]:
    """
    Squares of the `by_color` pieces that have the square in their line of sight
    ---

    Re-uses the movement rules (castling suppressed).
    NOTE: Pawns are the odd ones out: they push forward but attack diagonally, also onto empty squares
    (matters for the squares a king passes when castling).
    """
    attackers: list[Square] = []
    for origin in board.locate_color(by_color):
        piece = board.piece(origin)
        assert piece is not None
        if piece.type == PieceType.PAWN:
            if square in pawn_attack_squares(piece, origin):
                attackers.append(origin)
            continue

        moves = pseudo_legal_moves(piece, origin, board, ATTACK_CONTEXT)
        if any(move.to_square == square for move in moves):
            attackers.append(origin)
    return attackers


def attacks_square(board: Board, square: Square, by_color: Color) -> bool:
    """Is the square in the line of sight of any piece of `by_color`?"""
    return any(attacking_squares(board, square, by_color))


# -- CASTLING MOVES ---
def castling_moves(
    piece: Piece, square: Square, board: Board, rights: CastlingRights
) -> list[Move]:
    """
    Castling candidates for the king standing on `square`
    ---

    **you are allowed to castle if**

    * Castling rights are not yet revoked (so king and rook have not moved).
    * King and rook actually stand on their starting squares.
    * All squares in between king and rook are empty.
    * The king is not in check, and it does not pass through or land on an attacked square.
    """
    moves: list[Move] = []
    opponent_color = piece.color.opponent
    for direction in castling_directions(piece.color):
        if not rights.has(direction):
            continue

        rule = CASTLING_RULES[direction]
        if square != rule.king_from:
            continue

        if board.piece(rule.rook_from) != Piece(PieceType.ROOK, piece.color):
            continue

        if any(board.piece(sq) is not None for sq in rule.squares_between()):
            continue

        if any(attacks_square(board, sq, opponent_color) for sq in rule.king_path()):
            continue

        moves.append(candidate_castling_move(direction, piece))
    return moves


def candidate_castling_move(direction: CastlingDirection, king: Piece) -> Move:
    rule = CASTLING_RULES[direction]
    kind = (
        MoveKind.CASTLE_KING_SIDE
        if direction.is_king_side
        else MoveKind.CASTLE_QUEEN_SIDE
    )
    return Move(rule.king_from, rule.king_to, king, kind, rook_move=rule)
