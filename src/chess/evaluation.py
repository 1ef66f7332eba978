"""
Game state evaluation: check, checkmate, stalemate and the draw rules.

All pure functions of a Position (plus the history of position keys for repetitions).
The warning helpers are advisories for the UI, they never decide the game.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Optional, Sequence

from src.chess.legality import has_legal_move
from src.chess.moves import attacking_squares
from src.chess.pieces import Color
from src.chess.position import Position, PositionKey
from src.chess.square import Square
from src.core.config import DEFAULT_RULES, RulesConfig
from src.core.shared_types import GameStatus


def is_in_check(position: Position) -> bool:
    """Is the king of the side to move attacked?"""
    return bool(checking_squares(position))


def checking_squares(position: Position) -> list[Square]:
    """Squares of the pieces giving check to the side to move (two for a double check)"""
    color = position.color_to_move
    king = position.board.king_square(color)
    if king is None:
        return []
    return attacking_squares(position.board, king, color.opponent)


def is_checkmate(position: Position) -> bool:
    return is_in_check(position) and not has_legal_move(position)


def is_stalemate(position: Position) -> bool:
    return not is_in_check(position) and not has_legal_move(position)


def fifty_move_draw(position: Position, rules: RulesConfig = DEFAULT_RULES) -> bool:
    """100 half moves without a pawn move or capture (50 moves by each player)"""
    return position.half_move_clock >= rules.fifty_move_limit


def fifty_move_warning(position: Position, rules: RulesConfig = DEFAULT_RULES) -> bool:
    """Advisory only: the fifty-move rule is getting close."""
    return position.half_move_clock >= rules.fifty_move_warning


def repetition_count(key: PositionKey, key_history: Sequence[PositionKey]) -> int:
    return sum(1 for previous in key_history if previous == key)


def threefold_repetition(
    key_history: Sequence[PositionKey], rules: RulesConfig = DEFAULT_RULES
) -> bool:
    """Has any position (ignoring move counters) occurred three times?"""
    if not key_history:
        return False
    _, most_repeated = Counter(key_history).most_common(1)[0]
    return most_repeated >= rules.repetition_limit


@dataclass(frozen=True)
class RepetitionWarning:
    """Advisory: the current position has been seen before, one more time might end the game."""

    key: PositionKey
    count: int
    repetitions_until_draw: int


def repetition_warning(
    key_history: Sequence[PositionKey], rules: RulesConfig = DEFAULT_RULES
) -> Optional[RepetitionWarning]:
    """Looks at the latest key in the history only."""
    if not key_history:
        return None

    current = key_history[-1]
    count = repetition_count(current, key_history)
    if count < rules.repetition_warning:
        return None
    return RepetitionWarning(
        key=current,
        count=count,
        repetitions_until_draw=max(rules.repetition_limit - count, 0),
    )


def evaluate_status(
    position: Position,
    key_history: Sequence[PositionKey] = (),
    rules: RulesConfig = DEFAULT_RULES,
) -> GameStatus:
    """
    Status of the game for the side to move
    ---

    Checked in order: checkmate, stalemate, repetition, fifty-move rule, check.
    NOTE: Mate on the move that also completes the fifty-move count still counts as mate.
    """
    in_check = is_in_check(position)
    if not has_legal_move(position):
        return GameStatus.CHECKMATE if in_check else GameStatus.STALEMATE

    if threefold_repetition(key_history, rules):
        return GameStatus.DRAW_REPETITION

    if fifty_move_draw(position, rules):
        return GameStatus.DRAW_FIFTY_MOVES

    return GameStatus.CHECK if in_check else GameStatus.ACTIVE


def winner(position: Position, status: GameStatus) -> Optional[Color]:
    """
    Only checkmate has a winner here.
    Given we know it is checkmate, the side to move just got mated and the opponent must be the winner.
    (Resignations are tracked by the Game, which knows who resigned.)
    """
    if status != GameStatus.CHECKMATE:
        return None
    return position.color_to_move.opponent
