"""
The Game class is the entrypoint into the domain layer for the service layer.
It is responsible for orchestrating all the rules required to play a turn:
find the legal move matching a move intent, render its SAN, derive the next position and re-evaluate the status.

All state is owned by the caller: a Game is just the list of position snapshots + the moves that connect them.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Self

from src.chess.evaluation import (
    RepetitionWarning,
    checking_squares,
    evaluate_status,
    fifty_move_warning,
    repetition_warning,
    winner,
)
from src.chess.legality import find_legal_move, legal_destinations, legal_moves
from src.chess.moves import Move, MoveKind
from src.chess.notation import moves_to_pgn, to_san
from src.chess.pieces import (
    FEN_TO_PIECE,
    PIECE_TO_FEN,
    PROMOTION_OPTIONS,
    Color,
    PieceType,
)
from src.chess.position import Position, PositionKey
from src.chess.square import Square
from src.core.config import DEFAULT_RULES, RulesConfig
from src.core.exceptions import (
    GameStateError,
    IllegalMoveError,
    PromotionRequiredError,
)
from src.core.models import GameModel
from src.core.shared_types import GameStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlayedMove:
    """A move that made it into the history, with its notation."""

    move: Move
    san: str


@dataclass(frozen=True)
class MoveResult:
    """Everything the caller needs after a successful move."""

    move: Move
    san: str
    position: Position
    status: GameStatus

    @property
    def fen(self) -> str:
        return self.position.to_fen()


@dataclass
class Game:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    positions: list[Position]
    moves: list[PlayedMove] = field(default_factory=list)
    status: GameStatus = GameStatus.ACTIVE
    resigned_by: Optional[Color] = None
    rules: RulesConfig = DEFAULT_RULES

    @classmethod
    def new_game(
        cls, starting_fen: Optional[str] = None, rules: RulesConfig = DEFAULT_RULES
    ) -> Self:
        """Start from the standard starting position, or from a custom FEN."""
        position = (
            Position.from_fen(starting_fen)
            if starting_fen is not None
            else Position.starting_position()
        )
        game = cls(positions=[position], rules=rules)
        # a custom position might already be decided
        game.status = evaluate_status(position, game.position_keys, rules)
        return game

    @classmethod
    def from_model(cls, model: GameModel, rules: RulesConfig = DEFAULT_RULES) -> Self:
        """
        Rebuild the Game from what the Service layer has.
        ---

        The moves get replayed from the starting position, so every move in the record is checked again.
        """
        if not model.history_fen:
            raise GameStateError("Cannot rebuild a game without a starting position.")

        game = cls.new_game(model.history_fen[0], rules)
        for uci in model.moves_uci:
            from_square, to_square, promote_to = parse_uci(uci)
            game.make_move(from_square, to_square, promote_to)

        if model.resigned_by is not None:
            color_name = model.resigned_by.upper()
            if color_name not in Color.__members__:
                raise GameStateError(f"Invalid color for resignation: {model.resigned_by!r}")
            game.resign(Color[color_name])

        if game.fen != model.current_fen:
            raise GameStateError(
                f"Replaying the moves gives {game.fen!r}, but the record says {model.current_fen!r}"
            )
        return game

    def to_model(self) -> GameModel:
        """Encode back into a format the Service layer uses"""
        return GameModel(
            current_fen=self.fen,
            history_fen=[position.to_fen() for position in self.positions],
            moves_uci=[played.move.to_uci() for played in self.moves],
            moves_san=[played.san for played in self.moves],
            status=str(self.status),
            resigned_by=self.resigned_by.name.lower() if self.resigned_by else None,
        )

    # --- QUERIES ---
    @property
    def position(self) -> Position:
        return self.positions[-1]

    @property
    def fen(self) -> str:
        return self.position.to_fen()

    @property
    def color_to_move(self) -> Color:
        return self.position.color_to_move

    @property
    def position_keys(self) -> list[PositionKey]:
        return [position.key() for position in self.positions]

    @property
    def winner(self) -> Optional[Color]:
        if self.status == GameStatus.RESIGNED and self.resigned_by is not None:
            return self.resigned_by.opponent
        return winner(self.position, self.status)

    def legal_moves(self) -> list[Move]:
        """All legal moves of the side to move. Empty once the game is over."""
        if self.status.is_terminal:
            return []
        return legal_moves(self.position)

    def legal_destinations(self, square: str) -> list[str]:
        """Squares the piece on `square` can move to (for highlighting)."""
        if self.status.is_terminal:
            return []
        origin = Square.from_algebraic(square)
        return [target.to_algebraic() for target in legal_destinations(self.position, origin)]

    def checking_pieces(self) -> list[str]:
        """Squares of the pieces currently giving check to the side to move."""
        return [square.to_algebraic() for square in checking_squares(self.position)]

    def pgn(self) -> str:
        return moves_to_pgn(
            [played.san for played in self.moves],
            first_move_number=self.positions[0].num_turns,
            black_moves_first=self.positions[0].color_to_move == Color.BLACK,
        )

    def fifty_move_warning(self) -> bool:
        return fifty_move_warning(self.position, self.rules)

    def repetition_warning(self) -> Optional[RepetitionWarning]:
        return repetition_warning(self.position_keys, self.rules)

    # --- ACTIONS ---
    def make_move(
        self,
        from_square: str,
        to_square: str,
        promote_to: Optional[PieceType] = None,
    ) -> MoveResult:
        """
        Attempt to make a move
        -----

        1. make sure the game is (still) in progress
        2. find the legal move matching the intent (raise if there is none)
        3. pawn reaching the final rank? --> a piece to promote into must be supplied
        4. render the SAN (needs the position before the move)
        5. derive the next position and re-evaluate the status

        NOTE: Nothing changes if any of the checks fail, so the caller can safely retry.
        """
        self._assert_in_progress()

        intent = f"{from_square}{to_square}"
        origin = Square.from_algebraic(from_square)
        target = Square.from_algebraic(to_square)

        move = find_legal_move(self.position, origin, target)
        if move is None:
            raise IllegalMoveError(intent)

        move = self._with_promotion_choice(move, promote_to, intent)

        san = to_san(move, self.position, legal_moves(self.position))
        new_position = self.position.apply_move(move)

        self.positions.append(new_position)
        self.moves.append(PlayedMove(move, san))
        self._change_status(evaluate_status(new_position, self.position_keys, self.rules))

        logger.debug("Played %s (%s), new position %s", move, san, new_position.to_fen())
        return MoveResult(move=move, san=san, position=new_position, status=self.status)

    def resign(self, color: Color) -> None:
        self._assert_in_progress()
        self.resigned_by = color
        self._change_status(GameStatus.RESIGNED)

    def undo_last_move(self) -> PlayedMove:
        """Take back the last move. Positions are snapshots, so the previous one simply becomes current again."""
        if self.status == GameStatus.RESIGNED:
            raise GameStateError("Cannot take back moves after a resignation.")
        if not self.moves:
            raise GameStateError("No moves to take back.")

        played = self.moves.pop()
        self.positions.pop()
        self._change_status(evaluate_status(self.position, self.position_keys, self.rules))
        logger.debug("Took back %s", played.move)
        return played

    # -- PRIVATE HELPERS ---
    def _assert_in_progress(self) -> None:
        if self.status.is_terminal:
            raise GameStateError(f"Game is not in progress. status: {self.status}")

    def _change_status(self, new_status: GameStatus) -> None:
        if new_status != self.status:
            logger.debug("Game status changed from %s to %s", self.status, new_status)
        self.status = new_status

    def _with_promotion_choice(
        self, move: Move, promote_to: Optional[PieceType], intent: str
    ) -> Move:
        """Promotion piece is mandatory when reaching the final rank, and not allowed otherwise."""
        if move.kind != MoveKind.PROMOTION:
            if promote_to is not None:
                raise IllegalMoveError(intent, "only pawns reaching the final rank promote")
            return move

        if promote_to is None:
            raise PromotionRequiredError(intent)
        if promote_to not in PROMOTION_OPTIONS:
            raise IllegalMoveError(intent, f"cannot promote into a {promote_to.name.lower()}")
        return move.with_promotion(promote_to)


def parse_uci(uci: str) -> tuple[str, str, Optional[PieceType]]:
    """
    Universal Chess Interface:
    ---

    examples:
    * "e2e4": move the piece that was on e2 to e4
    * "e7e8q" : (pawn) moves from e7 to e8 and promotes to a queen (the q)
    * "e1g1": the king castles king side
    """
    if len(uci) not in (4, 5):
        raise IllegalMoveError(uci, "cannot interpret as UCI")

    promote_to = None
    if len(uci) == 5:
        if uci[4] not in FEN_TO_PIECE:
            raise IllegalMoveError(uci, "unknown promotion piece")
        promote_to = FEN_TO_PIECE[uci[4]]
    return uci[:2], uci[2:4], promote_to


def build_uci(
    from_square_alg: str, to_square_alg: str, promotion: Optional[PieceType] = None
) -> str:
    """Reverse of `parse_uci`"""
    suffix = PIECE_TO_FEN[promotion] if promotion else ""
    return f"{from_square_alg}{to_square_alg}{suffix}"

