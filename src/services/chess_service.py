"""Orchestration of communication from the boundary models to the chess rules and the repository (and the reverse direction)."""

import logging
from uuid import UUID

from src.api.models import (
    DeleteGameRequest,
    GameResponse,
    GetGameRequest,
    LegalMovesRequest,
    LegalMovesResponse,
    MoveRequest,
    MoveResponse,
    NewGameRequest,
    ResignRequest,
    UndoMoveRequest,
)
from src.chess import pieces
from src.chess.evaluation import repetition_count
from src.chess.game import Game
from src.core.config import DEFAULT_RULES, RulesConfig
from src.core.exceptions import GameNotFoundError
from src.core.models import GameModel
from src.core.shared_types import Color
from src.services.repository import GameRepository

logger = logging.getLogger(__name__)


class ChessService:
    """Orchestration of layers for chess game."""

    def __init__(
        self, repository: GameRepository, rules: RulesConfig = DEFAULT_RULES
    ) -> None:
        self.repo = repository
        self.rules = rules

    # -- Request handling ---
    def create_new_game(self, request: NewGameRequest) -> GameResponse:
        """Start a game from the standard starting position, or from the FEN supplied."""

        # Decoding the FEN raises MalformedFenError before anything gets stored
        new_game = Game.new_game(request.starting_fen, self.rules)
        stored_game, game_id = self.repo.create_game(new_game.to_model())

        logger.info("Created game %s from %s", game_id, stored_game.current_fen)
        return self._create_game_response(game_id, new_game)

    def get_game_state(self, request: GetGameRequest) -> GameResponse:
        """Current FEN, status, move list."""
        game = self._load_game(request.game_id)
        return self._create_game_response(request.game_id, game)

    def legal_moves(self, request: LegalMovesRequest) -> LegalMovesResponse:
        """Legal moves of the side to move, for the whole board or for a single square."""
        game = self._load_game(request.game_id)

        moves = game.legal_moves()
        destinations: list[str] = []
        if request.square is not None:
            moves = [
                move
                for move in moves
                if move.from_square.to_algebraic() == request.square
            ]
            destinations = game.legal_destinations(request.square)

        return LegalMovesResponse(
            game_id=request.game_id,
            color=Color[game.color_to_move.name],
            square=request.square,
            legal_moves=[move.to_uci() for move in moves],
            destinations=destinations,
        )

    def make_move(self, request: MoveRequest) -> MoveResponse:
        """Attempt the move. On any error the stored game stays as it was."""
        game = self._load_game(request.game_id)

        promote_to = (
            pieces.PieceType[request.promote_to.name] if request.promote_to else None
        )
        result = game.make_move(request.from_square, request.to_square, promote_to)
        self._store_game(request.game_id, game)

        logger.info(
            "Game %s: %s played, status %s", request.game_id, result.san, result.status
        )
        return MoveResponse(
            game_id=request.game_id,
            uci=result.move.to_uci(),
            san=result.san,
            fen=result.fen,
            status=result.status,
            winner=Color[game.winner.name] if game.winner else None,
            pgn=game.pgn(),
        )

    def resign(self, request: ResignRequest) -> GameResponse:
        game = self._load_game(request.game_id)
        game.resign(pieces.Color[request.color.name])
        self._store_game(request.game_id, game)

        logger.info("Game %s: %s resigned", request.game_id, request.color)
        return self._create_game_response(request.game_id, game)

    def undo_move(self, request: UndoMoveRequest) -> GameResponse:
        game = self._load_game(request.game_id)
        game.undo_last_move()
        self._store_game(request.game_id, game)
        return self._create_game_response(request.game_id, game)

    def delete_game(self, request: DeleteGameRequest) -> None:
        """Handle a request to delete a Game record."""
        if self.repo.delete_game(request.game_id) is None:
            raise GameNotFoundError(f"Game with {request.game_id=} not found.")
        logger.info("Deleted game %s", request.game_id)

    # -- Internal helpers --
    def _create_game_response(self, game_id: UUID, game: Game) -> GameResponse:
        """Convert the Game into a GameResponse (for game with given ID.)"""
        return GameResponse(
            game_id=game_id,
            fen=game.fen,
            starting_fen=game.positions[0].to_fen(),
            color_to_move=Color[game.color_to_move.name],
            status=game.status,
            winner=Color[game.winner.name] if game.winner else None,
            moves_san=[played.san for played in game.moves],
            pgn=game.pgn(),
            fifty_move_warning=game.fifty_move_warning(),
            repetition_count=repetition_count(game.position.key(), game.position_keys),
        )

    def _fetch_game(self, game_id: UUID) -> GameModel:
        """Attempt to find the game in the repository and raise error if it fails."""
        game_model = self.repo.get_game(game_id)
        if game_model is None:
            raise GameNotFoundError(f"Game with {game_id=} not found.")
        return game_model

    def _load_game(self, game_id: UUID) -> Game:
        return Game.from_model(self._fetch_game(game_id), self.rules)

    def _store_game(self, game_id: UUID, game: Game) -> None:
        if self.repo.update_game(game_id, game.to_model()) is None:
            raise GameNotFoundError(f"Game with {game_id=} not found.")
