"""Requests and Response models"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from src.chess.fen import NUM_FEN_FIELDS
from src.chess.square import is_valid_square_name
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Color, GameStatus, PieceType


# --- REQUEST MODELS ---
class NewGameRequest(BaseModel):
    starting_fen: Optional[str] = None

    @field_validator("starting_fen")
    @classmethod
    def validate_starting_fen(cls, value: Optional[str]) -> Optional[str]:
        """Shape only. Whether the fields make sense is decided when the position gets decoded."""
        if value is None:
            return value

        parts = value.strip().split(" ")
        if len(parts) != NUM_FEN_FIELDS:
            raise InvalidRequestError(
                f"FEN string must contain {NUM_FEN_FIELDS} space-separated parts."
            )
        return value.strip()


class GetGameRequest(BaseModel):
    game_id: UUID


class LegalMovesRequest(BaseModel):
    """Leave out the square to get the legal moves of the whole board (destinations are only listed for a single square)."""

    game_id: UUID
    square: Optional[str] = None

    @field_validator("square")
    @classmethod
    def validate_square(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not is_valid_square_name(value):
            raise InvalidRequestError(
                f"Cannot interpret square: {value!r} as a valid square name."
            )
        return value


class MoveRequest(BaseModel):
    """A move intent: from/to square, plus the piece to promote into when a pawn reaches the final rank."""

    game_id: UUID
    from_square: str
    to_square: str
    promote_to: Optional[PieceType] = None

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        if not is_valid_square_name(value):
            raise InvalidRequestError(
                f"Cannot interpret square: {value!r} as a valid square name."
            )
        return value


class ResignRequest(BaseModel):
    game_id: UUID
    color: Color


class UndoMoveRequest(BaseModel):
    game_id: UUID


class DeleteGameRequest(BaseModel):
    game_id: UUID


# --- RESPONSE MODELS ---
class GameResponse(BaseModel):
    game_id: UUID
    fen: str
    starting_fen: str
    color_to_move: Color
    status: GameStatus
    winner: Optional[Color] = None
    moves_san: list[str]
    pgn: str
    fifty_move_warning: bool = False
    repetition_count: int = 1


class MoveResponse(BaseModel):
    game_id: UUID
    uci: str
    san: str
    fen: str
    status: GameStatus
    winner: Optional[Color] = None
    pgn: str


class LegalMovesResponse(BaseModel):
    game_id: UUID
    color: Color
    square: Optional[str] = None
    legal_moves: list[str]
    destinations: list[str]
