"""
Contract for the Service layer.

Transport-safe representation of a game: plain strings and lists only, so the Service (and whatever calls it)
never has to know about the domain objects.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class GameModel:
    """Chess specific data of a game. `history_fen[0]` is the starting position, `history_fen[-1]` the current one."""

    current_fen: str
    history_fen: list[str]
    moves_uci: list[str] = field(default_factory=list)
    moves_san: list[str] = field(default_factory=list)
    status: str = "active"
    resigned_by: Optional[str] = None
