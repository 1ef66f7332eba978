"""
Custom exceptions used across layers.

Every error raised by the domain layer derives from GameError, so the Service (or whoever is calling the engine)
can catch one base class. The offending input is kept on the exception for diagnostics.
"""


class GameError(Exception):
    """Base class for anything that goes wrong while playing a game of chess."""


class MalformedFenError(GameError):
    """Structurally invalid FEN string: wrong number of fields, bad rank sum, invalid character, etc."""

    def __init__(self, fen: str, reason: str) -> None:
        self.fen = fen
        self.reason = reason
        super().__init__(f"Cannot interpret supplied string as FEN ({reason}): {fen!r}")


class InvalidSquareError(GameError):
    """A square name that does not exist on the board (ex. 'i9', 'e', 'a0')."""

    def __init__(self, square: str) -> None:
        self.square = square
        super().__init__(f"Not a square on the board: {square!r}")


class IllegalMoveError(GameError):
    """Well-formed from/to pair that is not in the set of legal moves of the side to move."""

    def __init__(self, move: str, reason: str = "not a legal move") -> None:
        self.move = move
        super().__init__(f"Move not allowed: {move} ({reason})")


class PromotionRequiredError(GameError):
    """Pawn reaches the final rank, but no piece type to promote into was supplied."""

    def __init__(self, move: str) -> None:
        self.move = move
        super().__init__(
            f"Move {move} reaches the final rank. Pick a piece to promote into."
        )


class GameStateError(GameError):
    """The game is in a state that does not allow the requested action (ex. moving after checkmate)."""


class InvalidRequestError(GameError):
    """Raised by the boundary models when a request cannot be interpreted."""


class GameNotFoundError(GameError):
    """The repository does not hold a game with the requested ID."""
