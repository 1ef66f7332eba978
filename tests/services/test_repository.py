"""Unit tests for src/services/repository.py"""

from uuid import uuid4

from src.core.models import GameModel
from src.services.repository import InMemoryGameRepository

MOCK_FEN = "8/8/8/8/8/8/8/8 w - - 0 1"


def _model(fen: str = MOCK_FEN) -> GameModel:
    return GameModel(current_fen=fen, history_fen=[fen])


def test_create_and_get() -> None:
    repo = InMemoryGameRepository()
    stored, game_id = repo.create_game(_model())
    assert repo.get_game(game_id) == stored
    assert len(repo) == 1


def test_every_game_gets_its_own_id() -> None:
    repo = InMemoryGameRepository()
    _, first = repo.create_game(_model())
    _, second = repo.create_game(_model())
    assert first != second
    assert len(repo) == 2


def test_get_unknown_game() -> None:
    assert InMemoryGameRepository().get_game(uuid4()) is None


def test_update() -> None:
    repo = InMemoryGameRepository()
    _, game_id = repo.create_game(_model())
    new_fen = "4k3/8/8/8/8/8/8/4K3 w - - 0 1"

    updated = repo.update_game(game_id, _model(new_fen))
    assert updated is not None
    assert repo.get_game(game_id) == _model(new_fen)


def test_update_unknown_game() -> None:
    repo = InMemoryGameRepository()
    assert repo.update_game(uuid4(), _model()) is None
    assert len(repo) == 0


def test_delete() -> None:
    repo = InMemoryGameRepository()
    stored, game_id = repo.create_game(_model())
    assert repo.delete_game(game_id) == stored
    assert repo.get_game(game_id) is None
    assert repo.delete_game(game_id) is None
