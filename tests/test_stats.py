from __future__ import annotations

import json
from pathlib import Path

import pytest
from jsonschema import Draft202012Validator

from klondike.engine.actions import Foundation, Tableau
from klondike.engine.board import Board
from klondike.engine.cards import RANKS, SUITS, Card
from klondike.engine.game import Game
from klondike.paths import get_paths
from klondike.services.stats import Statistics, StatsError, StatsService


def _nearly_won_board() -> Board:
    foundations = [[Card(s, r, True) for r in RANKS] for s in SUITS]
    board = Board(foundations=foundations)
    board.tableau[0] = [foundations[0].pop()]
    return board


def test_win_percentage_without_games() -> None:
    assert Statistics().win_percentage == 0.0


def test_win_percentage() -> None:
    s = Statistics(games_played=4, games_won=1)
    assert s.win_percentage == 25.0


def test_streaks() -> None:
    s = Statistics()
    s.record_game_started()
    s.record_game_won(moves=100, seconds=300.0)
    s.record_game_started()
    s.record_game_won(moves=80, seconds=200.0)
    assert s.current_streak == 2
    assert s.best_streak == 2

    s.record_game_started()  # abandoned
    assert s.current_streak == 2
    s.record_game_started()
    assert s.current_streak == 0
    assert s.best_streak == 2
    assert s.games_played == 4
    assert s.games_won == 2


def test_win_counters() -> None:
    s = Statistics()
    s.record_game_started()
    s.record_game_won(moves=100, seconds=300.0)
    s.record_game_started()
    s.record_game_won(moves=80, seconds=420.0)
    assert s.average_moves == 90.0
    assert s.best_time == 300.0


def test_win_is_counted_once_per_game() -> None:
    s = Statistics()
    s.record_game_started()
    s.record_game_won(moves=10, seconds=1.0)
    s.record_game_won(moves=10, seconds=1.0)
    assert s.games_won == 1


def test_game_reports_start_and_win() -> None:
    stats = Statistics()
    game = Game(stats=stats)
    game.new_game(seed=3)
    assert stats.games_played == 1
    assert stats.game_in_progress

    game.board = _nearly_won_board()
    game.board.move_count = 41
    assert game.try_move(Tableau(0), Foundation(0)).ok
    assert stats.games_won == 1
    assert stats.average_moves == 42.0
    assert stats.best_time is not None
    assert not stats.game_in_progress


def test_from_dict_tolerates_missing_keys() -> None:
    s = Statistics.from_dict({"games_played": 3})
    assert s.games_played == 3
    assert s.games_won == 0
    assert s.best_time is None


def test_schema_is_valid() -> None:
    schema = json.loads((get_paths().schema_dir / "stats.schema.json").read_text(encoding="utf-8"))
    Draft202012Validator.check_schema(schema)
    Draft202012Validator(schema).validate(Statistics().to_dict())


def test_service_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "stats.json"
    svc = StatsService(path)
    assert path.exists()
    svc.record_game_started()
    svc.record_game_won(moves=57, seconds=123.5)
    svc.record_game_started()

    reloaded = StatsService(path)
    assert reloaded.stats == svc.stats
    assert reloaded.stats.to_dict() == svc.stats.to_dict()


def test_service_rejects_invalid_file(tmp_path: Path) -> None:
    path = tmp_path / "stats.json"
    path.write_text(json.dumps({"games_played": -1, "games_won": 0}), encoding="utf-8")
    with pytest.raises(StatsError):
        StatsService(path)

    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(StatsError):
        StatsService(path)
