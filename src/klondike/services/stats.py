from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator

from klondike.paths import get_paths

STATS_VERSION = 1


class StatsError(RuntimeError):
    pass


def _int(d: Mapping[str, object], key: str, default: int = 0) -> int:
    v = d.get(key, default)
    return v if isinstance(v, int) and not isinstance(v, bool) else default


@dataclass
class Statistics:
    """Lifetime counters. Touched only when a game starts and when one is won."""

    games_played: int = 0
    games_won: int = 0
    best_time: float | None = None
    average_moves: float = 0.0
    current_streak: int = 0
    best_streak: int = 0
    # True between a game's start and its win; a new game seen while still set breaks the streak.
    game_in_progress: bool = False

    @property
    def win_percentage(self) -> float:
        if self.games_played == 0:
            return 0.0
        return self.games_won / self.games_played * 100

    def record_game_started(self) -> None:
        if self.game_in_progress:
            self.current_streak = 0
        self.games_played += 1
        self.game_in_progress = True

    def record_game_won(self, moves: int, seconds: float) -> None:
        if not self.game_in_progress:
            return
        self.game_in_progress = False
        self.games_won += 1
        self.average_moves += (moves - self.average_moves) / self.games_won
        if self.best_time is None or seconds < self.best_time:
            self.best_time = seconds
        self.current_streak += 1
        self.best_streak = max(self.best_streak, self.current_streak)

    @staticmethod
    def from_dict(d: Mapping[str, object]) -> "Statistics":
        best_raw = d.get("best_time")
        avg_raw = d.get("average_moves", 0.0)
        return Statistics(
            games_played=_int(d, "games_played"),
            games_won=_int(d, "games_won"),
            best_time=float(best_raw) if isinstance(best_raw, (int, float)) else None,
            average_moves=float(avg_raw) if isinstance(avg_raw, (int, float)) else 0.0,
            current_streak=_int(d, "current_streak"),
            best_streak=_int(d, "best_streak"),
            game_in_progress=bool(d.get("game_in_progress", False)),
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "version": STATS_VERSION,
            "games_played": self.games_played,
            "games_won": self.games_won,
            "best_time": self.best_time,
            "average_moves": self.average_moves,
            "current_streak": self.current_streak,
            "best_streak": self.best_streak,
            "game_in_progress": self.game_in_progress,
        }


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise StatsError(f"Missing file: {path}") from e
    except json.JSONDecodeError as e:
        raise StatsError(f"Invalid JSON in {path}: {e}") from e


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: [str(p) for p in e.path])
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise StatsError("\n".join(lines))


class StatsService:
    """Persists Statistics as JSON, saving after every recorded event."""

    def __init__(self, path: Path, schema_path: Path | None = None) -> None:
        self._path = path
        self._schema = _load_json(schema_path or get_paths().schema_dir / "stats.schema.json")
        self.stats = self._load_or_create()

    def _load_or_create(self) -> Statistics:
        if not self._path.exists():
            stats = Statistics()
            self._write(stats)
            return stats
        raw = _load_json(self._path)
        validate_json(raw, self._schema, context=str(self._path))
        if not isinstance(raw, dict):
            raise StatsError(f"{self._path} must hold an object")
        return Statistics.from_dict(raw)

    def _write(self, stats: Statistics) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(stats.to_dict(), indent=2), encoding="utf-8")

    def save(self) -> None:
        self._write(self.stats)

    def record_game_started(self) -> None:
        self.stats.record_game_started()
        self.save()

    def record_game_won(self, moves: int, seconds: float) -> None:
        self.stats.record_game_won(moves, seconds)
        self.save()
