from __future__ import annotations

from dataclasses import dataclass

from .actions import Position


class DealError(RuntimeError):
    """The randomness source failed while shuffling; no game was created."""


@dataclass(frozen=True)
class InvalidMove:
    source: Position | None
    destination: Position | None
    reason: str

    @property
    def message(self) -> str:
        if self.source is None:
            return self.reason
        if self.destination is None:
            return f"{self.source}: {self.reason}"
        return f"{self.source} -> {self.destination}: {self.reason}"


@dataclass(frozen=True)
class CardNotFound:
    position: Position

    @property
    def message(self) -> str:
        return f"No card at {self.position}."


@dataclass(frozen=True)
class EmptyPile:
    position: Position

    @property
    def message(self) -> str:
        return f"{self.position} is empty."


@dataclass(frozen=True)
class GameAlreadyWon:
    @property
    def message(self) -> str:
        return "Game already won."


@dataclass(frozen=True)
class NoMovesToUndo:
    @property
    def message(self) -> str:
        return "Nothing to undo."


RuleViolation = InvalidMove | CardNotFound | EmptyPile | GameAlreadyWon | NoMovesToUndo
