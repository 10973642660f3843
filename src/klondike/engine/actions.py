from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

DrawCount = Literal[1, 3]

DRAW_COUNT_NAMES: dict[int, str] = {1: "One", 3: "Three"}

TABLEAU_COLUMNS = 7
FOUNDATION_PILES = 4


@dataclass(frozen=True)
class Tableau:
    column: int
    index: int | None = None  # None addresses the top card of the column

    def __str__(self) -> str:
        if self.index is None:
            return f"Tableau({self.column})"
        return f"Tableau({self.column}, {self.index})"


@dataclass(frozen=True)
class Foundation:
    pile: int

    def __str__(self) -> str:
        return f"Foundation({self.pile})"


@dataclass(frozen=True)
class Stock:
    def __str__(self) -> str:
        return "Stock"


@dataclass(frozen=True)
class Waste:
    def __str__(self) -> str:
        return "Waste"


Position = Tableau | Foundation | Stock | Waste


@dataclass(frozen=True)
class MoveAction:
    source: Position
    destination: Position


@dataclass(frozen=True)
class DealAction:
    """Stock to waste, or recycle the waste when the stock is exhausted."""


@dataclass(frozen=True)
class FlipAction:
    position: Position


@dataclass(frozen=True)
class UndoAction:
    pass


@dataclass(frozen=True)
class NewGameAction:
    draw_count: DrawCount | None = None
    seed: int | None = None


BoardAction = MoveAction | DealAction | FlipAction
Action = MoveAction | DealAction | FlipAction | UndoAction | NewGameAction
