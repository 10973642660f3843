"""Deterministic, headless Klondike rules engine.

IMPORTANT: This package performs no I/O and must never import klondike.services.
"""

from .actions import (
    DealAction,
    DrawCount,
    FlipAction,
    Foundation,
    MoveAction,
    NewGameAction,
    Position,
    Stock,
    Tableau,
    UndoAction,
    Waste,
)
from .board import Board, BoardSnapshot, is_complete
from .cards import Card, Suit, create_deck
from .errors import (
    CardNotFound,
    DealError,
    EmptyPile,
    GameAlreadyWon,
    InvalidMove,
    NoMovesToUndo,
    RuleViolation,
)
from .game import Game, GameConfig, StepResult, apply, has_any_legal_move, replay
from .rules import validate

__all__ = [
    "Board",
    "BoardSnapshot",
    "Card",
    "CardNotFound",
    "DealAction",
    "DealError",
    "DrawCount",
    "EmptyPile",
    "FlipAction",
    "Foundation",
    "Game",
    "GameAlreadyWon",
    "GameConfig",
    "InvalidMove",
    "MoveAction",
    "NewGameAction",
    "NoMovesToUndo",
    "Position",
    "RuleViolation",
    "StepResult",
    "Stock",
    "Suit",
    "Tableau",
    "UndoAction",
    "Waste",
    "apply",
    "create_deck",
    "has_any_legal_move",
    "is_complete",
    "replay",
    "validate",
]
