from __future__ import annotations

import random

from .actions import TABLEAU_COLUMNS, DrawCount
from .board import Board
from .cards import Card, create_deck
from .errors import DealError


def make_rng(seed: int | None) -> random.Random:
    """Seeded games are reproducible; unseeded games draw from the OS entropy pool."""
    if seed is None:
        return random.SystemRandom()
    return random.Random(seed)


def _shuffle(rng: random.Random, items: list[Card]) -> None:
    try:
        rng.shuffle(items)
    except (OSError, NotImplementedError) as e:
        raise DealError(f"Randomness source failed while shuffling: {e}") from e


def shuffled_deck(rng: random.Random) -> list[Card]:
    deck = create_deck()
    _shuffle(rng, deck)
    return deck


def deal(deck: list[Card], draw_count: DrawCount = 3) -> Board:
    """Lay out a deck in the Klondike opening position.

    Column i receives i + 1 cards with only the last one face-up; the
    remaining 24 cards form the face-down stock. The deck is consumed from
    the front, so deck[0] is the single card of column 0.
    """
    if len(deck) != 52 or len(set(deck)) != 52:
        raise ValueError("A deal needs exactly one standard 52-card deck.")

    board = Board(draw_count=draw_count)
    idx = 0
    for col in range(TABLEAU_COLUMNS):
        for row in range(col + 1):
            board.tableau[col].append(deck[idx].turned(row == col))
            idx += 1
    board.stock = [c.turned(False) for c in deck[idx:]]
    return board


def new_board(draw_count: DrawCount = 3, seed: int | None = None) -> Board:
    return deal(shuffled_deck(make_rng(seed)), draw_count)
