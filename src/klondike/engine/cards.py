from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Literal

Suit = Literal["Hearts", "Diamonds", "Clubs", "Spades"]

SUITS: tuple[Suit, ...] = ("Hearts", "Diamonds", "Clubs", "Spades")
RED_SUITS: frozenset[Suit] = frozenset({"Hearts", "Diamonds"})

SUIT_SYMBOLS: dict[Suit, str] = {
    "Hearts": "♥",
    "Diamonds": "♦",
    "Clubs": "♣",
    "Spades": "♠",
}

ACE = 1
JACK = 11
QUEEN = 12
KING = 13
RANKS = tuple(range(ACE, KING + 1))

RANK_NAMES: dict[int, str] = {ACE: "A", JACK: "J", QUEEN: "Q", KING: "K"}

CARD_BACK = "🂠"


def rank_name(rank: int) -> str:
    return RANK_NAMES.get(rank, str(rank))


@dataclass(frozen=True)
class Card:
    """A playing card. Identity is (suit, rank); face state is display-only."""

    suit: Suit
    rank: int
    face_up: bool = field(default=False, compare=False)

    def __post_init__(self) -> None:
        if self.suit not in SUIT_SYMBOLS:
            raise ValueError(f"Unknown suit: {self.suit!r}")
        if self.rank not in RANKS:
            raise ValueError(f"Rank must be between {ACE} and {KING}, got {self.rank}")

    @property
    def is_red(self) -> bool:
        return self.suit in RED_SUITS

    @property
    def is_black(self) -> bool:
        return self.suit not in RED_SUITS

    def is_opposite_color(self, other: Card) -> bool:
        return self.is_red != other.is_red

    def is_one_rank_lower(self, other: Card) -> bool:
        return self.rank == other.rank - 1

    def is_one_rank_higher(self, other: Card) -> bool:
        return self.rank == other.rank + 1

    def turned(self, face_up: bool) -> Card:
        if self.face_up == face_up:
            return self
        return replace(self, face_up=face_up)

    def flipped(self) -> Card:
        return replace(self, face_up=not self.face_up)

    @property
    def label(self) -> str:
        """Face value regardless of orientation, e.g. "10♠"."""
        return f"{rank_name(self.rank)}{SUIT_SYMBOLS[self.suit]}"

    def __str__(self) -> str:
        if self.face_up:
            return self.label
        return CARD_BACK


def create_deck() -> list[Card]:
    """A standard ordered 52-card deck, every card face-down."""
    return [Card(suit=s, rank=r, face_up=False) for s in SUITS for r in RANKS]
