from __future__ import annotations

import time
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from .actions import DRAW_COUNT_NAMES, FOUNDATION_PILES, TABLEAU_COLUMNS, DrawCount
from .cards import ACE, KING, Card

Pile = list[Card]


@dataclass(frozen=True, eq=False)
class BoardSnapshot:
    """Immutable copy of a board.

    Serves both as the read-only view handed to the presentation layer and as
    the undo record kept by the history. Cards are immutable, so tuples of
    them are fully independent of the live board.
    """

    tableau: tuple[tuple[Card, ...], ...]
    foundations: tuple[tuple[Card, ...], ...]
    stock: tuple[Card, ...]
    waste: tuple[Card, ...]
    draw_count: DrawCount
    move_count: int
    won: bool

    def _key(self) -> tuple[object, ...]:
        # Card equality ignores face state; snapshots must not.
        def faces(pile: Sequence[Card]) -> tuple[tuple[str, int, bool], ...]:
            return tuple((c.suit, c.rank, c.face_up) for c in pile)

        return (
            tuple(faces(p) for p in self.tableau),
            tuple(faces(p) for p in self.foundations),
            faces(self.stock),
            faces(self.waste),
            self.draw_count,
            self.move_count,
            self.won,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BoardSnapshot):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())


@dataclass
class Board:
    tableau: list[Pile] = field(default_factory=lambda: [[] for _ in range(TABLEAU_COLUMNS)])
    foundations: list[Pile] = field(default_factory=lambda: [[] for _ in range(FOUNDATION_PILES)])
    stock: Pile = field(default_factory=list)  # top of stock is the last element
    waste: Pile = field(default_factory=list)  # top of waste is the last element
    draw_count: DrawCount = 3
    move_count: int = 0
    won: bool = False
    started_at: float = field(default_factory=time.monotonic, compare=False)

    @property
    def elapsed_time(self) -> float:
        return time.monotonic() - self.started_at

    def all_cards(self) -> Iterator[Card]:
        for pile in self.tableau:
            yield from pile
        for pile in self.foundations:
            yield from pile
        yield from self.stock
        yield from self.waste

    def snapshot(self) -> BoardSnapshot:
        return BoardSnapshot(
            tableau=tuple(tuple(p) for p in self.tableau),
            foundations=tuple(tuple(p) for p in self.foundations),
            stock=tuple(self.stock),
            waste=tuple(self.waste),
            draw_count=self.draw_count,
            move_count=self.move_count,
            won=self.won,
        )

    def restore(self, snap: BoardSnapshot) -> None:
        self.tableau = [list(p) for p in snap.tableau]
        self.foundations = [list(p) for p in snap.foundations]
        self.stock = list(snap.stock)
        self.waste = list(snap.waste)
        self.draw_count = snap.draw_count
        self.move_count = snap.move_count
        self.won = snap.won

    @staticmethod
    def from_snapshot(snap: BoardSnapshot) -> "Board":
        board = Board()
        board.restore(snap)
        return board

    def summary(self) -> str:
        return (
            f"Moves: {self.move_count} | Stock: {len(self.stock)} | "
            f"Waste: {len(self.waste)} | Draw: {DRAW_COUNT_NAMES[self.draw_count]}"
        )

    def debug_info(self) -> str:
        lines = [
            "=== KLONDIKE BOARD ===",
            f"Move Count: {self.move_count}",
            f"Draw Count: {DRAW_COUNT_NAMES[self.draw_count]}",
            f"Game Won: {self.won}",
            f"Stock Cards: {len(self.stock)}",
            f"Waste Cards: {len(self.waste)}",
            "",
            "--- TABLEAU ---",
        ]
        for col, pile in enumerate(self.tableau):
            lines.append(f"Column {col}: {len(pile)} cards - {_pile_text(pile)}")

        lines += ["", "--- FOUNDATIONS ---"]
        for i, pile in enumerate(self.foundations):
            if pile:
                lines.append(f"Foundation {i}: {len(pile)} cards, top: {pile[-1]}")
            else:
                lines.append(f"Foundation {i}: (empty)")

        lines += [
            "",
            "--- STOCK & WASTE ---",
            f"Stock: {len(self.stock)} cards (all face-down)",
            f"Waste: {_pile_text(self.waste)}",
        ]
        return "\n".join(lines) + "\n"


def _pile_text(pile: Sequence[Card]) -> str:
    if not pile:
        return "(empty)"
    return ", ".join(str(c) for c in pile)


def is_foundation_run(pile: Sequence[Card]) -> bool:
    """Single suit, ascending by one from Ace with no gaps."""
    for i, card in enumerate(pile):
        if card.rank != ACE + i or card.suit != pile[0].suit:
            return False
    return True


def is_complete(board: Board) -> bool:
    """True when every foundation holds a full Ace..King run of one suit."""
    if len(board.foundations) != FOUNDATION_PILES:
        return False
    suits = set()
    for pile in board.foundations:
        if len(pile) != KING or not is_foundation_run(pile):
            return False
        suits.add(pile[0].suit)
    return len(suits) == FOUNDATION_PILES
