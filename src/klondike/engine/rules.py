"""Move legality. Nothing in this module mutates a board."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from .actions import (
    FOUNDATION_PILES,
    TABLEAU_COLUMNS,
    BoardAction,
    DealAction,
    FlipAction,
    Foundation,
    MoveAction,
    Position,
    Stock,
    Tableau,
    Waste,
)
from .board import Board
from .cards import ACE, KING, Card
from .errors import CardNotFound, EmptyPile, InvalidMove, RuleViolation

MoveKind = Literal["move", "deal", "recycle", "flip"]


@dataclass(frozen=True)
class ValidatedMove:
    kind: MoveKind
    source: Position
    destination: Position | None
    cards: tuple[Card, ...]  # in the order they land on the destination


def is_run(cards: Sequence[Card]) -> bool:
    """Face-up, alternating colors, each card one rank below the one it sits on."""
    if not cards or not all(c.face_up for c in cards):
        return False
    for lower, upper in zip(cards, cards[1:]):
        if not (upper.is_opposite_color(lower) and upper.is_one_rank_lower(lower)):
            return False
    return True


def tableau_refusal(card: Card, pile: Sequence[Card]) -> str | None:
    if not pile:
        if card.rank == KING:
            return None
        return f"Only a King can be placed on an empty column, not {card.label}."
    top = pile[-1]
    if not top.face_up:
        return "The destination's top card is face down."
    if not card.is_opposite_color(top):
        return f"{card.label} must be the opposite color of {top.label}."
    if not card.is_one_rank_lower(top):
        return f"{card.label} must be exactly one rank lower than {top.label}."
    return None


def foundation_refusal(card: Card, pile: Sequence[Card]) -> str | None:
    if not pile:
        if card.rank == ACE:
            return None
        return f"Only an Ace can start a foundation, not {card.label}."
    top = pile[-1]
    if card.suit != top.suit:
        return f"{card.label} does not match the foundation suit {top.suit}."
    if not card.is_one_rank_higher(top):
        return f"{card.label} must be exactly one rank higher than {top.label}."
    return None


def can_place_on_tableau(card: Card, pile: Sequence[Card]) -> bool:
    return tableau_refusal(card, pile) is None


def can_place_on_foundation(card: Card, pile: Sequence[Card]) -> bool:
    return foundation_refusal(card, pile) is None


def _column(board: Board, pos: Tableau) -> list[Card] | None:
    if pos.column < 0 or pos.column >= TABLEAU_COLUMNS:
        return None
    return board.tableau[pos.column]


def _foundation(board: Board, pos: Foundation) -> list[Card] | None:
    if pos.pile < 0 or pos.pile >= FOUNDATION_PILES:
        return None
    return board.foundations[pos.pile]


def pick_up(
    board: Board, source: Position, destination: Position | None = None
) -> tuple[Card, ...] | RuleViolation:
    """The unit of cards a move from `source` would carry."""
    if isinstance(source, Tableau):
        pile = _column(board, source)
        if pile is None:
            return CardNotFound(source)
        if not pile:
            return EmptyPile(source)
        index = len(pile) - 1 if source.index is None else source.index
        if index < 0 or index >= len(pile):
            return CardNotFound(source)
        unit = pile[index:]
        if not unit[0].face_up:
            return InvalidMove(source, destination, "That card is face down.")
        if not is_run(unit):
            return InvalidMove(
                source, destination, "Cards above it do not form an alternating descending run."
            )
        return tuple(unit)
    if isinstance(source, Waste):
        if not board.waste:
            return EmptyPile(source)
        return (board.waste[-1],)
    if isinstance(source, Foundation):
        pile = _foundation(board, source)
        if pile is None:
            return CardNotFound(source)
        if not pile:
            return EmptyPile(source)
        return (pile[-1],)
    if isinstance(source, Stock):
        return InvalidMove(source, destination, "Cards leave the stock only by dealing.")
    return InvalidMove(source, destination, "Unknown source position.")


def _validate_move(
    board: Board, action: MoveAction, allow_foundation_to_tableau: bool
) -> ValidatedMove | RuleViolation:
    src, dst = action.source, action.destination
    unit = pick_up(board, src, dst)
    if not isinstance(unit, tuple):
        return unit
    lead = unit[0]

    if isinstance(dst, Tableau):
        pile = _column(board, dst)
        if pile is None:
            return InvalidMove(src, dst, "No such tableau column.")
        if isinstance(src, Tableau) and src.column == dst.column:
            return InvalidMove(src, dst, "Source and destination are the same column.")
        if isinstance(src, Foundation) and not allow_foundation_to_tableau:
            return InvalidMove(src, dst, "Foundation cards cannot be taken back under the current rules.")
        refusal = tableau_refusal(lead, pile)
        if refusal is not None:
            return InvalidMove(src, dst, refusal)
        return ValidatedMove(kind="move", source=src, destination=dst, cards=unit)

    if isinstance(dst, Foundation):
        pile = _foundation(board, dst)
        if pile is None:
            return InvalidMove(src, dst, "No such foundation pile.")
        if isinstance(src, Foundation):
            return InvalidMove(src, dst, "Cards cannot move between foundations.")
        if len(unit) != 1:
            return InvalidMove(src, dst, "Only a single top card can move to a foundation.")
        refusal = foundation_refusal(lead, pile)
        if refusal is not None:
            return InvalidMove(src, dst, refusal)
        return ValidatedMove(kind="move", source=src, destination=dst, cards=unit)

    if isinstance(dst, (Stock, Waste)):
        return InvalidMove(src, dst, f"Cards cannot be placed on the {dst}.")
    return InvalidMove(src, dst, "Unknown destination position.")


def _validate_deal(board: Board) -> ValidatedMove | RuleViolation:
    if board.stock:
        n = min(board.draw_count, len(board.stock))
        drawn = tuple(reversed(board.stock[-n:]))
        return ValidatedMove(kind="deal", source=Stock(), destination=Waste(), cards=drawn)
    if board.waste:
        return ValidatedMove(
            kind="recycle", source=Waste(), destination=Stock(), cards=tuple(reversed(board.waste))
        )
    return EmptyPile(Stock())


def _validate_flip(board: Board, action: FlipAction) -> ValidatedMove | RuleViolation:
    pos = action.position
    if not isinstance(pos, Tableau):
        return InvalidMove(pos, None, "Only tableau cards can be flipped.")
    pile = _column(board, pos)
    if pile is None:
        return CardNotFound(pos)
    if not pile:
        return EmptyPile(pos)
    if pos.index is not None and pos.index != len(pile) - 1:
        return InvalidMove(pos, None, "Only the top card of a column can be flipped.")
    if pile[-1].face_up:
        return InvalidMove(pos, None, f"{pile[-1].label} is already face up.")
    return ValidatedMove(kind="flip", source=pos, destination=None, cards=(pile[-1],))


def validate(
    board: Board, action: BoardAction, *, allow_foundation_to_tableau: bool = True
) -> ValidatedMove | RuleViolation:
    if isinstance(action, MoveAction):
        return _validate_move(board, action, allow_foundation_to_tableau)
    if isinstance(action, DealAction):
        return _validate_deal(board)
    if isinstance(action, FlipAction):
        return _validate_flip(board, action)
    return InvalidMove(None, None, "Unknown action.")
