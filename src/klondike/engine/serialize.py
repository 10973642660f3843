from __future__ import annotations

from collections.abc import Iterable, Mapping

from .actions import (
    Action,
    DealAction,
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
from .board import Board, BoardSnapshot
from .cards import Card


def card_to_dict(c: Card) -> dict[str, object]:
    return {"suit": c.suit, "rank": c.rank, "face_up": c.face_up}


def _cards(cards: Iterable[Card]) -> list[dict[str, object]]:
    return [card_to_dict(c) for c in cards]


def position_to_dict(p: Position) -> dict[str, object]:
    if isinstance(p, Tableau):
        return {"kind": "tableau", "column": p.column, "index": p.index}
    if isinstance(p, Foundation):
        return {"kind": "foundation", "pile": p.pile}
    if isinstance(p, Stock):
        return {"kind": "stock"}
    return {"kind": "waste"}


def position_from_dict(d: Mapping[str, object]) -> Position:
    kind = d.get("kind")
    if kind == "tableau":
        index = d.get("index")
        return Tableau(column=int(d["column"]), index=None if index is None else int(index))  # type: ignore[arg-type]
    if kind == "foundation":
        return Foundation(pile=int(d["pile"]))  # type: ignore[arg-type]
    if kind == "stock":
        return Stock()
    if kind == "waste":
        return Waste()
    raise ValueError(f"Unknown position kind: {kind!r}")


def action_to_dict(a: Action) -> dict[str, object]:
    if isinstance(a, MoveAction):
        return {
            "type": "move",
            "source": position_to_dict(a.source),
            "destination": position_to_dict(a.destination),
        }
    if isinstance(a, DealAction):
        return {"type": "deal"}
    if isinstance(a, FlipAction):
        return {"type": "flip", "position": position_to_dict(a.position)}
    if isinstance(a, UndoAction):
        return {"type": "undo"}
    if isinstance(a, NewGameAction):
        return {"type": "new_game", "draw_count": a.draw_count, "seed": a.seed}
    # should be unreachable
    return {"type": "unknown"}


def action_from_dict(d: Mapping[str, object]) -> Action:
    t = d.get("type")
    if t == "move":
        src, dst = d.get("source"), d.get("destination")
        if not isinstance(src, Mapping) or not isinstance(dst, Mapping):
            raise ValueError("Move needs source and destination objects.")
        return MoveAction(source=position_from_dict(src), destination=position_from_dict(dst))
    if t == "deal":
        return DealAction()
    if t == "flip":
        pos = d.get("position")
        if not isinstance(pos, Mapping):
            raise ValueError("Flip needs a position object.")
        return FlipAction(position=position_from_dict(pos))
    if t == "undo":
        return UndoAction()
    if t == "new_game":
        draw = d.get("draw_count")
        seed = d.get("seed")
        return NewGameAction(
            draw_count=draw if draw in (1, 3) else None,  # type: ignore[arg-type]
            seed=seed if isinstance(seed, int) else None,
        )
    raise ValueError(f"Unknown action type: {t!r}")


def snapshot(board: Board | BoardSnapshot) -> dict[str, object]:
    """Return a JSON-serializable canonical dump of a board, face state included."""
    return {
        "tableau": [_cards(p) for p in board.tableau],
        "foundations": [_cards(p) for p in board.foundations],
        "stock": _cards(board.stock),
        "waste": _cards(board.waste),
        "draw_count": board.draw_count,
        "move_count": board.move_count,
        "won": board.won,
    }
