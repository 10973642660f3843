from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Protocol

from .actions import (
    FOUNDATION_PILES,
    TABLEAU_COLUMNS,
    Action,
    BoardAction,
    DealAction,
    DrawCount,
    FlipAction,
    Foundation,
    MoveAction,
    NewGameAction,
    Position,
    Tableau,
    UndoAction,
    Waste,
)
from .board import Board, BoardSnapshot, is_complete
from .cards import Card
from .dealer import new_board
from .errors import GameAlreadyWon, NoMovesToUndo, RuleViolation
from .history import History
from .rules import ValidatedMove, pick_up, validate
from .serialize import action_to_dict

Event = dict[str, object]


@dataclass(frozen=True)
class GameConfig:
    draw_count: DrawCount = 3
    # When False, flips leave move_count unchanged.
    count_flips_as_moves: bool = False
    allow_foundation_to_tableau: bool = True


@dataclass
class StepResult:
    ok: bool
    events: list[Event]
    error: RuleViolation | None = None


class StatsRecorder(Protocol):
    def record_game_started(self) -> None: ...

    def record_game_won(self, moves: int, seconds: float) -> None: ...


def _labels(cards: Iterable[Card]) -> list[str]:
    return [c.label for c in cards]


def _take(board: Board, source: Position, count: int) -> None:
    if isinstance(source, Tableau):
        del board.tableau[source.column][-count:]
    elif isinstance(source, Foundation):
        board.foundations[source.pile].pop()
    elif isinstance(source, Waste):
        board.waste.pop()


def _reveal_top(board: Board, column: int) -> Event | None:
    pile = board.tableau[column]
    if not pile or pile[-1].face_up:
        return None
    pile[-1] = pile[-1].turned(True)
    return {"type": "CARD_REVEALED", "column": column, "card": pile[-1].label}


def _commit(board: Board, move: ValidatedMove) -> list[Event]:
    events: list[Event] = []
    if move.kind == "move":
        src, dst = move.source, move.destination
        _take(board, src, len(move.cards))
        if isinstance(dst, Tableau):
            board.tableau[dst.column].extend(move.cards)
        elif isinstance(dst, Foundation):
            board.foundations[dst.pile].extend(move.cards)
        events.append(
            {"type": "CARDS_MOVED", "source": str(src), "destination": str(dst), "cards": _labels(move.cards)}
        )
        # Auto-reveal belongs to the same transition as the move.
        if isinstance(src, Tableau):
            revealed = _reveal_top(board, src.column)
            if revealed is not None:
                events.append(revealed)

    elif move.kind == "deal":
        del board.stock[-len(move.cards):]
        board.waste.extend(c.turned(True) for c in move.cards)
        events.append({"type": "STOCK_DEALT", "cards": _labels(move.cards), "stock_left": len(board.stock)})

    elif move.kind == "recycle":
        board.stock = [c.turned(False) for c in move.cards]
        board.waste = []
        events.append({"type": "WASTE_RECYCLED", "count": len(board.stock)})

    elif move.kind == "flip":
        assert isinstance(move.source, Tableau)
        pile = board.tableau[move.source.column]
        pile[-1] = pile[-1].turned(True)
        events.append({"type": "CARD_FLIPPED", "column": move.source.column, "card": pile[-1].label})

    return events


def apply(
    board: Board,
    action: BoardAction,
    config: GameConfig | None = None,
    history: History | None = None,
) -> StepResult:
    """Validate and apply one board action.

    A rejected action leaves `board` and `history` untouched. An accepted one
    is recorded in `history` before the board changes.
    """
    cfg = config or GameConfig()
    if board.won:
        return StepResult(ok=False, events=[], error=GameAlreadyWon())

    result = validate(board, action, allow_foundation_to_tableau=cfg.allow_foundation_to_tableau)
    if not isinstance(result, ValidatedMove):
        return StepResult(ok=False, events=[], error=result)

    if history is not None:
        history.record(board, action)
    events = _commit(board, result)

    if result.kind != "flip" or cfg.count_flips_as_moves:
        board.move_count += 1

    if is_complete(board):
        board.won = True
        events.append({"type": "GAME_WON", "moves": board.move_count})
    return StepResult(ok=True, events=events)


def _candidate_actions(board: Board, include_foundation_retrieval: bool) -> Iterator[BoardAction]:
    tops: list[Position] = []
    if board.waste:
        tops.append(Waste())
    for col, pile in enumerate(board.tableau):
        if pile:
            if not pile[-1].face_up:
                yield FlipAction(Tableau(col, len(pile) - 1))
            tops.append(Tableau(col, len(pile) - 1))

    for src in tops:
        for f in range(FOUNDATION_PILES):
            yield MoveAction(src, Foundation(f))

    sources: list[Position] = [Waste()] if board.waste else []
    for col, pile in enumerate(board.tableau):
        sources += [Tableau(col, idx) for idx, card in enumerate(pile) if card.face_up]
    if include_foundation_retrieval:
        sources += [Foundation(f) for f in range(FOUNDATION_PILES) if board.foundations[f]]

    for src in sources:
        for col in range(TABLEAU_COLUMNS):
            dst_pile = board.tableau[col]
            # Shifting a whole column onto an empty one changes nothing.
            if isinstance(src, Tableau) and src.index == 0 and not dst_pile:
                continue
            yield MoveAction(src, Tableau(col, len(dst_pile)))

    if board.stock or board.waste:
        yield DealAction()


def legal_moves(board: Board, config: GameConfig | None = None) -> list[BoardAction]:
    cfg = config or GameConfig()
    if board.won:
        return []
    return [
        a
        for a in _candidate_actions(board, cfg.allow_foundation_to_tableau)
        if isinstance(
            validate(board, a, allow_foundation_to_tableau=cfg.allow_foundation_to_tableau),
            ValidatedMove,
        )
    ]


def has_any_legal_move(board: Board, config: GameConfig | None = None) -> bool:
    """Advisory only: whether any waste, stock, foundation or tableau play remains.

    Taking cards back off a foundation is not counted as a way out.
    """
    cfg = config or GameConfig()
    if board.won:
        return False
    for a in _candidate_actions(board, include_foundation_retrieval=False):
        result = validate(board, a, allow_foundation_to_tableau=cfg.allow_foundation_to_tableau)
        if isinstance(result, ValidatedMove):
            return True
    return False


class Game:
    """The engine instance owned by the presentation layer.

    Every call runs to completion synchronously. Not thread-safe; callers
    serialize access.
    """

    def __init__(self, config: GameConfig | None = None, stats: StatsRecorder | None = None) -> None:
        self.config = config or GameConfig()
        self.stats = stats
        self.board: Board | None = None
        self.history = History()
        self.event_log: list[Event] = []
        self.seed: int | None = None

    def _require_board(self) -> Board:
        if self.board is None:
            raise RuntimeError("No game in progress; call new_game() first.")
        return self.board

    def new_game(self, draw_count: DrawCount | None = None, seed: int | None = None) -> BoardSnapshot:
        draw = draw_count or self.config.draw_count
        # Deal before touching any state so a shuffle failure leaves the old game intact.
        board = new_board(draw, seed)
        self.board = board
        self.seed = seed
        self.history.clear()
        self.event_log = [{"type": "GAME_STARTED", "draw_count": draw, "seed": seed}]
        if self.stats is not None:
            self.stats.record_game_started()
        return board.snapshot()

    def _apply(self, action: BoardAction) -> StepResult:
        board = self._require_board()
        result = apply(board, action, self.config, self.history)
        self.event_log.extend(result.events)
        if result.ok and board.won and self.stats is not None:
            self.stats.record_game_won(board.move_count, board.elapsed_time)
        return result

    def try_move(self, source: Position, destination: Position) -> StepResult:
        return self._apply(MoveAction(source, destination))

    def deal_from_stock(self) -> StepResult:
        return self._apply(DealAction())

    def flip(self, position: Position) -> StepResult:
        return self._apply(FlipAction(position))

    def undo(self) -> StepResult:
        board = self._require_board()
        if board.won:
            return StepResult(ok=False, events=[], error=GameAlreadyWon())
        move = self.history.undo(board)
        if isinstance(move, NoMovesToUndo):
            return StepResult(ok=False, events=[], error=move)
        event: Event = {"type": "MOVE_UNDONE", "action": action_to_dict(move.action)}
        self.event_log.append(event)
        return StepResult(ok=True, events=[event])

    def step(self, action: Action) -> StepResult:
        """Single entry point for any action record."""
        if isinstance(action, NewGameAction):
            self.new_game(action.draw_count, action.seed)
            return StepResult(ok=True, events=self.event_log[-1:])
        if isinstance(action, UndoAction):
            return self.undo()
        return self._apply(action)

    def snapshot(self) -> BoardSnapshot:
        return self._require_board().snapshot()

    @property
    def won(self) -> bool:
        return self.board is not None and self.board.won

    def has_any_legal_move(self) -> bool:
        return has_any_legal_move(self._require_board(), self.config)

    def legal_moves(self) -> list[BoardAction]:
        return legal_moves(self._require_board(), self.config)

    def cards_at(self, position: Position) -> list[Card]:
        """The cards a drag starting at `position` would carry; empty if none."""
        unit = pick_up(self._require_board(), position)
        if not isinstance(unit, tuple):
            return []
        return list(unit)

    def valid_drop_targets(self, source: Position) -> list[Position]:
        board = self._require_board()
        if board.won or not self.cards_at(source):
            return []
        candidates: list[Position] = [Tableau(c, len(board.tableau[c])) for c in range(TABLEAU_COLUMNS)]
        candidates += [Foundation(f) for f in range(FOUNDATION_PILES)]
        allow = self.config.allow_foundation_to_tableau
        targets: list[Position] = []
        for dst in candidates:
            if isinstance(validate(board, MoveAction(source, dst), allow_foundation_to_tableau=allow), ValidatedMove):
                targets.append(dst)
        return targets


def replay(
    actions: Iterable[Action],
    seed: int,
    draw_count: DrawCount | None = None,
    config: GameConfig | None = None,
) -> Game:
    game = Game(config)
    game.new_game(draw_count, seed)
    for a in actions:
        game.step(a)
        if game.won:
            break
    return game
