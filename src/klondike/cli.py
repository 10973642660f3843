from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

from klondike.engine import (
    BoardSnapshot,
    DealAction,
    FlipAction,
    Foundation,
    Game,
    GameConfig,
    MoveAction,
    NewGameAction,
    Position,
    Stock,
    Tableau,
    UndoAction,
    Waste,
)
from klondike.engine.actions import Action
from klondike.engine.board import Board
from klondike.engine.serialize import action_to_dict
from klondike.paths import get_paths
from klondike.services.stats import StatsService
from klondike.services.telemetry import TelemetryService

HELP = """Commands:
  d                 deal from stock (recycles the waste when the stock is empty)
  m SRC DST         move cards, e.g. "m w t3", "m t2:4 t6", "m t0 f1"
  f tN              flip the top card of column N
  u                 undo
  n [1|3]           new game, optionally changing the draw count
  b                 show the board
  hint              list legal moves
  stats             show lifetime statistics
  q                 quit
Positions: tN (top card of column N), tN:I (card I of column N), w, fN, s"""

Command = Action | str


class CommandError(ValueError):
    pass


def parse_position(text: str, snap: BoardSnapshot) -> Position:
    t = text.strip().lower()
    if t == "w":
        return Waste()
    if t == "s":
        return Stock()
    try:
        if t.startswith("f"):
            return Foundation(int(t[1:]))
        if t.startswith("t"):
            if ":" in t:
                col_s, idx_s = t[1:].split(":", 1)
                return Tableau(int(col_s), int(idx_s))
            col = int(t[1:])
            height = len(snap.tableau[col]) if 0 <= col < len(snap.tableau) else 0
            return Tableau(col, max(0, height - 1))
    except ValueError as e:
        raise CommandError(f"Bad position: {text!r}") from e
    raise CommandError(f"Bad position: {text!r}")


def parse_command(line: str, snap: BoardSnapshot) -> Command:
    parts = line.split()
    if not parts:
        return "board"
    head, args = parts[0].lower(), parts[1:]
    if head in ("q", "quit", "exit"):
        return "quit"
    if head in ("b", "board"):
        return "board"
    if head in ("h", "help", "?"):
        return "help"
    if head in ("hint", "stats"):
        return head
    if head in ("d", "deal"):
        return DealAction()
    if head in ("u", "undo"):
        return UndoAction()
    if head in ("n", "new"):
        if not args:
            return NewGameAction()
        if args[0] not in ("1", "3"):
            raise CommandError("Draw count must be 1 or 3.")
        return NewGameAction(draw_count=1 if args[0] == "1" else 3)
    if head in ("f", "flip"):
        if len(args) != 1:
            raise CommandError("Usage: f tN")
        return FlipAction(parse_position(args[0], snap))
    if head in ("m", "move"):
        if len(args) != 2:
            raise CommandError("Usage: m SRC DST")
        return MoveAction(parse_position(args[0], snap), parse_position(args[1], snap))
    raise CommandError(f"Unknown command: {head!r} (type 'help')")


def _print_board(snap: BoardSnapshot) -> None:
    print(Board.from_snapshot(snap).debug_info())


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="klondike")
    parser.add_argument("--draw", type=int, choices=(1, 3), default=3)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--stats", default=None, help="statistics file (default: userdata/stats.json)")
    parser.add_argument("--telemetry", default=None, help="event log (default: userdata/telemetry.jsonl)")
    parser.add_argument("--no-telemetry", action="store_true")
    args = parser.parse_args(argv)

    paths = get_paths()
    stats = StatsService(paths.stats_file if args.stats is None else Path(args.stats).expanduser())
    telemetry = TelemetryService(
        paths.telemetry_file if args.telemetry is None else Path(args.telemetry).expanduser(),
        enabled=not args.no_telemetry,
    )

    game = Game(GameConfig(draw_count=args.draw), stats=stats)
    game.new_game(seed=args.seed)
    telemetry.log_events(game.event_log)
    _print_board(game.snapshot())

    while True:
        try:
            line = input("> ")
        except EOFError:
            break
        try:
            cmd = parse_command(line, game.snapshot())
        except CommandError as e:
            print(e)
            continue

        if cmd == "quit":
            break
        if cmd == "help":
            print(HELP)
            continue
        if cmd == "board":
            _print_board(game.snapshot())
            continue
        if cmd == "stats":
            s = stats.stats
            print(
                f"Played {s.games_played}, won {s.games_won} ({s.win_percentage:.1f}%), "
                f"streak {s.current_streak} (best {s.best_streak})"
            )
            continue
        if cmd == "hint":
            moves = game.legal_moves()
            for a in moves:
                print(action_to_dict(a))
            if not moves:
                print("No legal moves.")
            continue

        assert not isinstance(cmd, str)
        result = game.step(cmd)
        if not result.ok:
            assert result.error is not None
            print(result.error.message)
            telemetry.log("ACTION_REJECTED", {"action": action_to_dict(cmd), "reason": result.error.message})
            continue
        telemetry.log_events(result.events)
        snap = game.snapshot()
        _print_board(snap)
        if snap.won:
            print(f"You won in {snap.move_count} moves! Type 'n' for a new game.")
        elif not game.has_any_legal_move():
            print("No legal moves remain. Undo or start a new game.")
    return 0