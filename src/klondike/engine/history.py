from __future__ import annotations

import time
from dataclasses import dataclass, field

from .actions import BoardAction
from .board import Board, BoardSnapshot
from .errors import NoMovesToUndo


@dataclass(frozen=True)
class Move:
    action: BoardAction
    before: BoardSnapshot
    timestamp: float


@dataclass
class History:
    """LIFO of applied actions. Undo restores the recorded snapshot; there is no redo."""

    moves: list[Move] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.moves)

    def record(self, board_before: Board, action: BoardAction) -> Move:
        move = Move(action=action, before=board_before.snapshot(), timestamp=time.time())
        self.moves.append(move)
        return move

    def undo(self, board: Board) -> Move | NoMovesToUndo:
        if not self.moves:
            return NoMovesToUndo()
        move = self.moves.pop()
        board.restore(move.before)
        return move

    def clear(self) -> None:
        self.moves.clear()
