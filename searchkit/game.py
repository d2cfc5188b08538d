"""Game session around the core: turn order, history, multi-jumps and results."""

import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Tuple

from searchkit.config import CONFIG
from searchkit.core.board import Board, Color, Move, Square, apply_move, get_all_valid_moves, get_valid_captures, winner
from searchkit.core.search import INF, SearchEngine, TrackedOutcome, minimax

logger = logging.getLogger(__name__)

ONGOING = "ongoing"
WHITE_WIN = "white-win"
BLACK_WIN = "black-win"
DRAW = "draw"


@dataclass(frozen=True)
class MoveRecord:
    move: Move
    player: Color


class DraughtsGame:
    def __init__(self, board: Optional[Board] = None, turn: Color = Color.WHITE,
                 depth: Optional[int] = None):
        """Start from ``board`` (the standard opening by default) with ``turn`` to play."""
        self.engine = SearchEngine(depth=depth)
        self._start = (board or Board.initial(), turn)
        self.reset()

    def reset(self):
        """Back to the starting position."""
        self.board, self.turn = self._start
        self.history: List[MoveRecord] = []
        # (board, turn, pending) before each played move, for undo
        self._undo: List[Tuple[Board, Color, Optional[Square]]] = []
        # Square of a piece that must keep jumping before the turn passes.
        self.pending: Optional[Square] = None

    def set_position(self, board: Board, turn: Color):
        """Continue from an arbitrary position, dropping the history."""
        self.reset()
        self.board, self.turn = board, turn

    @property
    def status(self) -> str:
        """Result so far.

        The draw limit counts plies in ``history``, and every jump of a
        multi-jump is its own ply.
        """
        won = winner(self.board, self.turn)
        if won is Color.WHITE:
            return WHITE_WIN
        if won is Color.BLACK:
            return BLACK_WIN
        if len(self.history) > CONFIG.game.draw_move_limit:
            return DRAW
        return ONGOING

    def is_game_over(self) -> bool:
        return self.status != ONGOING

    def legal_moves(self) -> List[Move]:
        if self.pending is not None:
            return [Move(self.pending, dest) for dest in get_valid_captures(self.board, self.pending, self.turn)]
        return get_all_valid_moves(self.board, self.turn)

    def play(self, move: Move) -> bool:
        """Play ``move`` for the side to move. Returns True if legal."""
        if self.is_game_over() or move not in self.legal_moves():
            return False

        self._undo.append((self.board, self.turn, self.pending))
        self.board = apply_move(self.board, move)
        self.history.append(MoveRecord(move, self.turn))

        if move.is_capture and get_valid_captures(self.board, move.dest, self.turn):
            self.pending = move.dest
            logger.debug("%s continues jumping from %s", self.turn.value, move.dest)
            return True

        self.pending = None
        self.turn = self.turn.opponent
        return True

    def undo(self):
        """Take back the last move; no-op at the start."""
        if self._undo:
            self.board, self.turn, self.pending = self._undo.pop()
            self.history.pop()

    def best_move(self, depth: Optional[int] = None) -> Tuple[Optional[Move], float]:
        """Engine move for the side to move, restricted to the pending jump if any."""
        if depth is not None:
            self.engine.max_depth = depth
        if self.pending is not None:
            return self._best_continuation()
        return self.engine.search_best_move(self.board, self.turn)

    def trace(self, depth: Optional[int] = None) -> TrackedOutcome:
        if depth is not None:
            self.engine.max_depth = depth
        moves = self.legal_moves() if self.pending is not None else None
        return self.engine.trace_best_move(self.board, self.turn, moves)

    def _best_continuation(self) -> Tuple[Optional[Move], float]:
        depth = max(self.engine.max_depth - 1, 0)
        best, best_score = None, -INF
        for move in self.legal_moves():
            score = self._score_jump(apply_move(self.board, move), move.dest, depth)
            if score > best_score:
                best, best_score = move, score
        return best, best_score

    def _score_jump(self, board: Board, square: Square, depth: int) -> float:
        # Keep jumping while the piece can; the opponent minimizes once the turn passes.
        follow_ups = get_valid_captures(board, square, self.turn)
        if not follow_ups:
            score, _ = minimax(board, depth, self.turn, self.turn.opponent,
                               -INF, INF, False, evaluator=self.engine.evaluator)
            return score
        return max(self._score_jump(apply_move(board, Move(square, dest)), dest, depth)
                   for dest in follow_ups)

    def random_move(self, rng: Optional[random.Random] = None) -> Optional[Move]:
        moves = self.legal_moves()
        if not moves:
            return None
        return (rng or random).choice(moves)
