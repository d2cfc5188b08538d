import logging
import math
import time
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional, Tuple

from searchkit.config import CONFIG
from searchkit.core.board import Board, Color, Move, apply_move, get_all_valid_moves
from searchkit.core.evaluator import Evaluator
from searchkit.core.utils import format_search_info

logger = logging.getLogger(__name__)

INF = math.inf
# Score for the side to move having no legal moves. Coarse: a long enough
# evaluation sum can reach it.
LOSS_SCORE = 1000


class SearchOutcome(NamedTuple):
    score: float
    move: Optional[Move]


@dataclass
class MinimaxNode:
    """A position visited by alpha-beta; ``player`` is the side to move."""
    board: Board
    children: List["MinimaxNode"] = field(default_factory=list)
    score: Optional[float] = None
    move: Optional[Move] = None
    depth: int = 0
    is_maximizing: bool = True
    player: Color = Color.WHITE


class TrackedOutcome(NamedTuple):
    move: Optional[Move]
    tree: MinimaxNode


class _Minimax:
    """One alpha-beta run; holds the evaluator and the visited-node counter."""

    def __init__(self, evaluator: Optional[Evaluator] = None, prune: bool = True):
        self.evaluator = evaluator or Evaluator()
        self.prune = prune
        self.nodes = 0

    def search(self, board: Board, depth: int, player: Color, opponent: Color,
               alpha: float, beta: float, is_maximizing: bool) -> SearchOutcome:
        self.nodes += 1
        if depth == 0:
            return SearchOutcome(self.evaluator.evaluate(board, player, opponent), None)

        moves = get_all_valid_moves(board, player if is_maximizing else opponent)
        if not moves:
            return SearchOutcome(-LOSS_SCORE if is_maximizing else LOSS_SCORE, None)

        best_move = None
        if is_maximizing:
            best = -INF
            for move in moves:
                result = self.search(apply_move(board, move), depth - 1, player, opponent,
                                     alpha, beta, False)
                if result.score > best:
                    best, best_move = result.score, move
                alpha = max(alpha, best)
                if self.prune and beta <= alpha:
                    break
        else:
            best = INF
            for move in moves:
                result = self.search(apply_move(board, move), depth - 1, player, opponent,
                                     alpha, beta, True)
                if result.score < best:
                    best, best_move = result.score, move
                beta = min(beta, best)
                if self.prune and beta <= alpha:
                    break
        return SearchOutcome(best, best_move)

    def track(self, board: Board, depth: int, player: Color, opponent: Color,
              alpha: float, beta: float, is_maximizing: bool,
              move: Optional[Move] = None, ply: int = 0,
              root_moves: Optional[List[Move]] = None) -> Tuple[MinimaxNode, Optional[Move]]:
        """Same recursion as :meth:`search`, returning the finished subtree.

        Pruned siblings never get a node, so the tree holds exactly the
        positions that were visited. ``root_moves`` restricts the moves
        tried from this node only.
        """
        self.nodes += 1
        node = MinimaxNode(board=board, move=move, depth=ply, is_maximizing=is_maximizing,
                           player=player if is_maximizing else opponent)
        if depth == 0:
            node.score = self.evaluator.evaluate(board, player, opponent)
            return node, None

        moves = root_moves if root_moves is not None else get_all_valid_moves(board, node.player)
        if not moves:
            node.score = -LOSS_SCORE if is_maximizing else LOSS_SCORE
            return node, None

        best_move = None
        best = -INF if is_maximizing else INF
        for candidate in moves:
            child, _ = self.track(apply_move(board, candidate), depth - 1, player, opponent,
                                  alpha, beta, not is_maximizing, candidate, ply + 1)
            node.children.append(child)
            if is_maximizing:
                if child.score > best:
                    best, best_move = child.score, candidate
                alpha = max(alpha, best)
            else:
                if child.score < best:
                    best, best_move = child.score, candidate
                beta = min(beta, best)
            if self.prune and beta <= alpha:
                break

        node.score = best
        return node, best_move


def minimax(board: Board, depth: int, player: Color, opponent: Color,
            alpha: float = -INF, beta: float = INF, is_maximizing: bool = True, *,
            evaluator: Optional[Evaluator] = None, prune: bool = True) -> SearchOutcome:
    """Alpha-beta minimax; ``player`` maximizes, ``opponent`` minimizes.

    ``prune=False`` disables the cutoff and searches the full tree.
    """
    return _Minimax(evaluator, prune).search(board, depth, player, opponent, alpha, beta, is_maximizing)


def minimax_with_tracking(board: Board, depth: int, player: Color, opponent: Color, *,
                          evaluator: Optional[Evaluator] = None) -> TrackedOutcome:
    """Alpha-beta minimax from ``player``'s side that also returns the visited tree."""
    tree, move = _Minimax(evaluator).track(board, depth, player, opponent, -INF, INF, True)
    return TrackedOutcome(move, tree)


def count_nodes(node: MinimaxNode) -> int:
    return 1 + sum(count_nodes(child) for child in node.children)


def tree_depth(node: MinimaxNode) -> int:
    if not node.children:
        return 0
    return 1 + max(tree_depth(child) for child in node.children)


class SearchEngine:
    def __init__(self, evaluator: Optional[Evaluator] = None, depth: Optional[int] = None):
        self.evaluator = evaluator or Evaluator()
        self.max_depth = depth if depth is not None else CONFIG.search.depth
        self.use_alpha_beta = CONFIG.search.use_alpha_beta
        self.nodes = 0

    def search_best_move(self, board: Board, player: Color) -> Tuple[Optional[Move], float]:
        """Best move for ``player`` to play on ``board`` and its minimax score."""
        run = _Minimax(self.evaluator, prune=self.use_alpha_beta)
        start_time = time.time()
        score, move = run.search(board, self.max_depth, player, player.opponent, -INF, INF, True)
        self.nodes = run.nodes
        logger.debug(format_search_info(self.max_depth, score, self.nodes,
                                        time.time() - start_time, move, LOSS_SCORE))
        return move, score

    def trace_best_move(self, board: Board, player: Color,
                        moves: Optional[List[Move]] = None) -> TrackedOutcome:
        """Like :meth:`search_best_move` but keeps the alpha-beta tree.

        ``moves`` limits the root to those moves (e.g. a jump in progress).
        """
        run = _Minimax(self.evaluator)
        start_time = time.time()
        tree, move = run.track(board, self.max_depth, player, player.opponent, -INF, INF, True,
                               root_moves=moves)
        self.nodes = run.nodes
        logger.debug(format_search_info(self.max_depth, tree.score, self.nodes,
                                        time.time() - start_time, move, LOSS_SCORE))
        return TrackedOutcome(move, tree)
