"""Core search components: graph strategies, draughts board, evaluator, and minimax."""

from .board import Board, Color, Move, Piece, Square, get_all_valid_moves, make_move
from .evaluator import Evaluator, evaluate_board
from .frontier import a_star, best_first_search, branch_and_bound, hill_climbing, search
from .graph import SearchResult, SearchStep
from .search import MinimaxNode, SearchEngine, minimax, minimax_with_tracking
