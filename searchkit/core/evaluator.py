"""Static evaluation of draughts positions from one player's point of view."""

from typing import Optional

from searchkit.config import CONFIG, EvalConfig
from searchkit.core.board import SIZE, Board, Color, get_all_valid_moves


class Evaluator:
    def __init__(self, cfg: Optional[EvalConfig] = None):
        self.cfg = cfg or CONFIG.eval

    def evaluate(self, board: Board, player: Color, opponent: Color) -> float:
        """Score ``board`` for ``player``; positive favors ``player``."""
        cfg = self.cfg
        score = 0

        for sq, piece in board.squares():
            color = piece.color
            if color is None:
                continue

            # Material.
            value = cfg.king_value if piece.is_king else cfg.man_value
            if color is player:
                score += value
            elif color is opponent:
                score -= value

            if color is not player:
                continue

            # Positional bonus, own pieces only.
            if cfg.use_positional:
                score += cfg.position_table[sq.row][sq.col]

            # Kings on the rim are hard to trap in the endgame.
            if piece.is_king and (sq.row in (0, SIZE - 1) or sq.col in (0, SIZE - 1)):
                score += cfg.king_edge_bonus

        # Mobility.
        player_moves = len(get_all_valid_moves(board, player))
        opponent_moves = len(get_all_valid_moves(board, opponent))
        score += (player_moves - opponent_moves) * cfg.mobility_weight

        return score


def evaluate_board(board: Board, player: Color, opponent: Color) -> float:
    """Evaluate with the default weights (10/15 material, 2 edge-king, 0.5 mobility)."""
    return Evaluator(EvalConfig()).evaluate(board, player, opponent)
