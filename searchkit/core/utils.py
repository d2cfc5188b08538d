import logging
from typing import Optional

from searchkit.config import CONFIG


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or CONFIG.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def format_search_info(depth, score, nodes, elapsed, best_move, loss_score) -> str:
    nps = int(nodes / elapsed) if elapsed > 0 else 0
    move_str = str(best_move) if best_move else "-"

    if score is not None and abs(score) >= loss_score:
        score_str = "win" if score > 0 else "loss"
    else:
        score_str = f"{score}"

    return f"info depth {depth} score {score_str} nodes {nodes} nps {nps} time {elapsed * 1000:.0f}ms bestmove {move_str}"
