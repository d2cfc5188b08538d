"""FastAPI REST interface for the search strategies and the draughts engine."""

import math
import threading
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from searchkit import __version__
from searchkit.config import CONFIG
from searchkit.core.board import Board, Color, Move, Square
from searchkit.core.frontier import ALGORITHMS, COST_BASED, search
from searchkit.core.graph import SearchResult, SearchStep, cost_from_mapping, heuristic_from_mapping
from searchkit.core.search import MinimaxNode, count_nodes
from searchkit.core.utils import configure_logging
from searchkit.game import DraughtsGame

configure_logging()

app = FastAPI(title=CONFIG.api.title, version=__version__)

# Shared game instance.
game = DraughtsGame()
_game_lock = threading.Lock()


class EdgeCost(BaseModel):
    source: str
    target: str
    cost: float


class GraphSearchRequest(BaseModel):
    algorithm: str
    graph: Dict[str, List[str]]
    start: str
    goal: str
    heuristic: Dict[str, float]
    costs: Optional[List[EdgeCost]] = None


class SquareModel(BaseModel):
    row: int = Field(ge=0, lt=8)
    col: int = Field(ge=0, lt=8)


class MoveRequest(BaseModel):
    start: SquareModel
    dest: SquareModel


class PositionRequest(BaseModel):
    board: List[List[int]]
    turn: str = "white"


class EngineRequest(BaseModel):
    depth: Optional[int] = None
    trace: bool = False


def _number(value: Optional[float]) -> Optional[float]:
    # JSON has no infinity
    if value is None or math.isinf(value) or math.isnan(value):
        return None
    return value


def _scores(scores: Optional[Dict[str, float]]) -> Optional[Dict[str, Optional[float]]]:
    if scores is None:
        return None
    return {node: _number(v) for node, v in scores.items()}


def step_to_dict(step: SearchStep) -> Dict[str, Any]:
    return {
        "step": step.step,
        "description": step.description,
        "u": step.u,
        "neighbors": list(step.neighbors) if step.neighbors is not None else None,
        "frontier": list(step.frontier),
        "g_score": _scores(step.g_score),
        "f_score": _scores(step.f_score),
        "best_cost": _number(step.best_cost),
    }


def result_to_dict(result: SearchResult) -> Dict[str, Any]:
    return {
        "success": result.success,
        "path": list(result.path),
        "steps": [step_to_dict(s) for s in result.steps],
    }


def move_to_dict(move: Optional[Move]) -> Optional[Dict[str, Any]]:
    if move is None:
        return None
    return {
        "start": {"row": move.start.row, "col": move.start.col},
        "dest": {"row": move.dest.row, "col": move.dest.col},
    }


def node_to_dict(node: MinimaxNode) -> Dict[str, Any]:
    return {
        "board": node.board.to_rows(),
        "move": move_to_dict(node.move),
        "score": _number(node.score),
        "depth": node.depth,
        "is_maximizing": node.is_maximizing,
        "player": node.player.value,
        "children": [node_to_dict(c) for c in node.children],
    }


def _game_state() -> Dict[str, Any]:
    return {
        "board": game.board.to_rows(),
        "turn": game.turn.value,
        "pending": {"row": game.pending.row, "col": game.pending.col} if game.pending else None,
        "legal_moves": [move_to_dict(m) for m in game.legal_moves()],
        "status": game.status,
        "history": [dict(move_to_dict(r.move), player=r.player.value) for r in game.history],
    }


@app.get("/algorithms")
def list_algorithms():
    return {"algorithms": list(ALGORITHMS), "cost_based": sorted(COST_BASED)}


@app.post("/search")
def run_search(req: GraphSearchRequest):
    if req.algorithm not in ALGORITHMS:
        raise HTTPException(status_code=400, detail=f"Unknown algorithm: {req.algorithm}")
    if req.algorithm in COST_BASED and not req.costs:
        raise HTTPException(status_code=400, detail=f"{req.algorithm} requires a cost function")

    heuristic_fn = heuristic_from_mapping(req.heuristic, default=CONFIG.api.default_heuristic)
    cost_fn = None
    if req.costs:
        cost_fn = cost_from_mapping({(e.source, e.target): e.cost for e in req.costs},
                                    default=CONFIG.api.default_edge_cost)
    result = search(req.algorithm, req.graph, req.start, req.goal, heuristic_fn, cost_fn)
    return result_to_dict(result)


@app.get("/board")
def get_board():
    with _game_lock:
        return _game_state()


@app.post("/position")
def set_position(req: PositionRequest):
    try:
        board = Board.from_rows(req.board)
        turn = Color(req.turn)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid position: {e}")
    with _game_lock:
        game.set_position(board, turn)
        return _game_state()


@app.post("/move")
def make_move(req: MoveRequest):
    move = Move(Square(req.start.row, req.start.col), Square(req.dest.row, req.dest.col))
    with _game_lock:
        if not game.play(move):
            raise HTTPException(status_code=400, detail=f"Illegal move: {move}")
        return _game_state()


@app.post("/search-move")
def search_move(req: EngineRequest = EngineRequest()):
    depth = CONFIG.search.depth if req.depth is None else req.depth
    if not 1 <= depth <= CONFIG.search.max_depth:
        raise HTTPException(status_code=400, detail=f"Depth must be between 1 and {CONFIG.search.max_depth}")
    with _game_lock:
        if game.is_game_over():
            raise HTTPException(status_code=400, detail="Game is already over")
        if req.trace:
            move, tree = game.trace(depth)
            return {
                "best_move": move_to_dict(move),
                "score": _number(tree.score),
                "nodes": count_nodes(tree),
                "tree": node_to_dict(tree),
            }
        move, score = game.best_move(depth)
        return {"best_move": move_to_dict(move), "score": _number(score), "nodes": game.engine.nodes}


@app.post("/reset")
def reset_board():
    with _game_lock:
        game.reset()
        return _game_state()
