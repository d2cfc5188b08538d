"""Graph model and trace types shared by the frontier search strategies.

A graph is a plain mapping from node id to its ordered neighbor ids. Nodes that
only appear as neighbors have no outgoing edges. Heuristic and cost functions
are ordinary callables; the helpers below build them from lookup tables.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional, Sequence, Tuple

Graph = Mapping[str, Sequence[str]]
HeuristicFn = Callable[[str], float]
CostFn = Callable[[str, str], float]


@dataclass(frozen=True)
class SearchStep:
    """One snapshot of a search run, taken right after a state transition."""
    step: int
    description: str
    u: Optional[str]
    neighbors: Optional[Tuple[str, ...]]
    frontier: Tuple[str, ...]
    g_score: Optional[Dict[str, float]] = None
    f_score: Optional[Dict[str, float]] = None
    best_cost: Optional[float] = None


@dataclass(frozen=True)
class SearchResult:
    success: bool
    path: Tuple[str, ...]
    steps: Tuple[SearchStep, ...]


def neighbors_of(graph: Graph, node: str) -> Tuple[str, ...]:
    """Outgoing neighbors of ``node``; unknown nodes have none."""
    return tuple(graph.get(node, ()))


def reconstruct_path(came_from: Mapping[str, Optional[str]], node: str) -> Tuple[str, ...]:
    """Walk parent pointers back from ``node`` to the start."""
    path = []
    current: Optional[str] = node
    while current is not None:
        path.append(current)
        current = came_from[current]
    path.reverse()
    return tuple(path)


def path_cost(path: Sequence[str], cost_fn: CostFn) -> float:
    return sum(cost_fn(u, v) for u, v in zip(path, path[1:]))


def is_valid_path(graph: Graph, path: Sequence[str]) -> bool:
    """True when every consecutive pair of ``path`` is an edge of ``graph``."""
    if not path:
        return False
    return all(v in graph.get(u, ()) for u, v in zip(path, path[1:]))


def heuristic_from_mapping(values: Mapping[str, float], default: float = math.inf) -> HeuristicFn:
    table = dict(values)

    def heuristic(node: str) -> float:
        return table.get(node, default)

    return heuristic


def cost_from_mapping(values: Mapping[Tuple[str, str], float], default: float = 1) -> CostFn:
    table = dict(values)

    def cost(u: str, v: str) -> float:
        return table.get((u, v), default)

    return cost


def format_cost(value: float) -> str:
    if value == math.inf:
        return "∞"
    return f"{value:g}" if isinstance(value, float) else str(value)
