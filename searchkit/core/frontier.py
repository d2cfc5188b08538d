"""Frontier-based graph search: Best-First, Hill Climbing, A* and Branch and Bound.

All four strategies keep the frontier ``L`` as a plain list that is stably
resorted after every expansion, and record a :class:`SearchStep` for each
transition so a caller can replay the run. Dequeuing always takes the front.

Step layout of a run:

- step 0 initialises ``L = {start}``;
- each dequeued node gets a ``u = X`` step, and an expanded node a second
  step once its neighbors are merged and the frontier is resorted;
- one terminal step reports the goal or the exhausted frontier.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Dict, List, Optional, Sequence

from searchkit.core.graph import (
    CostFn,
    Graph,
    HeuristicFn,
    SearchResult,
    SearchStep,
    format_cost,
    neighbors_of,
    reconstruct_path,
)

logger = logging.getLogger(__name__)


class _Trace:
    """Append-only step log; every emitted step copies the live structures."""

    def __init__(self):
        self.steps: List[SearchStep] = []

    def emit(self, description: str, u: Optional[str], neighbors: Optional[Sequence[str]],
             frontier: Sequence[str], g_score: Optional[Dict[str, float]] = None,
             f_score: Optional[Dict[str, float]] = None,
             best_cost: Optional[float] = None) -> None:
        self.steps.append(SearchStep(
            step=len(self.steps),
            description=description,
            u=u,
            neighbors=tuple(neighbors) if neighbors is not None else None,
            frontier=tuple(frontier),
            g_score=dict(g_score) if g_score is not None else None,
            f_score=dict(f_score) if f_score is not None else None,
            best_cost=best_cost,
        ))

    def result(self, success: bool, path=()) -> SearchResult:
        return SearchResult(success=success, path=tuple(path), steps=tuple(self.steps))


def _neighbor_summary(u: str, neighbors: Sequence[str]) -> str:
    return f"Neighbors of {u}: {', '.join(neighbors)}."


def best_first_search(graph: Graph, start: str, goal: str, heuristic_fn: HeuristicFn) -> SearchResult:
    """Greedy best-first search ordering the whole frontier by ``heuristic_fn``."""
    frontier = [start]
    trace = _Trace()
    trace.emit(f"Initialization: L = {{{start}}}", None, None, frontier)
    came_from: Dict[str, Optional[str]] = {start: None}

    while frontier:
        u = frontier.pop(0)
        if u == goal:
            trace.emit(f"u = {u} is GOAL. Search succeeds.", u, None, frontier)
            return trace.result(True, reconstruct_path(came_from, u))

        neighbors = neighbors_of(graph, u)
        trace.emit(f"u = {u}", u, None, frontier)

        for v in neighbors:
            if v not in came_from:
                came_from[v] = u
                frontier.append(v)
        frontier.sort(key=heuristic_fn)
        trace.emit(f"{_neighbor_summary(u, neighbors)} Sort L by heuristic.", u, neighbors, frontier)

    trace.emit("L is empty. Search fails.", None, None, [])
    return trace.result(False)


def hill_climbing(graph: Graph, start: str, goal: str, heuristic_fn: HeuristicFn) -> SearchResult:
    """Best-first variant that explores the children of the current node first.

    Unseen neighbors are sorted by heuristic in their own list ``L1`` which is
    put in front of the remaining frontier.
    """
    frontier = [start]
    trace = _Trace()
    trace.emit(f"Initialization: L = {{{start}}}", None, None, frontier)
    came_from: Dict[str, Optional[str]] = {start: None}

    while frontier:
        u = frontier.pop(0)
        if u == goal:
            trace.emit(f"u = {u} is GOAL. Search succeeds.", u, None, frontier)
            return trace.result(True, reconstruct_path(came_from, u))

        neighbors = neighbors_of(graph, u)
        trace.emit(f"u = {u}", u, None, frontier)

        children = []
        for v in neighbors:
            if v not in came_from:
                came_from[v] = u
                children.append(v)
        children.sort(key=heuristic_fn)
        frontier = children + frontier
        trace.emit(
            f"{_neighbor_summary(u, neighbors)} Sort L1 by heuristic and insert at beginning of L.",
            u, neighbors, frontier,
        )

    trace.emit("L is empty. Search fails.", None, None, [])
    return trace.result(False)


def a_star(graph: Graph, start: str, goal: str, heuristic_fn: HeuristicFn, cost_fn: CostFn) -> SearchResult:
    """A* over a list frontier resorted by ``f = g + h`` after each expansion."""
    frontier = [start]
    g_score: Dict[str, float] = {start: 0}
    f_score: Dict[str, float] = {start: heuristic_fn(start)}
    came_from: Dict[str, Optional[str]] = {start: None}
    trace = _Trace()
    trace.emit(f"Initialization: L = {{{start}}}", None, None, frontier, g_score, f_score)

    while frontier:
        u = frontier.pop(0)
        if u == goal:
            trace.emit(f"u = {u} is GOAL. Search succeeds.", u, None, frontier, g_score, f_score)
            return trace.result(True, reconstruct_path(came_from, u))

        neighbors = neighbors_of(graph, u)
        trace.emit(f"u = {u}", u, None, frontier, g_score, f_score)

        for v in neighbors:
            tentative = g_score[u] + cost_fn(u, v)
            if v not in g_score or tentative < g_score[v]:
                came_from[v] = u
                g_score[v] = tentative
                f_score[v] = tentative + heuristic_fn(v)
                if v not in frontier:
                    frontier.append(v)
        frontier.sort(key=f_score.__getitem__)
        trace.emit(
            f"{_neighbor_summary(u, neighbors)} Update g and f values. Sort L by f values.",
            u, neighbors, frontier, g_score, f_score,
        )

    trace.emit("L is empty. Search fails.", None, None, [], g_score, f_score)
    return trace.result(False)


def branch_and_bound(graph: Graph, start: str, goal: str, heuristic_fn: HeuristicFn,
                     cost_fn: CostFn) -> SearchResult:
    """Depth-first branch and bound keeping the cheapest goal path seen so far.

    Reaching the goal only tightens ``cost``; the search carries on until the
    frontier is empty, skipping any node whose ``f`` already exceeds it.
    """
    frontier = [start]
    cost = math.inf
    best_path: tuple = ()
    g_score: Dict[str, float] = {start: 0}
    f_score: Dict[str, float] = {start: heuristic_fn(start)}
    came_from: Dict[str, Optional[str]] = {start: None}
    trace = _Trace()
    trace.emit(f"Initialization: L = {{{start}}}; cost = {format_cost(cost)}", None, None,
               frontier, g_score, f_score, cost)

    while frontier:
        u = frontier.pop(0)
        trace.emit(f"u = {u}", u, None, frontier, g_score, f_score, cost)

        if u == goal:
            g = g_score[u]
            if g <= cost:
                previous = cost
                cost = g
                best_path = reconstruct_path(came_from, u)
                trace.emit(
                    f"u = {u} is GOAL. g(u) = {format_cost(g)} <= cost = {format_cost(previous)}. "
                    f"Update cost = {format_cost(g)}.",
                    u, None, frontier, g_score, f_score, cost,
                )
            else:
                trace.emit(
                    f"u = {u} is GOAL. g(u) = {format_cost(g)} > cost = {format_cost(cost)}. No update.",
                    u, None, frontier, g_score, f_score, cost,
                )
            continue

        if f_score[u] > cost:
            trace.emit(
                f"f({u}) = {format_cost(f_score[u])} > cost = {format_cost(cost)}. Skip this node.",
                u, None, frontier, g_score, f_score, cost,
            )
            continue

        neighbors = neighbors_of(graph, u)
        children = []
        for v in neighbors:
            tentative = g_score[u] + cost_fn(u, v)
            if v not in g_score or tentative < g_score[v]:
                came_from[v] = u
                g_score[v] = tentative
                f_score[v] = tentative + heuristic_fn(v)
                children.append(v)
        children.sort(key=f_score.__getitem__)
        frontier = children + frontier
        trace.emit(
            f"{_neighbor_summary(u, neighbors)} Update g and f values. "
            "Sort L1 by f values and insert at beginning of L.",
            u, neighbors, frontier, g_score, f_score, cost,
        )

    if best_path:
        trace.emit(f"L is empty. Best path cost = {format_cost(cost)}.", None, None, [],
                   g_score, f_score, cost)
    else:
        trace.emit("L is empty. Search fails.", None, None, [], g_score, f_score, cost)
    return trace.result(bool(best_path), best_path)


ALGORITHMS: Dict[str, Callable[..., SearchResult]] = {
    "best-first": best_first_search,
    "hill-climbing": hill_climbing,
    "a-star": a_star,
    "branch-and-bound": branch_and_bound,
}

COST_BASED = frozenset({"a-star", "branch-and-bound"})


def search(algorithm: str, graph: Graph, start: str, goal: str, heuristic_fn: HeuristicFn,
           cost_fn: Optional[CostFn] = None) -> SearchResult:
    """Run one of :data:`ALGORITHMS` by name."""
    try:
        fn = ALGORITHMS[algorithm]
    except KeyError:
        raise ValueError(f"Unknown algorithm: {algorithm!r}") from None

    if algorithm in COST_BASED:
        if cost_fn is None:
            raise ValueError(f"{algorithm} requires a cost function")
        result = fn(graph, start, goal, heuristic_fn, cost_fn)
    else:
        result = fn(graph, start, goal, heuristic_fn)

    logger.debug("%s %s->%s success=%s path=%s steps=%d", algorithm, start, goal,
                 result.success, "-".join(result.path), len(result.steps))
    return result
