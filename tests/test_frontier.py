"""
Test suite for the frontier graph-search strategies.

Covers:
- Trace protocol (step numbering, snapshots, terminal steps)
- Best-First and Hill Climbing ordering
- A* optimality against Dijkstra
- Branch and Bound goal revisits and bound cuts
- Failure cases and determinism
- Dispatcher, graph helpers and config loading
"""

import heapq
import math
import random

import pytest

from searchkit.config import Config
from searchkit.core.frontier import (
    ALGORITHMS,
    a_star,
    best_first_search,
    branch_and_bound,
    hill_climbing,
    search,
)
from searchkit.core.graph import (
    cost_from_mapping,
    format_cost,
    heuristic_from_mapping,
    is_valid_path,
    path_cost,
    reconstruct_path,
)

DIAMOND = {"A": ["B", "C"], "B": ["D"], "C": ["D"], "D": []}
DIAMOND_H = {"A": 2, "B": 1, "C": 1, "D": 0}.__getitem__


def unit_cost(u, v):
    return 1


def run(name, graph, start, goal, h, cost=unit_cost):
    return search(name, graph, start, goal, h, cost)


def dijkstra(graph, start, goal, cost_fn):
    dist = {start: 0}
    queue = [(0, start)]
    while queue:
        d, u = heapq.heappop(queue)
        if u == goal:
            return d
        if d > dist[u]:
            continue
        for v in graph.get(u, []):
            nd = d + cost_fn(u, v)
            if v not in dist or nd < dist[v]:
                dist[v] = nd
                heapq.heappush(queue, (nd, v))
    return None


def distances_to(graph, goal, cost_fn):
    """Exact remaining cost for every node that can reach ``goal``."""
    reverse = {}
    for u, vs in graph.items():
        for v in vs:
            reverse.setdefault(v, []).append(u)
    dist = {goal: 0}
    queue = [(0, goal)]
    while queue:
        d, v = heapq.heappop(queue)
        if d > dist[v]:
            continue
        for u in reverse.get(v, []):
            nd = d + cost_fn(u, v)
            if u not in dist or nd < dist[u]:
                dist[u] = nd
                heapq.heappush(queue, (nd, u))
    return dist


def random_graph(seed, n=9, p=0.3):
    rng = random.Random(seed)
    nodes = [f"N{i}" for i in range(n)]
    graph = {u: [v for v in nodes if v != u and rng.random() < p] for u in nodes}
    costs = {(u, v): rng.randint(1, 9) for u in graph for v in graph[u]}
    return graph, cost_from_mapping(costs)


# ════════════════════════════════════════════════════════════════════════════
#  TRACE PROTOCOL
# ════════════════════════════════════════════════════════════════════════════

class TestTraceProtocol:
    @pytest.mark.parametrize("name", list(ALGORITHMS))
    def test_steps_numbered_consecutively(self, name):
        result = run(name, DIAMOND, "A", "D", DIAMOND_H)
        assert [s.step for s in result.steps] == list(range(len(result.steps)))

    @pytest.mark.parametrize("name", list(ALGORITHMS))
    def test_first_step_is_initialization(self, name):
        first = run(name, DIAMOND, "A", "D", DIAMOND_H).steps[0]
        assert first.description.startswith("Initialization: L = {A}")
        assert first.u is None
        assert first.neighbors is None
        assert first.frontier == ("A",)

    def test_a_star_trace(self):
        result = a_star(DIAMOND, "A", "D", DIAMOND_H, unit_cost)
        assert [s.u for s in result.steps] == [None, "A", "A", "B", "B", "C", "C", "D"]
        assert result.steps[2].frontier == ("B", "C")
        assert result.steps[2].neighbors == ("B", "C")
        assert result.steps[4].frontier == ("C", "D")
        assert result.steps[-1].description == "u = D is GOAL. Search succeeds."

    def test_snapshots_are_copies(self):
        result = a_star(DIAMOND, "A", "D", DIAMOND_H, unit_cost)
        assert result.steps[0].g_score == {"A": 0}
        assert result.steps[0].f_score == {"A": 2}
        assert result.steps[2].g_score == {"A": 0, "B": 1, "C": 1}
        assert result.steps[-1].g_score == {"A": 0, "B": 1, "C": 1, "D": 2}

    def test_heuristic_only_strategies_carry_no_scores(self):
        for step in best_first_search(DIAMOND, "A", "D", DIAMOND_H).steps:
            assert step.g_score is None
            assert step.f_score is None
            assert step.best_cost is None

    def test_neighbor_step_description(self):
        result = best_first_search(DIAMOND, "A", "D", DIAMOND_H)
        assert result.steps[2].description == "Neighbors of A: B, C. Sort L by heuristic."

    @pytest.mark.parametrize("name", list(ALGORITHMS))
    def test_identical_runs_are_equal(self, name):
        first = run(name, DIAMOND, "A", "D", DIAMOND_H)
        second = run(name, DIAMOND, "A", "D", DIAMOND_H)
        assert first == second


# ════════════════════════════════════════════════════════════════════════════
#  BEST-FIRST / HILL CLIMBING
# ════════════════════════════════════════════════════════════════════════════

class TestBestFirst:
    def test_diamond(self):
        result = best_first_search(DIAMOND, "A", "D", DIAMOND_H)
        assert result.success
        assert result.path == ("A", "B", "D")
        assert len(result.steps) == 6
        # D (h=0) jumps ahead of C after resorting
        assert result.steps[4].frontier == ("D", "C")

    def test_ties_keep_insertion_order(self):
        graph = {"S": ["X", "Y", "Z"]}
        h = {"S": 5, "X": 1, "Y": 1, "Z": 1}.__getitem__
        result = best_first_search(graph, "S", "Q", h)
        assert result.steps[2].frontier == ("X", "Y", "Z")

    def test_start_is_goal(self):
        result = best_first_search(DIAMOND, "A", "A", DIAMOND_H)
        assert result.success
        assert result.path == ("A",)
        assert len(result.steps) == 2

    def test_self_loop_not_requeued(self):
        graph = {"A": ["A", "B"], "B": []}
        h = {"A": 1, "B": 0}.__getitem__
        result = best_first_search(graph, "A", "B", h)
        assert result.path == ("A", "B")
        assert result.steps[2].frontier == ("B",)


class TestHillClimbing:
    GRAPH = {"S": ["A", "B"], "A": ["C"], "B": ["G"], "C": []}
    H = {"S": 5, "A": 1, "B": 2, "C": 9, "G": 0}.__getitem__

    def test_children_explored_first(self):
        result = hill_climbing(self.GRAPH, "S", "G", self.H)
        expanded = [s.u for s in result.steps if s.description.startswith("u = ")]
        assert expanded == ["S", "A", "C", "B", "G"]
        assert result.path == ("S", "B", "G")

    def test_differs_from_best_first(self):
        hc = hill_climbing(self.GRAPH, "S", "G", self.H)
        bf = best_first_search(self.GRAPH, "S", "G", self.H)
        bf_expanded = [s.u for s in bf.steps if s.description.startswith("u = ")]
        assert bf_expanded == ["S", "A", "B", "G"]
        assert hc.path == bf.path
        assert len(hc.steps) > len(bf.steps)

    def test_prepend_description(self):
        result = hill_climbing(self.GRAPH, "S", "G", self.H)
        assert result.steps[4].frontier == ("C", "B")
        assert "insert at beginning of L" in result.steps[4].description


# ════════════════════════════════════════════════════════════════════════════
#  A*
# ════════════════════════════════════════════════════════════════════════════

class TestAStar:
    def test_diamond_prefers_first_listed(self):
        result = a_star(DIAMOND, "A", "D", DIAMOND_H, unit_cost)
        assert result.success
        assert result.path == ("A", "B", "D")
        assert path_cost(result.path, unit_cost) == 2

    def test_relaxes_cheaper_path_already_in_frontier(self):
        graph = {"S": ["A", "B"], "A": ["G"], "B": ["C"], "C": ["G"]}
        cost = cost_from_mapping({("S", "A"): 1, ("A", "G"): 10, ("S", "B"): 2,
                                  ("B", "C"): 2, ("C", "G"): 2})
        result = a_star(graph, "S", "G", lambda n: 0, cost)
        assert result.path == ("S", "B", "C", "G")
        assert result.steps[-1].g_score["G"] == 6

    @pytest.mark.parametrize("seed", range(25))
    def test_optimal_with_admissible_heuristic(self, seed):
        graph, cost = random_graph(seed)
        expected = dijkstra(graph, "N0", "N8", cost)
        exact = distances_to(graph, "N8", cost)
        h = lambda n: exact.get(n, 0) // 2
        result = a_star(graph, "N0", "N8", h, cost)
        if expected is None:
            assert not result.success
            assert result.path == ()
        else:
            assert result.success
            assert is_valid_path(graph, result.path)
            assert result.path[0] == "N0" and result.path[-1] == "N8"
            assert path_cost(result.path, cost) == expected


# ════════════════════════════════════════════════════════════════════════════
#  BRANCH AND BOUND
# ════════════════════════════════════════════════════════════════════════════

class TestBranchAndBound:
    def test_diamond_trace(self):
        result = branch_and_bound(DIAMOND, "A", "D", DIAMOND_H, unit_cost)
        assert result.success
        assert result.path == ("A", "B", "D")
        assert len(result.steps) == 10
        assert result.steps[0].best_cost == math.inf
        assert result.steps[0].description == "Initialization: L = {A}; cost = ∞"
        assert result.steps[6].description == "u = D is GOAL. g(u) = 2 <= cost = ∞. Update cost = 2."
        assert result.steps[6].best_cost == 2
        assert result.steps[-1].description == "L is empty. Best path cost = 2."

    def test_goal_revisited_with_better_cost(self):
        graph = {"S": ["A", "B"], "A": ["G"], "B": ["C"], "C": ["G"]}
        cost = cost_from_mapping({("S", "A"): 1, ("A", "G"): 10, ("S", "B"): 2,
                                  ("B", "C"): 2, ("C", "G"): 2})
        result = branch_and_bound(graph, "S", "G", lambda n: 0, cost)
        goal_steps = [s for s in result.steps if "is GOAL" in s.description]
        assert len(goal_steps) == 2
        assert goal_steps[0].best_cost == 11
        assert goal_steps[1].best_cost == 6
        assert result.path == ("S", "B", "C", "G")

    def test_duplicate_goal_entries_rechecked(self):
        # The cheaper route through X queues G a second time ahead of the stale entry.
        graph = {"S": ["A"], "A": ["X", "G"], "X": ["G"]}
        cost = cost_from_mapping({("S", "A"): 1, ("A", "X"): 1, ("A", "G"): 10, ("X", "G"): 1})
        result = branch_and_bound(graph, "S", "G", lambda n: 0, cost)
        goal_steps = [s for s in result.steps if "is GOAL" in s.description]
        assert len(goal_steps) == 2
        assert [s.best_cost for s in goal_steps] == [3, 3]
        assert result.path == ("S", "A", "X", "G")

    def test_bound_cut(self):
        graph = {"S": ["G", "X"], "X": ["G"]}
        cost = cost_from_mapping({("S", "G"): 1, ("S", "X"): 1, ("X", "G"): 5})
        h = {"S": 0, "G": 0, "X": 3}.__getitem__
        result = branch_and_bound(graph, "S", "G", h, cost)
        skipped = [s for s in result.steps if "Skip this node" in s.description]
        assert len(skipped) == 1
        assert skipped[0].description == "f(X) = 4 > cost = 1. Skip this node."
        assert result.path == ("S", "G")

    @pytest.mark.parametrize("seed", range(25))
    def test_cost_matches_a_star(self, seed):
        graph, cost = random_graph(seed)
        exact = distances_to(graph, "N8", cost)
        h = lambda n: exact.get(n, 0)
        bb = branch_and_bound(graph, "N0", "N8", h, cost)
        astar = a_star(graph, "N0", "N8", h, cost)
        assert bb.success == astar.success
        if bb.success:
            assert is_valid_path(graph, bb.path)
            assert path_cost(bb.path, cost) == path_cost(astar.path, cost)


# ════════════════════════════════════════════════════════════════════════════
#  FAILURE AND EDGE CASES
# ════════════════════════════════════════════════════════════════════════════

class TestFailures:
    @pytest.mark.parametrize("name", list(ALGORITHMS))
    def test_unreachable_goal(self, name):
        h = lambda n: 0
        result = run(name, {"A": ["B"]}, "A", "Z", h)
        assert result.success is False
        assert result.path == ()
        assert result.steps[-1].frontier == ()

    @pytest.mark.parametrize("name", list(ALGORITHMS))
    def test_start_missing_from_graph(self, name):
        result = run(name, {}, "X", "Y", lambda n: 0)
        assert not result.success
        assert result.steps[1].u == "X"
        assert result.steps[-1].description.startswith("L is empty")

    def test_failure_description(self):
        result = best_first_search({"A": ["B"]}, "A", "Z", lambda n: 0)
        assert result.steps[-1].description == "L is empty. Search fails."

    def test_heuristic_errors_propagate(self):
        with pytest.raises(KeyError):
            best_first_search(DIAMOND, "A", "D", {"A": 1}.__getitem__)


# ════════════════════════════════════════════════════════════════════════════
#  DISPATCHER, HELPERS, CONFIG
# ════════════════════════════════════════════════════════════════════════════

class TestHelpers:
    def test_unknown_algorithm(self):
        with pytest.raises(ValueError):
            search("dfs", DIAMOND, "A", "D", DIAMOND_H)

    @pytest.mark.parametrize("name", ["a-star", "branch-and-bound"])
    def test_cost_required(self, name):
        with pytest.raises(ValueError):
            search(name, DIAMOND, "A", "D", DIAMOND_H)

    def test_heuristic_from_mapping_defaults_to_infinity(self):
        h = heuristic_from_mapping({"A": 3})
        assert h("A") == 3
        assert h("B") == math.inf

    def test_cost_from_mapping_defaults_to_one(self):
        k = cost_from_mapping({("A", "B"): 4})
        assert k("A", "B") == 4
        assert k("B", "A") == 1

    def test_reconstruct_path(self):
        assert reconstruct_path({"A": None, "B": "A", "C": "B"}, "C") == ("A", "B", "C")

    def test_is_valid_path(self):
        assert is_valid_path(DIAMOND, ["A", "C", "D"])
        assert not is_valid_path(DIAMOND, ["A", "D"])
        assert not is_valid_path(DIAMOND, [])

    def test_format_cost(self):
        assert format_cost(math.inf) == "∞"
        assert format_cost(2.0) == "2"
        assert format_cost(2.5) == "2.5"
        assert format_cost(3) == "3"


class TestConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        cfg = Config.load_from_toml(str(tmp_path / "absent.toml"))
        assert cfg.search.depth == 4
        assert cfg.eval.man_value == 10
        assert cfg.eval.mobility_weight == 0.5

    def test_toml_overrides(self, tmp_path):
        path = tmp_path / "searchkit.toml"
        path.write_text('log_level = "DEBUG"\n[search]\ndepth = 2\nbogus = 1\n[game]\ndraw_move_limit = 40\n')
        cfg = Config.load_from_toml(str(path))
        assert cfg.search.depth == 2
        assert cfg.game.draw_move_limit == 40
        assert cfg.log_level == "DEBUG"
        assert not hasattr(cfg.search, "bogus")
