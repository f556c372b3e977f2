import math
import random

import networkx as nx
import pytest

from conftest import build_store
from graph_lab.algorithms import (
    Algorithm,
    AlgoStep,
    ValidationError,
    run_algorithm,
)
from graph_lab.graph import GraphStore


def random_store(seed, n=12, p=0.25):
    rng = random.Random(seed)
    store = GraphStore()
    for _ in range(n):
        store.add_node(rng.uniform(0, 500), rng.uniform(0, 500))
    ids = list(store.nodes)
    for i in ids:
        for j in ids:
            if i < j and rng.random() < p:
                store.add_edge(i, j, rng.uniform(1, 20))
    return store


def is_valid_path(store, path, start, end):
    if not path or path[0] != start or path[-1] != end:
        return False
    return all(store.find_edge(a, b) is not None for a, b in zip(path, path[1:]))


def test_bfs_scenario(triangle_store):
    result = run_algorithm(triangle_store, Algorithm.BFS, 1, 3)
    assert result.path == [1, 2, 3]
    assert result.total_cost == pytest.approx(20.0)
    assert result.path_string == "1 → 2 → 3"
    # initial state plus one step per dequeue (1, 2, 3)
    assert len(result.steps) == 4
    assert result.steps[0] == AlgoStep(visited=(1,), path=(), frontier=(1,), current=None)
    assert result.steps[1] == AlgoStep(visited=(1, 2), path=(1,), frontier=(2,), current=1)
    assert result.steps[-1].current == 3


def test_tsp_scenario(triangle_store):
    result = run_algorithm(triangle_store, "tsp", 1)
    assert result.path == [1, 2, 3, 1]
    # 1->2 and 2->3 are 10 apart, 3->1 closes the tour over the diagonal
    assert result.total_cost == pytest.approx(10 + 10 + 10 * math.sqrt(2))
    assert result.total_cost == pytest.approx(34.14, abs=0.01)
    # initial state, two hops, closing hop
    assert len(result.steps) == 4
    assert all(s.frontier is None for s in result.steps)
    assert result.steps[0].path == (1,)
    assert result.steps[-1].path == (1, 2, 3, 1)


def test_tsp_ignores_edges_and_end():
    store = build_store({1: (0, 0), 2: (100, 0), 3: (5, 0)}, [(1, 2, 1.0)], start=1, end=2)
    result = run_algorithm(store, Algorithm.TSP, 1, 2)
    assert result.path == [1, 3, 2, 1]
    assert result.total_cost == pytest.approx(5 + 95 + 100)


@pytest.mark.parametrize("seed", range(8))
def test_tsp_tour_visits_every_node_once(seed):
    store = random_store(seed, p=0.0)
    start = list(store.nodes)[seed % len(store)]
    result = run_algorithm(store, Algorithm.TSP, start)
    tour = result.path
    assert tour[0] == tour[-1] == start
    assert sorted(tour[:-1]) == sorted(store.nodes)

    expected = sum(
        math.hypot(store.nodes[a].x - store.nodes[b].x, store.nodes[a].y - store.nodes[b].y)
        for a, b in zip(tour, tour[1:])
    )
    assert abs(result.total_cost - expected) < 1e-6


@pytest.mark.parametrize("seed", range(10))
def test_bfs_path_has_fewest_hops(seed):
    store = random_store(seed)
    g = store.to_networkx()
    ids = list(store.nodes)
    for end in ids[1:]:
        result = run_algorithm(store, Algorithm.BFS, ids[0], end)
        if nx.has_path(g, ids[0], end):
            assert is_valid_path(store, result.path, ids[0], end)
            assert len(result.path) - 1 == nx.shortest_path_length(g, ids[0], end)
        else:
            assert result.path == []
            assert result.total_cost == 0


@pytest.mark.parametrize("seed", range(10))
def test_dfs_finds_a_valid_path_deterministically(seed):
    store = random_store(seed)
    g = store.to_networkx()
    ids = list(store.nodes)
    for end in ids[1:]:
        first = run_algorithm(store, Algorithm.DFS, ids[0], end)
        again = run_algorithm(store, Algorithm.DFS, ids[0], end)
        assert first.path == again.path
        assert first.steps == again.steps
        if nx.has_path(g, ids[0], end):
            assert is_valid_path(store, first.path, ids[0], end)
            expected_cost = sum(store.find_edge(a, b).weight for a, b in zip(first.path, first.path[1:]))
            assert first.total_cost == pytest.approx(expected_cost)
        else:
            assert first.path == []


def test_no_path_is_not_an_error():
    store = build_store({1: (0, 0), 2: (10, 0), 3: (50, 50)}, [(1, 2, 1.0)])
    for algorithm in (Algorithm.BFS, Algorithm.DFS):
        result = run_algorithm(store, algorithm, 1, 3)
        assert result.path == []
        assert result.total_cost == 0
        assert not result.found
        assert result.steps


def test_dfs_explores_neighbours_in_adjacency_order():
    store = build_store({1: (0, 0), 2: (10, 0), 3: (20, 0), 4: (30, 0)}, [(1, 2, 1), (1, 3, 1), (1, 4, 1)])
    result = run_algorithm(store, Algorithm.DFS, 1, 4)
    assert result.path == [1, 4]
    assert result.steps[1].frontier == (4, 3, 2)
    assert [s.current for s in result.steps[1:]] == [1, 2, 3, 4]
    assert result.steps[-1].visited == (1, 2, 3, 4)


def test_dfs_marks_visited_on_pop_and_keeps_duplicates_in_stack():
    store = build_store(
        {1: (0, 0), 2: (10, 0), 3: (10, 10), 4: (90, 90)},
        [(1, 2, 1), (1, 3, 1), (2, 3, 1)],
    )
    result = run_algorithm(store, Algorithm.DFS, 1, 4)
    assert result.path == []
    frontiers = [s.frontier for s in result.steps]
    assert frontiers == [(1,), (3, 2), (3, 3), (3,), ()]
    assert [s.current for s in result.steps] == [None, 1, 2, 3, 3]
    assert result.steps[-1].visited == (1, 2, 3)


def test_bfs_prefers_earlier_edges_on_ties():
    # 1 -> 2 -> 4 and 1 -> 3 -> 4 have the same hop count
    store = build_store(
        {1: (0, 0), 2: (10, 0), 3: (0, 10), 4: (10, 10)},
        [(1, 3, 1), (1, 2, 1), (2, 4, 1), (3, 4, 1)],
    )
    assert run_algorithm(store, Algorithm.BFS, 1, 4).path == [1, 3, 4]


def test_start_equals_end():
    store = build_store({1: (0, 0), 2: (10, 0)}, [(1, 2, 3)])
    result = run_algorithm(store, Algorithm.BFS, 1, 1)
    assert result.path == [1]
    assert result.total_cost == 0
    assert run_algorithm(store, Algorithm.DFS, 2, 2).path == [2]


def test_cost_uses_edge_weights_not_distances(triangle_store):
    triangle_store.update_edge_weight("2-3", 1.5)
    result = run_algorithm(triangle_store, Algorithm.DFS, 1, 3)
    assert result.total_cost == pytest.approx(11.5)


def test_validation_failures(triangle_store):
    with pytest.raises(ValidationError, match="start"):
        run_algorithm(triangle_store, Algorithm.BFS, None, 3)
    with pytest.raises(ValidationError, match="end"):
        run_algorithm(triangle_store, Algorithm.DFS, 1, None)
    with pytest.raises(ValidationError):
        run_algorithm(triangle_store, Algorithm.BFS, 1, 99)

    single = build_store({1: (0, 0)}, [])
    with pytest.raises(ValidationError, match="2 nodes"):
        run_algorithm(single, Algorithm.TSP, 1)

    with pytest.raises(ValueError, match="Unknown algorithm"):
        run_algorithm(triangle_store, "dijkstra", 1, 3)


def test_run_does_not_mutate_store(triangle_store):
    before = (dict(triangle_store.nodes), dict(triangle_store.edges), triangle_store.start, triangle_store.end)
    for algorithm in Algorithm:
        run_algorithm(triangle_store, algorithm, 1, 3)
    after = (dict(triangle_store.nodes), dict(triangle_store.edges), triangle_store.start, triangle_store.end)
    assert before == after
