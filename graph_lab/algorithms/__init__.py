from __future__ import annotations

import logging
from typing import Optional, Union

from ..graph import GraphStore, NodeId
from .bfs import run_bfs
from .dfs import run_dfs
from .tsp import run_tsp_nearest_neighbor
from .types import Algorithm, AlgoResult, AlgoStep, ValidationError, format_path

ALGORITHM_CHOICES: tuple[str, ...] = tuple(a.value for a in Algorithm)

logger = logging.getLogger(__name__)


def validate_request(store: GraphStore, algorithm: Algorithm, start: Optional[NodeId], end: Optional[NodeId]) -> None:
    if start is None:
        raise ValidationError("Please select a start node")
    if start not in store.nodes:
        raise ValidationError(f"Start node {start} does not exist")
    if algorithm is Algorithm.TSP:
        if len(store) < 2:
            raise ValidationError("TSP needs at least 2 nodes")
        return
    if end is None:
        raise ValidationError("Please select both start and end nodes")
    if end not in store.nodes:
        raise ValidationError(f"End node {end} does not exist")


def run_algorithm(
    store: GraphStore,
    algorithm: Union[Algorithm, str],
    start: Optional[NodeId],
    end: Optional[NodeId] = None,
) -> AlgoResult:
    """Compute the full step sequence, final path and cost in one go.

    Validation failures raise :class:`ValidationError` before anything is
    computed. A missing path is not an error: the result has an empty path
    and zero cost. The store is only read.
    """
    if not isinstance(algorithm, Algorithm):
        algorithm = str(algorithm).strip().lower()
    try:
        algorithm = Algorithm(algorithm)
    except ValueError as e:
        raise ValueError(f"Unknown algorithm {algorithm!r}. Choose one of: {', '.join(ALGORITHM_CHOICES)}") from e

    validate_request(store, algorithm, start, end)
    assert start is not None

    if algorithm is Algorithm.TSP:
        coords = {n.id: (n.x, n.y) for n in store.nodes.values()}
        result = run_tsp_nearest_neighbor(coords, start)
    else:
        assert end is not None
        adj = store.adjacency()
        if algorithm is Algorithm.BFS:
            result = run_bfs(adj, start, end)
        else:
            result = run_dfs(adj, start, end)

    logger.info(
        "%s from %s: %d steps, path=%s, cost=%.3f",
        algorithm.value.upper(),
        start,
        len(result.steps),
        result.path_string or "<none>",
        result.total_cost,
    )
    return result


__all__ = [
    "ALGORITHM_CHOICES",
    "Algorithm",
    "AlgoResult",
    "AlgoStep",
    "ValidationError",
    "format_path",
    "run_algorithm",
    "run_bfs",
    "run_dfs",
    "run_tsp_nearest_neighbor",
    "validate_request",
]
