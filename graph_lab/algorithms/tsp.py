from __future__ import annotations

import math
from typing import Dict, List, Tuple

from ..graph import NodeId
from .types import Algorithm, AlgoResult, AlgoStep, snapshot


def run_tsp_nearest_neighbor(coords: Dict[NodeId, Tuple[float, float]], start: NodeId) -> AlgoResult:
    """Greedy nearest-neighbour tour starting and ending at ``start``.

    This is a heuristic, not an optimal tour solver: it always hops to the
    closest unvisited node by straight-line distance between node coordinates
    (edges and their weights are ignored) and never backtracks. Ties go to the
    node that was added to the graph first.
    """
    tour: List[NodeId] = [start]
    remaining = [n for n in coords if n != start]
    steps: List[AlgoStep] = [snapshot(tour, tour, current=start)]
    total = 0.0
    cur = start

    while remaining:
        cx, cy = coords[cur]
        best_idx = 0
        best_dist = math.inf
        for idx, cand in enumerate(remaining):
            x, y = coords[cand]
            d = math.hypot(x - cx, y - cy)
            if d < best_dist:
                best_idx = idx
                best_dist = d
        cur = remaining.pop(best_idx)
        tour.append(cur)
        total += best_dist
        steps.append(snapshot(tour, tour, current=cur))

    sx, sy = coords[start]
    cx, cy = coords[cur]
    total += math.hypot(sx - cx, sy - cy)
    visited = list(tour)
    tour.append(start)
    steps.append(snapshot(visited, tour, current=start))

    return AlgoResult(algorithm=Algorithm.TSP, steps=steps, path=tour, total_cost=total)
