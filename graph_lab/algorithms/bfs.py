from __future__ import annotations

from collections import deque
from typing import Deque, Dict, List

from ..graph import NodeId
from .types import Adjacency, Algorithm, AlgoResult, AlgoStep, path_cost, snapshot, walk_parents


def run_bfs(adj: Adjacency, start: NodeId, end: NodeId) -> AlgoResult:
    """Queue-based breadth-first search.

    Neighbours are expanded in adjacency (edge creation) order, so ties
    between equally short paths go to the earlier edge. One step is recorded
    for the initial state and one per dequeue.
    """
    queue: Deque[NodeId] = deque([start])
    visited: List[NodeId] = [start]
    seen = {start}
    parent: Dict[NodeId, NodeId] = {}
    steps: List[AlgoStep] = [snapshot(visited, frontier=queue)]
    found = False

    while queue:
        cur = queue.popleft()
        if cur == end:
            steps.append(snapshot(visited, walk_parents(parent, start, cur), queue, cur))
            found = True
            break
        for nb, _weight in adj[cur]:
            if nb in seen:
                continue
            seen.add(nb)
            visited.append(nb)
            parent[nb] = cur
            queue.append(nb)
        steps.append(snapshot(visited, walk_parents(parent, start, cur), queue, cur))

    if not found:
        return AlgoResult(algorithm=Algorithm.BFS, steps=steps)
    path = walk_parents(parent, start, end)
    return AlgoResult(algorithm=Algorithm.BFS, steps=steps, path=path, total_cost=path_cost(adj, path))
