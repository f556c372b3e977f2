from __future__ import annotations

from typing import Dict, List, Set

from ..graph import NodeId
from .types import Adjacency, Algorithm, AlgoResult, AlgoStep, path_cost, snapshot, walk_parents


def run_dfs(adj: Adjacency, start: NodeId, end: NodeId) -> AlgoResult:
    """Iterative depth-first search with an explicit stack.

    Nodes are marked visited when popped, not when pushed, so a node reached
    through several edges can sit in the stack more than once. Neighbours are
    pushed in reverse adjacency order so they pop in adjacency order. One step
    is recorded for the initial state and one per pop.
    """
    stack: List[NodeId] = [start]
    visited: List[NodeId] = []
    done: Set[NodeId] = set()
    parent: Dict[NodeId, NodeId] = {}
    steps: List[AlgoStep] = [snapshot(visited, frontier=stack)]
    found = False

    while stack:
        cur = stack.pop()
        if cur in done:
            # Stale duplicate entry; the pop still shows up as a frontier change.
            steps.append(snapshot(visited, walk_parents(parent, start, cur), stack, cur))
            continue
        done.add(cur)
        visited.append(cur)
        if cur == end:
            steps.append(snapshot(visited, walk_parents(parent, start, cur), stack, cur))
            found = True
            break
        for nb, _weight in reversed(adj[cur]):
            if nb in done:
                continue
            # Last pusher wins: it is also the first to pop this entry.
            parent[nb] = cur
            stack.append(nb)
        steps.append(snapshot(visited, walk_parents(parent, start, cur), stack, cur))

    if not found:
        return AlgoResult(algorithm=Algorithm.DFS, steps=steps)
    path = walk_parents(parent, start, end)
    return AlgoResult(algorithm=Algorithm.DFS, steps=steps, path=path, total_cost=path_cost(adj, path))
