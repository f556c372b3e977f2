from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from ..graph import NodeId

Adjacency = Dict[NodeId, List[Tuple[NodeId, float]]]


class Algorithm(str, Enum):
    BFS = "bfs"
    DFS = "dfs"
    TSP = "tsp"

    @property
    def needs_end(self) -> bool:
        return self is not Algorithm.TSP


class ValidationError(ValueError):
    """Raised before any computation when the inputs cannot be searched."""


@dataclass(frozen=True)
class AlgoStep:
    visited: Tuple[NodeId, ...] = ()
    path: Tuple[NodeId, ...] = ()
    frontier: Optional[Tuple[NodeId, ...]] = None  # queue (BFS) / stack (DFS); None for TSP
    current: Optional[NodeId] = None


@dataclass
class AlgoResult:
    algorithm: Algorithm
    steps: List[AlgoStep] = field(default_factory=list)
    path: List[NodeId] = field(default_factory=list)  # empty => no path
    total_cost: float = 0.0

    @property
    def found(self) -> bool:
        return bool(self.path)

    @property
    def path_string(self) -> str:
        return format_path(self.path)


def format_path(path: Sequence[NodeId]) -> str:
    return " → ".join(str(n) for n in path)


def snapshot(
    visited: Sequence[NodeId],
    path: Sequence[NodeId] = (),
    frontier: Optional[Sequence[NodeId]] = None,
    current: Optional[NodeId] = None,
) -> AlgoStep:
    return AlgoStep(
        visited=tuple(visited),
        path=tuple(path),
        frontier=None if frontier is None else tuple(frontier),
        current=current,
    )


def walk_parents(parent: Dict[NodeId, NodeId], start: NodeId, node: NodeId) -> List[NodeId]:
    """Follow ``parent`` pointers from ``node`` back to ``start``; returns start->node."""
    path = [node]
    while node != start:
        node = parent[node]
        path.append(node)
    path.reverse()
    return path


def path_cost(adj: Adjacency, path: Sequence[NodeId]) -> float:
    total = 0.0
    for a, b in zip(path, path[1:]):
        for nb, weight in adj[a]:
            if nb == b:
                total += weight
                break
        else:
            raise ValueError(f"No edge between {a!r} and {b!r}")
    return total
