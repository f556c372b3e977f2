from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional

from .graph import Edge, GraphStore, Node


def distance(ax: float, ay: float, bx: float, by: float) -> float:
    return math.hypot(ax - bx, ay - by)


def point_segment_distance(px: float, py: float, ax: float, ay: float, bx: float, by: float) -> float:
    """Distance from point P to the closed segment AB."""
    dx = bx - ax
    dy = by - ay
    length_sq = dx * dx + dy * dy
    if length_sq == 0.0:
        return distance(px, py, ax, ay)
    t = ((px - ax) * dx + (py - ay) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return distance(px, py, ax + t * dx, ay + t * dy)


def nearest_node(nodes: Iterable[Node], x: float, y: float, radius: float) -> Optional[Node]:
    best: Optional[Node] = None
    best_dist = math.inf
    for node in nodes:
        d = distance(node.x, node.y, x, y)
        if d < radius and d < best_dist:
            best = node
            best_dist = d
    return best


def edge_at(store: GraphStore, x: float, y: float, tolerance: float) -> Optional[Edge]:
    # First match in insertion order, not the closest one.
    for edge, a, b in store.iter_segments():
        if point_segment_distance(x, y, a.x, a.y, b.x, b.y) <= tolerance:
            return edge
    return None


@dataclass(frozen=True)
class Hit:
    node: Optional[Node] = None
    edge: Optional[Edge] = None

    @property
    def empty(self) -> bool:
        return self.node is None and self.edge is None


def hit_test(store: GraphStore, x: float, y: float, *, node_radius: float, edge_tolerance: float) -> Hit:
    """Resolve a click to a node, else an edge, else nothing."""
    node = nearest_node(store.nodes.values(), x, y, node_radius)
    if node is not None:
        return Hit(node=node)
    edge = edge_at(store, x, y, edge_tolerance)
    if edge is not None:
        return Hit(edge=edge)
    return Hit()
