from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

NodeId = int
EdgeId = str

logger = logging.getLogger(__name__)


@dataclass
class Node:
    id: NodeId
    x: float
    y: float
    label: Optional[str] = None


@dataclass
class Edge:
    id: EdgeId
    source: NodeId
    target: NodeId
    weight: float

    def endpoints(self) -> Tuple[NodeId, NodeId]:
        return (self.source, self.target)

    def touches(self, node_id: NodeId) -> bool:
        return node_id == self.source or node_id == self.target

    def joins(self, a: NodeId, b: NodeId) -> bool:
        return (self.source == a and self.target == b) or (self.source == b and self.target == a)


class GraphStore:
    """In-memory owner of the lab's weighted undirected graph.

    Nodes and edges are kept in insertion order; traversal order (and thus
    tie-breaking in the search algorithms) follows edge creation order. The
    store also tracks the chosen start/end node so that deleting a node can
    invalidate them.
    """

    def __init__(self) -> None:
        self.nodes: Dict[NodeId, Node] = {}
        self.edges: Dict[EdgeId, Edge] = {}
        self.start: Optional[NodeId] = None
        self.end: Optional[NodeId] = None

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes

    def next_node_id(self) -> NodeId:
        return max(self.nodes, default=0) + 1

    def add_node(self, x: float, y: float, label: Optional[str] = None, *, node_id: Optional[NodeId] = None) -> Node:
        if node_id is None:
            node_id = self.next_node_id()
        elif node_id in self.nodes:
            raise ValueError(f"Node already exists: {node_id!r}")
        node = Node(id=node_id, x=float(x), y=float(y), label=label)
        self.nodes[node_id] = node
        logger.debug("Added node %s at (%.1f, %.1f)", node_id, node.x, node.y)
        return node

    def require_node(self, node_id: NodeId) -> Node:
        try:
            return self.nodes[node_id]
        except KeyError as e:
            raise KeyError(f"Unknown node: {node_id!r}") from e

    def require_edge(self, edge_id: EdgeId) -> Edge:
        try:
            return self.edges[edge_id]
        except KeyError as e:
            raise KeyError(f"Unknown edge: {edge_id!r}") from e

    def find_edge(self, a: NodeId, b: NodeId) -> Optional[Edge]:
        for edge in self.edges.values():
            if edge.joins(a, b):
                return edge
        return None

    def node_distance(self, a: NodeId, b: NodeId) -> float:
        na = self.require_node(a)
        nb = self.require_node(b)
        return math.hypot(na.x - nb.x, na.y - nb.y)

    def _fresh_edge_id(self, source: NodeId, target: NodeId) -> EdgeId:
        base = f"{source}-{target}"
        if base not in self.edges:
            return base
        n = 2
        while f"{base}#{n}" in self.edges:
            n += 1
        return f"{base}#{n}"

    def add_edge(
        self,
        source: NodeId,
        target: NodeId,
        weight: Optional[float] = None,
        *,
        edge_id: Optional[EdgeId] = None,
    ) -> Optional[Edge]:
        """Connect two existing nodes.

        Returns ``None`` without touching the store when the unordered pair is
        already connected. Weight defaults to the Euclidean distance between
        the endpoints.
        """
        if source not in self.nodes or target not in self.nodes:
            raise KeyError(f"Both endpoints must exist (source={source!r}, target={target!r})")
        if source == target:
            raise ValueError("Self-loops are not supported")
        if self.find_edge(source, target) is not None:
            logger.debug("Ignoring duplicate edge %s-%s", source, target)
            return None
        if weight is None:
            weight = self.node_distance(source, target)
        if edge_id is None or edge_id in self.edges:
            edge_id = self._fresh_edge_id(source, target)
        edge = Edge(id=edge_id, source=source, target=target, weight=float(weight))
        self.edges[edge_id] = edge
        logger.debug("Added edge %s (weight=%.3f)", edge_id, edge.weight)
        return edge

    def delete_nodes(self, ids: Iterable[NodeId]) -> None:
        doomed = {i for i in ids if i in self.nodes}
        if not doomed:
            return
        for node_id in doomed:
            del self.nodes[node_id]
        self.edges = {
            eid: e for eid, e in self.edges.items() if e.source not in doomed and e.target not in doomed
        }
        if self.start in doomed:
            self.start = None
        if self.end in doomed:
            self.end = None
        logger.debug("Deleted nodes %s", sorted(doomed))

    def delete_edges(self, ids: Iterable[EdgeId]) -> None:
        for edge_id in ids:
            self.edges.pop(edge_id, None)

    def update_node_label(self, node_id: NodeId, label: Optional[str]) -> Node:
        node = self.require_node(node_id)
        node.label = label
        return node

    def update_edge_weight(self, edge_id: EdgeId, weight: float) -> Edge:
        edge = self.require_edge(edge_id)
        weight = float(weight)
        if not math.isfinite(weight):
            raise ValueError(f"Edge weight must be finite (got {weight!r})")
        edge.weight = weight
        return edge

    def duplicate_nodes(self, ids: Iterable[NodeId], offset: Tuple[float, float] = (50.0, 50.0)) -> List[Node]:
        """Copy nodes (not their edges) with fresh ids, shifted by ``offset``."""
        dx, dy = offset
        copies: List[Node] = []
        for node_id in list(ids):
            src = self.require_node(node_id)
            label = f"{src.label}_copy" if src.label is not None else None
            copies.append(self.add_node(src.x + dx, src.y + dy, label))
        return copies

    def set_start(self, node_id: Optional[NodeId]) -> None:
        if node_id is not None:
            self.require_node(node_id)
        self.start = node_id

    def set_end(self, node_id: Optional[NodeId]) -> None:
        if node_id is not None:
            self.require_node(node_id)
        self.end = node_id

    def clear(self) -> None:
        self.nodes.clear()
        self.edges.clear()
        self.start = None
        self.end = None

    def adjacency(self) -> Dict[NodeId, List[Tuple[NodeId, float]]]:
        """Undirected adjacency lists, in edge insertion order."""
        adj: Dict[NodeId, List[Tuple[NodeId, float]]] = {n: [] for n in self.nodes}
        for edge in self.edges.values():
            adj[edge.source].append((edge.target, edge.weight))
            adj[edge.target].append((edge.source, edge.weight))
        return adj

    def neighbors(self, node_id: NodeId) -> List[NodeId]:
        out: List[NodeId] = []
        for edge in self.edges.values():
            if edge.source == node_id:
                out.append(edge.target)
            elif edge.target == node_id:
                out.append(edge.source)
        return out

    def iter_segments(self) -> Iterator[Tuple[Edge, Node, Node]]:
        for edge in self.edges.values():
            yield edge, self.nodes[edge.source], self.nodes[edge.target]

    def to_networkx(self):
        """Convert to a networkx.Graph for ad-hoc experimentation."""
        import networkx as nx

        g = nx.Graph()
        for node_id, node in self.nodes.items():
            g.add_node(node_id, pos=(node.x, node.y), label=node.label)
        for edge in self.edges.values():
            g.add_edge(edge.source, edge.target, weight=edge.weight, id=edge.id)
        return g
