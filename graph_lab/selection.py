from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Union

from .graph import EdgeId, GraphStore, NodeId


@dataclass(frozen=True)
class EmptySelection:
    pass


@dataclass(frozen=True)
class NodeSelection:
    ids: FrozenSet[NodeId]


@dataclass(frozen=True)
class EdgeSelection:
    ids: FrozenSet[EdgeId]


# Nodes and edges are never selected together.
Selection = Union[EmptySelection, NodeSelection, EdgeSelection]

EMPTY = EmptySelection()


def _normalize(sel: Selection) -> Selection:
    if isinstance(sel, (NodeSelection, EdgeSelection)) and not sel.ids:
        return EMPTY
    return sel


def select_node(sel: Selection, node_id: NodeId, *, toggle: bool = False) -> Selection:
    if not toggle or not isinstance(sel, NodeSelection):
        return NodeSelection(frozenset({node_id}))
    return _normalize(NodeSelection(sel.ids ^ {node_id}))


def select_edge(sel: Selection, edge_id: EdgeId, *, toggle: bool = False) -> Selection:
    if not toggle or not isinstance(sel, EdgeSelection):
        return EdgeSelection(frozenset({edge_id}))
    return _normalize(EdgeSelection(sel.ids ^ {edge_id}))


def prune(sel: Selection, store: GraphStore) -> Selection:
    """Drop ids that no longer exist in ``store``."""
    if isinstance(sel, NodeSelection):
        return _normalize(NodeSelection(frozenset(i for i in sel.ids if i in store.nodes)))
    if isinstance(sel, EdgeSelection):
        return _normalize(EdgeSelection(frozenset(i for i in sel.ids if i in store.edges)))
    return sel


def selection_kind(sel: Selection) -> str:
    if isinstance(sel, NodeSelection):
        return "nodes"
    if isinstance(sel, EdgeSelection):
        return "edges"
    return "empty"
