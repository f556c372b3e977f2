from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from .algorithms.types import AlgoResult, AlgoStep
from .graph import GraphStore


def graph_to_payload(store: GraphStore) -> Dict[str, Any]:
    return {
        "nodes": [{"id": n.id, "x": n.x, "y": n.y, "label": n.label} for n in store.nodes.values()],
        "edges": [
            {"id": e.id, "from": e.source, "to": e.target, "weight": e.weight} for e in store.edges.values()
        ],
        "start": store.start,
        "end": store.end,
    }


def graph_from_payload(obj: Dict[str, Any]) -> GraphStore:
    """Build a store from ``{"nodes": [...], "edges": [...], "start", "end"}``.

    Node ids are kept; edges missing a weight get the Euclidean distance.
    Duplicate edges are dropped the same way interactive editing drops them.
    """
    store = GraphStore()
    for nd in obj.get("nodes", []):
        label = nd.get("label")
        store.add_node(float(nd["x"]), float(nd["y"]), None if label is None else str(label), node_id=int(nd["id"]))
    for ed in obj.get("edges", []):
        if "from" in ed:
            a, b = ed["from"], ed["to"]
        else:
            a, b = ed["source"], ed["target"]
        weight = ed.get("weight")
        store.add_edge(
            int(a),
            int(b),
            None if weight is None else float(weight),
            edge_id=None if ed.get("id") is None else str(ed["id"]),
        )
    start: Optional[Any] = obj.get("start")
    end: Optional[Any] = obj.get("end")
    store.set_start(None if start is None else int(start))
    store.set_end(None if end is None else int(end))
    return store


def load_graph(path: str | Path) -> GraphStore:
    path = Path(path)
    return graph_from_payload(json.loads(path.read_text(encoding="utf-8")))


def step_to_payload(step: AlgoStep) -> Dict[str, Any]:
    return {
        "visited": list(step.visited),
        "path": list(step.path),
        "frontier": None if step.frontier is None else list(step.frontier),
        "current": step.current,
    }


def result_to_payload(result: AlgoResult, *, include_steps: bool = True) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "algorithm": result.algorithm.value,
        "path": list(result.path),
        "path_string": result.path_string,
        "total_cost": result.total_cost,
        "found": result.found,
        "step_count": len(result.steps),
    }
    if include_steps:
        out["steps"] = [step_to_payload(s) for s in result.steps]
    return out
