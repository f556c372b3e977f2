import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from graph_lab.graph import GraphStore


def build_store(nodes, edges, start=None, end=None):
    """nodes: {id: (x, y)}, edges: [(a, b, weight-or-None)]"""
    store = GraphStore()
    for node_id, (x, y) in nodes.items():
        store.add_node(x, y, node_id=node_id)
    for a, b, w in edges:
        store.add_edge(a, b, w)
    store.set_start(start)
    store.set_end(end)
    return store


@pytest.fixture
def triangle_store():
    # 1@(0,0), 2@(10,0), 3@(10,10); edges 1-2 and 2-3, weight 10 each
    return build_store({1: (0, 0), 2: (10, 0), 3: (10, 10)}, [(1, 2, 10.0), (2, 3, 10.0)], start=1, end=3)
