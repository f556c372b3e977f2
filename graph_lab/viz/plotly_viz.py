from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

from ..algorithms.types import AlgoStep
from ..graph import GraphStore, NodeId

NODE_COLORS: Dict[str, str] = {
    "default": "#3b82f6",  # blue
    "frontier": "#f59e0b",  # amber
    "visited": "#a855f7",  # purple
    "current": "#06b6d4",  # cyan
    "start": "#22c55e",  # green
    "end": "#ef4444",  # red
}
EDGE_COLOR = "rgba(59,130,246,0.5)"
PATH_COLOR = "#ef4444"


def node_role(store: GraphStore, node_id: NodeId, step: Optional[AlgoStep]) -> str:
    if node_id == store.start:
        return "start"
    if node_id == store.end:
        return "end"
    if step is not None:
        if node_id == step.current:
            return "current"
        if node_id in step.visited:
            return "visited"
        if step.frontier is not None and node_id in step.frontier:
            return "frontier"
    return "default"


def build_plotly_figure(
    store: GraphStore,
    *,
    step: Optional[AlgoStep] = None,
    title: str = "Graph Lab",
    show_weights: bool = True,
):
    import plotly.graph_objects as go

    # Canvas coordinates grow downwards; flip y for the plot.
    ex, ey = [], []
    wx, wy, wtext = [], [], []
    for edge, a, b in store.iter_segments():
        ex += [a.x, b.x, None]
        ey += [-a.y, -b.y, None]
        wx.append((a.x + b.x) / 2.0)
        wy.append(-(a.y + b.y) / 2.0)
        wtext.append(f"{edge.weight:.1f}")

    px, py = [], []
    if step is not None:
        for node_id in step.path:
            node = store.nodes.get(node_id)
            if node is not None:
                px.append(node.x)
                py.append(-node.y)

    nx, ny, ntext, nlabel, ncolor = [], [], [], [], []
    for node_id, node in store.nodes.items():
        nx.append(node.x)
        ny.append(-node.y)
        role = node_role(store, node_id, step)
        bits = [f"id={node_id}", f"role={role}"]
        if node.label:
            bits.append(f"label={node.label}")
        ntext.append("<br>".join(bits))
        nlabel.append(node.label or str(node_id))
        ncolor.append(NODE_COLORS[role])

    traces = [
        go.Scatter(
            x=ex,
            y=ey,
            mode="lines",
            line=dict(width=2, color=EDGE_COLOR),
            hoverinfo="none",
            name="edges",
        )
    ]
    if show_weights and wtext:
        traces.append(
            go.Scatter(
                x=wx,
                y=wy,
                mode="text",
                text=wtext,
                textfont=dict(size=10, color="#6b7280"),
                hoverinfo="none",
                showlegend=False,
            )
        )
    if len(px) > 1:
        traces.append(
            go.Scatter(
                x=px,
                y=py,
                mode="lines",
                line=dict(width=4, color=PATH_COLOR),
                hoverinfo="none",
                name="path",
            )
        )
    traces.append(
        go.Scatter(
            x=nx,
            y=ny,
            mode="markers+text",
            marker=dict(size=24, color=ncolor, line=dict(width=3, color="#ffffff")),
            text=nlabel,
            textfont=dict(color="#ffffff"),
            hovertext=ntext,
            hoverinfo="text",
            name="nodes",
        )
    )

    fig = go.Figure(data=traces)
    fig.update_layout(
        title=title,
        xaxis=dict(visible=False),
        yaxis=dict(visible=False, scaleanchor="x", scaleratio=1),
        margin=dict(l=0, r=0, t=40, b=0),
    )
    return fig


def write_plotly_html(
    store: GraphStore,
    *,
    out_path: str | Path,
    step: Optional[AlgoStep] = None,
    title: str = "Graph Lab",
) -> Path:
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    fig = build_plotly_figure(store, step=step, title=title)
    fig.write_html(str(out_path), include_plotlyjs="cdn", full_html=True)
    return out_path
