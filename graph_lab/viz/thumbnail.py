from __future__ import annotations

import io
from typing import Optional, Tuple

from ..algorithms.types import AlgoStep
from ..graph import GraphStore
from .plotly_viz import NODE_COLORS, PATH_COLOR, node_role


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    hex_color = hex_color.lstrip("#")
    return tuple(int(hex_color[i : i + 2], 16) for i in (0, 2, 4))  # type: ignore[return-value]


def render_thumbnail(
    store: GraphStore,
    *,
    step: Optional[AlgoStep] = None,
    size: Tuple[int, int] = (240, 180),
) -> bytes:
    """Small PNG preview of the graph (and the current step, if any)."""
    from PIL import Image, ImageDraw

    width, height = size
    img = Image.new("RGB", (width, height), (15, 17, 22))
    draw = ImageDraw.Draw(img)
    nodes = list(store.nodes.values())
    if nodes:
        xs = [n.x for n in nodes]
        ys = [n.y for n in nodes]
        min_x, max_x = min(xs), max(xs)
        min_y, max_y = min(ys), max(ys)
        pad = 12
        span_x = max_x - min_x or 1.0
        span_y = max_y - min_y or 1.0

        def map_x(x: float) -> float:
            return pad + (x - min_x) / span_x * (width - pad * 2)

        def map_y(y: float) -> float:
            # Canvas y already grows downwards, like image rows.
            return pad + (y - min_y) / span_y * (height - pad * 2)

        for _edge, a, b in store.iter_segments():
            draw.line((map_x(a.x), map_y(a.y), map_x(b.x), map_y(b.y)), fill=(110, 110, 110))

        if step is not None and len(step.path) > 1:
            pts = [(map_x(store.nodes[n].x), map_y(store.nodes[n].y)) for n in step.path if n in store.nodes]
            draw.line(pts, fill=hex_to_rgb(PATH_COLOR), width=3)

        for node in nodes:
            cx, cy = map_x(node.x), map_y(node.y)
            role = node_role(store, node.id, step)
            r = 5 if role in ("start", "end", "current") else 3
            draw.ellipse((cx - r, cy - r, cx + r, cy + r), fill=hex_to_rgb(NODE_COLORS[role]))

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
