from .plotly_viz import build_plotly_figure, node_role, write_plotly_html
from .thumbnail import render_thumbnail

__all__ = ["build_plotly_figure", "node_role", "render_thumbnail", "write_plotly_html"]
