from __future__ import annotations

import argparse
import asyncio
import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from .algorithms import ALGORITHM_CHOICES, AlgoResult, AlgoStep, ValidationError, run_algorithm
from .config import LabSettings
from .player import StepPlayer
from .serialize import load_graph
from .viz import write_plotly_html


def _print_step(index: int, step: AlgoStep) -> None:
    frontier = "-" if step.frontier is None else ",".join(str(n) for n in step.frontier)
    visited = ",".join(str(n) for n in step.visited)
    print(f"  step {index}: current={step.current} visited=[{visited}] frontier=[{frontier}]")


async def _animate(result: AlgoResult, interval: float) -> None:
    player = StepPlayer(interval=interval, on_step=_print_step)
    player.play(result)
    await player.wait()


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="graph_lab", description="Graph pathfinding lab: BFS, DFS and TSP heuristic")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_viz = sub.add_parser("visualize", help="Render a graph to an HTML file")
    p_viz.add_argument("graph", type=str, help="Path to a .json graph file")
    p_viz.add_argument("--out", type=str, default="out/graph.html", help="Output HTML path")

    p_run = sub.add_parser("run", help="Run an algorithm and print the path and cost")
    p_run.add_argument("graph", type=str, help="Path to a .json graph file")
    p_run.add_argument("--algorithm", choices=ALGORITHM_CHOICES, default="bfs", help="Algorithm to run")
    p_run.add_argument("--start", type=int, default=None, help="Start node id (defaults to the file's start)")
    p_run.add_argument("--end", type=int, default=None, help="End node id (defaults to the file's end)")
    p_run.add_argument("--animate", action="store_true", help="Print the steps at the configured cadence")
    p_run.add_argument("--out", type=str, default=None, help="Also write the final state to this HTML path")

    args = parser.parse_args(list(argv) if argv is not None else None)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    graph_path = Path(args.graph)
    store = load_graph(graph_path)

    if args.cmd == "visualize":
        out = write_plotly_html(store, out_path=args.out, title=f"Graph: {graph_path.name}")
        print(f"Wrote graph visualization: {out}")
        return 0

    if args.cmd == "run":
        start = args.start if args.start is not None else store.start
        end = args.end if args.end is not None else store.end
        try:
            result = run_algorithm(store, args.algorithm, start, end)
        except ValidationError as e:
            print(f"error: {e}")
            return 2

        if args.animate:
            asyncio.run(_animate(result, LabSettings.from_env().step_interval))

        print(f"{args.algorithm.upper()} on {graph_path.name}: nodes={len(store)}, edges={len(store.edges)}, steps={len(result.steps)}")
        if result.found:
            print(f"  path: {result.path_string}")
            print(f"  cost: {result.total_cost:.4f}")
        else:
            print("  no path found")

        if args.out:
            last = replace(result.steps[-1], path=tuple(result.path)) if result.steps else None
            store.set_start(start)
            out = write_plotly_html(store, out_path=args.out, step=last, title=f"{args.algorithm.upper()}: {graph_path.name}")
            print(f"Wrote result visualization: {out}")
        return 0

    raise AssertionError("unreachable")


if __name__ == "__main__":
    raise SystemExit(main())
