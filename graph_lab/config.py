from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple


def _env_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{key} must be a number (got {raw!r})") from e


def _env_pair(env: Mapping[str, str], key: str, default: Tuple[float, float]) -> Tuple[float, float]:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    parts = [p.strip() for p in raw.split(",")]
    if len(parts) != 2:
        raise ValueError(f"{key} must look like 'dx,dy' (got {raw!r})")
    try:
        return (float(parts[0]), float(parts[1]))
    except ValueError as e:
        raise ValueError(f"{key} must look like 'dx,dy' (got {raw!r})") from e


@dataclass(frozen=True)
class LabSettings:
    """Canvas interaction constants.

    Distances are in canvas pixels. A click resolves to a node when it lands
    within ``click_threshold`` of the node centre (1.5x the draw radius).
    """

    node_radius: float = 12.0
    edge_tolerance: float = 10.0
    step_interval_ms: float = 200.0
    copy_offset: Tuple[float, float] = (50.0, 50.0)

    def __post_init__(self) -> None:
        if self.node_radius <= 0:
            raise ValueError(f"node_radius must be > 0, got {self.node_radius}")
        if self.edge_tolerance < 0:
            raise ValueError(f"edge_tolerance must be >= 0, got {self.edge_tolerance}")
        if self.step_interval_ms < 0:
            raise ValueError(f"step_interval_ms must be >= 0, got {self.step_interval_ms}")

    @property
    def click_threshold(self) -> float:
        return self.node_radius * 1.5

    @property
    def step_interval(self) -> float:
        return self.step_interval_ms / 1000.0

    @staticmethod
    def from_env(env: Optional[Mapping[str, str]] = None) -> "LabSettings":
        env = os.environ if env is None else env
        defaults = LabSettings()
        return LabSettings(
            node_radius=_env_float(env, "GRAPH_LAB_NODE_RADIUS", defaults.node_radius),
            edge_tolerance=_env_float(env, "GRAPH_LAB_EDGE_TOLERANCE", defaults.edge_tolerance),
            step_interval_ms=_env_float(env, "GRAPH_LAB_STEP_INTERVAL_MS", defaults.step_interval_ms),
            copy_offset=_env_pair(env, "GRAPH_LAB_COPY_OFFSET", defaults.copy_offset),
        )
