from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, Optional

from .algorithms import Algorithm, AlgoResult, ValidationError, run_algorithm
from .config import LabSettings
from .editor import EditDialog, Editor, EditorMode
from .graph import GraphStore
from .player import PlaybackSummary, PlayerState, StepPlayer
from .selection import EdgeSelection, NodeSelection, selection_kind
from .serialize import graph_to_payload, step_to_payload

logger = logging.getLogger(__name__)

MAX_NOTIFICATIONS = 50


@dataclass(frozen=True)
class Notification:
    level: str  # "error" | "info" | "success"
    message: str


class LabSession:
    """One user's pathfinding lab: graph, editor, algorithm choice and player.

    Everything runs on the asyncio loop that owns the session. Nothing is
    persisted; :meth:`reset` drops the graph.
    """

    def __init__(
        self,
        settings: Optional[LabSettings] = None,
        *,
        store: Optional[GraphStore] = None,
        dialog: Optional[EditDialog] = None,
        notify: Optional[Callable[[Notification], None]] = None,
    ) -> None:
        self.settings = settings or LabSettings()
        self.store = store if store is not None else GraphStore()
        self.editor = Editor(self.store, self.settings, dialog)
        self.player = StepPlayer(interval=self.settings.step_interval, on_complete=self._on_complete)
        self.algorithm = Algorithm.BFS
        self.last_result: Optional[AlgoResult] = None
        self.notifications: Deque[Notification] = deque(maxlen=MAX_NOTIFICATIONS)
        self._notify = notify

    @property
    def playing(self) -> bool:
        return self.player.state is PlayerState.PLAYING

    def notify(self, level: str, message: str) -> Notification:
        note = Notification(level=level, message=message)
        self.notifications.append(note)
        if self._notify is not None:
            self._notify(note)
        return note

    def _stop(self) -> None:
        self.player.cancel()
        self.last_result = None
        self.editor.locked = False

    def set_algorithm(self, algorithm: Algorithm | str) -> None:
        algorithm = Algorithm(algorithm)
        self._stop()
        self.editor.cancel_anchor()
        self.algorithm = algorithm
        if algorithm is Algorithm.TSP:
            self.store.set_end(None)
        logger.debug("Algorithm -> %s", algorithm.value)

    def set_mode(self, mode: EditorMode | str) -> None:
        self.editor.set_mode(mode)

    def visualize(self) -> Optional[AlgoResult]:
        """Compute the selected algorithm and start animating it.

        Returns ``None`` (after posting an error notification) when the inputs
        are not valid; the previous state is left untouched in that case.
        """
        end = self.store.end if self.algorithm.needs_end else None
        try:
            result = run_algorithm(self.store, self.algorithm, self.store.start, end)
        except ValidationError as e:
            logger.warning("Visualization rejected: %s", e)
            self.notify("error", str(e))
            return None

        self._stop()
        self.editor.cancel_anchor()
        self.last_result = result
        self.editor.locked = True
        try:
            self.player.play(result)
        except Exception:
            # e.g. no running event loop; leave the editor usable
            self._stop()
            raise
        return result

    def _on_complete(self, summary: PlaybackSummary) -> None:
        self.editor.locked = False
        if not summary.found:
            self.notify("info", "No path found")
        elif self.algorithm is Algorithm.TSP:
            self.notify("success", f"Tour: {summary.path_string} (cost {summary.total_cost:.2f})")
        else:
            self.notify("success", f"Path: {summary.path_string} (cost {summary.total_cost:.2f})")

    def clear_visualization(self) -> None:
        self._stop()

    def reset(self) -> None:
        self._stop()
        self.store.clear()
        self.editor.cancel_anchor()
        self.editor.refresh_selection()

    def delete_selected(self) -> int:
        count = self.editor.delete_selected()
        self.editor.refresh_selection()
        return count

    def copy_selected(self) -> int:
        return len(self.editor.copy_selected())

    def snapshot(self) -> Dict[str, Any]:
        sel = self.editor.selection
        if isinstance(sel, (NodeSelection, EdgeSelection)):
            selected = sorted(sel.ids, key=str)
        else:
            selected = []
        step = self.player.current_step
        summary = self.player.summary
        return {
            "graph": graph_to_payload(self.store),
            "mode": self.editor.mode.value,
            "algorithm": self.algorithm.value,
            "pending_anchor": self.editor.pending_anchor,
            "selection": {"kind": selection_kind(sel), "ids": selected},
            "locked": self.editor.locked,
            "player": {
                "state": self.player.state.value,
                "index": self.player.index,
                "total_steps": self.player.total_steps,
                "step": step_to_payload(step) if step is not None else None,
            },
            "result": (
                {"path_string": summary.path_string, "total_cost": summary.total_cost, "found": summary.found}
                if summary is not None
                else None
            ),
            "notifications": [{"level": n.level, "message": n.message} for n in self.notifications],
        }
