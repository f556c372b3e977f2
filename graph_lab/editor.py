from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Protocol

from .config import LabSettings
from .geometry import Hit, hit_test
from .graph import Edge, GraphStore, Node, NodeId
from .selection import (
    EMPTY,
    EdgeSelection,
    NodeSelection,
    Selection,
    prune,
    select_edge,
    select_node,
)

logger = logging.getLogger(__name__)


class EditorMode(str, Enum):
    ADD_NODE = "addNode"
    ADD_EDGE = "addEdge"
    SET_START = "setStart"
    SET_END = "setEnd"
    SELECT = "select"
    EDIT = "edit"


class EditorLockedError(RuntimeError):
    """The graph cannot be changed while a visualization is playing."""


class EditDialog(Protocol):
    async def prompt(self, title: str, initial: str) -> Optional[str]:
        """Ask the user for a value; ``None`` means cancelled."""
        ...


class StaticEditDialog:
    """Answers prompts from a fixed list of responses, in order."""

    def __init__(self, responses: Iterable[Optional[str]] = ()) -> None:
        self.responses: List[Optional[str]] = list(responses)
        self.asked: List[str] = []

    async def prompt(self, title: str, initial: str) -> Optional[str]:
        self.asked.append(title)
        if not self.responses:
            return None
        return self.responses.pop(0)


@dataclass
class PendingPrompt:
    title: str
    initial: str
    future: "asyncio.Future[Optional[str]]"


class PendingEditDialog:
    """Prompt that stays open until someone calls :meth:`answer` or :meth:`cancel`.

    Only one prompt can be open at a time.
    """

    def __init__(self) -> None:
        self.pending: Optional[PendingPrompt] = None

    async def prompt(self, title: str, initial: str) -> Optional[str]:
        if self.pending is not None:
            raise RuntimeError("Another edit prompt is already open")
        future: "asyncio.Future[Optional[str]]" = asyncio.get_running_loop().create_future()
        self.pending = PendingPrompt(title=title, initial=initial, future=future)
        try:
            return await future
        finally:
            self.pending = None

    def answer(self, value: Optional[str]) -> None:
        if self.pending is None:
            raise RuntimeError("No edit prompt is open")
        if not self.pending.future.done():
            self.pending.future.set_result(value)

    def cancel(self) -> None:
        if self.pending is not None and not self.pending.future.done():
            self.pending.future.set_result(None)


@dataclass(frozen=True)
class ClickOutcome:
    action: str
    node: Optional[Node] = None
    edge: Optional[Edge] = None


def parse_weight(raw: Optional[str]) -> Optional[float]:
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


class Editor:
    """Turns canvas clicks into graph mutations according to the active mode."""

    def __init__(
        self,
        store: GraphStore,
        settings: Optional[LabSettings] = None,
        dialog: Optional[EditDialog] = None,
    ) -> None:
        self.store = store
        self.settings = settings or LabSettings()
        self.dialog: EditDialog = dialog or StaticEditDialog()
        self.mode = EditorMode.ADD_NODE
        self.pending_anchor: Optional[NodeId] = None
        self.selection: Selection = EMPTY
        self.locked = False

    def _check_unlocked(self, what: str) -> None:
        if self.locked:
            raise EditorLockedError(f"Cannot {what} while a visualization is playing")

    def set_mode(self, mode: EditorMode | str) -> None:
        self._check_unlocked("switch modes")
        self.mode = EditorMode(mode)
        self.pending_anchor = None
        logger.debug("Editor mode -> %s", self.mode.value)

    def cancel_anchor(self) -> None:
        self.pending_anchor = None

    def hit(self, x: float, y: float) -> Hit:
        return hit_test(
            self.store,
            x,
            y,
            node_radius=self.settings.click_threshold,
            edge_tolerance=self.settings.edge_tolerance,
        )

    async def handle_click(self, x: float, y: float, *, modifier: bool = False) -> ClickOutcome:
        """Apply a single pointer click at canvas coordinates ``(x, y)``.

        ``modifier`` is the Ctrl/Cmd state; it only matters in select mode.
        """
        if self.mode is EditorMode.SELECT:
            return self._click_select(x, y, modifier)
        self._check_unlocked("edit the graph")

        if self.mode is EditorMode.ADD_NODE:
            return self._click_add_node(x, y)
        if self.mode is EditorMode.ADD_EDGE:
            return self._click_add_edge(x, y)
        if self.mode in (EditorMode.SET_START, EditorMode.SET_END):
            return self._click_set_terminal(x, y)
        return await self._click_edit(x, y)

    def _click_add_node(self, x: float, y: float) -> ClickOutcome:
        hit = self.hit(x, y)
        if hit.node is not None:
            return ClickOutcome("ignored", node=hit.node)
        return ClickOutcome("node_added", node=self.store.add_node(x, y))

    def _click_add_edge(self, x: float, y: float) -> ClickOutcome:
        hit = self.hit(x, y)
        if hit.node is None:
            self.pending_anchor = None
            return ClickOutcome("anchor_cleared")
        if self.pending_anchor is None or self.pending_anchor not in self.store.nodes:
            self.pending_anchor = hit.node.id
            return ClickOutcome("anchor_set", node=hit.node)
        if hit.node.id == self.pending_anchor:
            return ClickOutcome("ignored", node=hit.node)

        anchor = self.pending_anchor
        self.pending_anchor = None
        edge = self.store.add_edge(anchor, hit.node.id)
        if edge is None:
            return ClickOutcome("duplicate_edge", node=hit.node)
        return ClickOutcome("edge_added", edge=edge)

    def _click_set_terminal(self, x: float, y: float) -> ClickOutcome:
        hit = self.hit(x, y)
        if hit.node is None:
            return ClickOutcome("ignored")
        if self.mode is EditorMode.SET_START:
            self.store.set_start(hit.node.id)
            return ClickOutcome("start_set", node=hit.node)
        self.store.set_end(hit.node.id)
        return ClickOutcome("end_set", node=hit.node)

    def _click_select(self, x: float, y: float, modifier: bool) -> ClickOutcome:
        hit = self.hit(x, y)
        if hit.node is not None:
            self.selection = select_node(self.selection, hit.node.id, toggle=modifier)
            return ClickOutcome("selected", node=hit.node)
        if hit.edge is not None:
            self.selection = select_edge(self.selection, hit.edge.id, toggle=modifier)
            return ClickOutcome("selected", edge=hit.edge)
        if not modifier:
            self.selection = EMPTY
            return ClickOutcome("selection_cleared")
        return ClickOutcome("ignored")

    async def _click_edit(self, x: float, y: float) -> ClickOutcome:
        hit = self.hit(x, y)
        if hit.node is not None:
            node = hit.node
            value = await self.dialog.prompt(f"Label for node {node.id}", node.label or "")
            # A visualization may have started while the prompt was open.
            if value is None or self.locked or node.id not in self.store.nodes:
                return ClickOutcome("edit_cancelled", node=node)
            self.store.update_node_label(node.id, value)
            return ClickOutcome("label_updated", node=node)

        if hit.edge is not None:
            edge = hit.edge
            raw = await self.dialog.prompt(f"Weight for edge {edge.id}", f"{edge.weight:g}")
            weight = parse_weight(raw)
            if weight is None or self.locked or edge.id not in self.store.edges:
                if raw is not None and not self.locked:
                    logger.warning("Rejected edge weight %r for %s", raw, edge.id)
                return ClickOutcome("edit_cancelled", edge=edge)
            self.store.update_edge_weight(edge.id, weight)
            return ClickOutcome("weight_updated", edge=edge)

        return ClickOutcome("ignored")

    def delete_selected(self) -> int:
        self._check_unlocked("delete")
        sel = self.selection
        count = 0
        if isinstance(sel, NodeSelection):
            count = len(sel.ids)
            self.store.delete_nodes(sel.ids)
            if self.pending_anchor in sel.ids:
                self.pending_anchor = None
        elif isinstance(sel, EdgeSelection):
            count = len(sel.ids)
            self.store.delete_edges(sel.ids)
        self.selection = EMPTY
        return count

    def copy_selected(self) -> List[Node]:
        self._check_unlocked("copy")
        if not isinstance(self.selection, NodeSelection):
            return []
        ordered = [n for n in self.store.nodes if n in self.selection.ids]
        copies = self.store.duplicate_nodes(ordered, offset=self.settings.copy_offset)
        self.selection = NodeSelection(frozenset(n.id for n in copies)) if copies else EMPTY
        return copies

    def refresh_selection(self) -> None:
        self.selection = prune(self.selection, self.store)
        if self.pending_anchor is not None and self.pending_anchor not in self.store.nodes:
            self.pending_anchor = None
