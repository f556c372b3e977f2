from __future__ import annotations

import asyncio
import logging
import os
import sys
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

# Allow running `python backend/app.py` from repo root.
_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel, Field

from graph_lab.algorithms import ALGORITHM_CHOICES, Algorithm, run_algorithm
from graph_lab.config import LabSettings
from graph_lab.editor import ClickOutcome, EditorLockedError, EditorMode, PendingEditDialog
from graph_lab.serialize import graph_from_payload, result_to_payload
from graph_lab.session import LabSession
from graph_lab.viz import build_plotly_figure, render_thumbnail

logger = logging.getLogger(__name__)

MAX_SESSIONS = 256
# Seconds a session may sit untouched before the next create_session drops it.
SESSION_IDLE_TTL = float(os.environ.get("GRAPH_LAB_SESSION_TTL", "1800"))


@dataclass
class SessionHandle:
    session: LabSession
    dialog: PendingEditDialog
    edit_task: Optional["asyncio.Task[ClickOutcome]"] = None
    last_seen: float = field(default_factory=time.monotonic)


_sessions: Dict[str, SessionHandle] = {}


def _settings() -> LabSettings:
    return LabSettings.from_env()


def _get_handle(session_id: str) -> SessionHandle:
    handle = _sessions.get(session_id)
    if handle is None:
        raise HTTPException(status_code=404, detail="Session not found")
    handle.last_seen = time.monotonic()
    return handle


def _outcome_payload(outcome: ClickOutcome) -> Dict[str, Any]:
    return {
        "action": outcome.action,
        "node": outcome.node.id if outcome.node is not None else None,
        "edge": outcome.edge.id if outcome.edge is not None else None,
    }


def _state(handle: SessionHandle) -> Dict[str, Any]:
    out = handle.session.snapshot()
    pending = handle.dialog.pending
    out["prompt"] = {"title": pending.title, "initial": pending.initial} if pending is not None else None
    return out


async def _close_prompt(handle: SessionHandle) -> None:
    handle.dialog.cancel()
    task = handle.edit_task
    handle.edit_task = None
    if task is not None:
        await task


def _require_no_prompt(handle: SessionHandle) -> None:
    if handle.dialog.pending is not None:
        raise HTTPException(status_code=409, detail="An edit prompt is waiting for an answer")


async def _drop_session(session_id: str) -> None:
    handle = _sessions.pop(session_id)
    await _close_prompt(handle)
    handle.session.clear_visualization()


async def _evict_idle(now: float) -> None:
    stale = [sid for sid, h in _sessions.items() if now - h.last_seen > SESSION_IDLE_TTL]
    for sid in stale:
        await _drop_session(sid)
    if stale:
        logger.info("Evicted %d idle session(s)", len(stale))


class GraphPayload(BaseModel):
    nodes: List[Dict[str, Any]] = Field(default_factory=list)
    edges: List[Dict[str, Any]] = Field(default_factory=list)
    start: Optional[int] = None
    end: Optional[int] = None


class CreateSessionRequest(BaseModel):
    graph: Optional[GraphPayload] = None


class ModeRequest(BaseModel):
    mode: EditorMode


class ClickRequest(BaseModel):
    x: float
    y: float
    modifier: bool = False


class AlgorithmRequest(BaseModel):
    algorithm: Algorithm


class VisualizeRequest(BaseModel):
    instant: bool = False


class EditAnswerRequest(BaseModel):
    value: Optional[str] = None
    cancel: bool = False


class RunRequest(BaseModel):
    graph: GraphPayload
    algorithm: str = Field(default="bfs")
    start: Optional[int] = None
    end: Optional[int] = None
    include_steps: bool = True


app = FastAPI(title="Graph Lab API", version="0.1.0")

cors_raw = os.environ.get("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")
cors_list = [c.strip() for c in cors_raw.split(",") if c.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_list or ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# Session endpoints are async so that every session is only ever touched from
# the event loop thread that also runs its step player.


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/algorithms")
def list_algorithms() -> Dict[str, Any]:
    return {"algorithms": list(ALGORITHM_CHOICES)}


@app.post("/run")
def run(req: RunRequest) -> Dict[str, Any]:
    try:
        store = graph_from_payload(req.graph.model_dump())
    except (KeyError, ValueError, TypeError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid graph: {e}") from e
    start = req.start if req.start is not None else store.start
    end = req.end if req.end is not None else store.end
    try:
        result = run_algorithm(store, req.algorithm, start, end)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return result_to_payload(result, include_steps=req.include_steps)


@app.post("/sessions")
async def create_session(req: Optional[CreateSessionRequest] = None) -> Dict[str, Any]:
    await _evict_idle(time.monotonic())
    if len(_sessions) >= MAX_SESSIONS:
        raise HTTPException(status_code=429, detail="Too many open sessions")
    store = None
    if req is not None and req.graph is not None:
        try:
            store = graph_from_payload(req.graph.model_dump())
        except (KeyError, ValueError, TypeError) as e:
            raise HTTPException(status_code=400, detail=f"Invalid graph: {e}") from e
    dialog = PendingEditDialog()
    session = LabSession(_settings(), store=store, dialog=dialog)
    session_id = uuid.uuid4().hex
    handle = SessionHandle(session=session, dialog=dialog)
    _sessions[session_id] = handle
    logger.info("Created session %s", session_id)
    return {"id": session_id, "state": _state(handle)}


@app.get("/sessions/{session_id}")
async def get_session(session_id: str) -> Dict[str, Any]:
    return _state(_get_handle(session_id))


@app.delete("/sessions/{session_id}")
async def delete_session(session_id: str) -> Dict[str, Any]:
    _get_handle(session_id)
    await _drop_session(session_id)
    return {"deleted": True}


@app.post("/sessions/{session_id}/mode")
async def set_mode(session_id: str, req: ModeRequest) -> Dict[str, Any]:
    handle = _get_handle(session_id)
    _require_no_prompt(handle)
    try:
        handle.session.set_mode(req.mode)
    except EditorLockedError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    return _state(handle)


@app.post("/sessions/{session_id}/click")
async def click(session_id: str, req: ClickRequest) -> Dict[str, Any]:
    handle = _get_handle(session_id)
    _require_no_prompt(handle)
    task = asyncio.ensure_future(handle.session.editor.handle_click(req.x, req.y, modifier=req.modifier))
    # Let the click run until it either finishes or blocks on the edit prompt.
    await asyncio.sleep(0)
    if not task.done():
        handle.edit_task = task
        return {"outcome": None, "state": _state(handle)}
    try:
        outcome = task.result()
    except EditorLockedError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    return {"outcome": _outcome_payload(outcome), "state": _state(handle)}


@app.post("/sessions/{session_id}/edit")
async def answer_edit(session_id: str, req: EditAnswerRequest) -> Dict[str, Any]:
    handle = _get_handle(session_id)
    task = handle.edit_task
    if handle.dialog.pending is None or task is None:
        raise HTTPException(status_code=409, detail="No edit prompt is open")
    if req.cancel:
        handle.dialog.cancel()
    else:
        handle.dialog.answer(req.value)
    handle.edit_task = None
    outcome = await task
    return {"outcome": _outcome_payload(outcome), "state": _state(handle)}


@app.post("/sessions/{session_id}/algorithm")
async def set_algorithm(session_id: str, req: AlgorithmRequest) -> Dict[str, Any]:
    handle = _get_handle(session_id)
    handle.session.set_algorithm(req.algorithm)
    return _state(handle)


@app.post("/sessions/{session_id}/visualize")
async def visualize(session_id: str, req: Optional[VisualizeRequest] = None) -> Dict[str, Any]:
    handle = _get_handle(session_id)
    _require_no_prompt(handle)
    result = handle.session.visualize()
    if result is None:
        note = handle.session.notifications[-1]
        raise HTTPException(status_code=400, detail=note.message)
    if req is not None and req.instant:
        handle.session.player.skip_to_end()
    return _state(handle)


@app.post("/sessions/{session_id}/reset")
async def reset(session_id: str) -> Dict[str, Any]:
    handle = _get_handle(session_id)
    await _close_prompt(handle)
    handle.session.reset()
    return _state(handle)


@app.post("/sessions/{session_id}/selection/delete")
async def delete_selection(session_id: str) -> Dict[str, Any]:
    handle = _get_handle(session_id)
    _require_no_prompt(handle)
    try:
        deleted = handle.session.delete_selected()
    except EditorLockedError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    return {"deleted": deleted, "state": _state(handle)}


@app.post("/sessions/{session_id}/selection/copy")
async def copy_selection(session_id: str) -> Dict[str, Any]:
    handle = _get_handle(session_id)
    _require_no_prompt(handle)
    try:
        copied = handle.session.copy_selected()
    except EditorLockedError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    return {"copied": copied, "state": _state(handle)}


@app.get("/sessions/{session_id}/figure")
async def get_figure(session_id: str) -> Response:
    handle = _get_handle(session_id)
    session = handle.session
    fig = build_plotly_figure(session.store, step=session.player.current_step)
    return Response(fig.to_json(), media_type="application/json")


@app.get("/sessions/{session_id}/thumbnail")
async def get_thumbnail(session_id: str) -> Response:
    handle = _get_handle(session_id)
    session = handle.session
    png = render_thumbnail(session.store, step=session.player.current_step)
    return Response(png, media_type="image/png")
