import asyncio

import pytest

from conftest import build_store
from graph_lab.algorithms import Algorithm
from graph_lab.config import LabSettings
from graph_lab.editor import EditorLockedError, EditorMode, PendingEditDialog
from graph_lab.player import PlayerState
from graph_lab.session import LabSession

FAST = LabSettings(step_interval_ms=1)
SLOW = LabSettings(step_interval_ms=10_000)


def triangle_session(settings=FAST, **kwargs):
    store = build_store({1: (0, 0), 2: (10, 0), 3: (10, 10)}, [(1, 2, 10.0), (2, 3, 10.0)], start=1, end=3)
    return LabSession(settings, store=store, **kwargs)


def test_visualize_runs_to_completion_and_unlocks():
    received = []

    async def scenario():
        session = triangle_session(notify=received.append)
        result = session.visualize()
        assert result is not None
        assert session.playing
        assert session.editor.locked
        await session.player.wait()
        return session

    session = asyncio.run(scenario())
    assert session.player.state is PlayerState.COMPLETED
    assert not session.editor.locked
    assert session.player.summary.path_string == "1 → 2 → 3"
    assert received[-1].level == "success"
    assert "1 → 2 → 3" in received[-1].message


def test_validation_failure_is_reported_and_changes_nothing():
    session = LabSession(FAST)
    session.store.add_node(0, 0)
    assert session.visualize() is None
    assert session.notifications[-1].level == "error"
    assert "start" in session.notifications[-1].message
    assert session.player.state is PlayerState.IDLE
    assert not session.editor.locked

    session.store.set_start(1)
    session.set_algorithm(Algorithm.TSP)
    assert session.visualize() is None
    assert "2 nodes" in session.notifications[-1].message


def test_no_path_is_an_info_notification():
    async def scenario():
        store = build_store({1: (0, 0), 2: (100, 0)}, [], start=1, end=2)
        session = LabSession(FAST, store=store)
        session.visualize()
        await session.player.wait()
        return session

    session = asyncio.run(scenario())
    assert session.player.summary.found is False
    assert session.notifications[-1].level == "info"


def test_switching_algorithm_while_playing_cancels_playback():
    async def scenario():
        session = triangle_session(SLOW)
        revealed = []
        session.player.on_step = lambda i, s: revealed.append(i)
        session.visualize()
        assert revealed == [0]
        session.set_algorithm(Algorithm.TSP)
        # give any orphaned timer a chance to fire
        await asyncio.sleep(0.01)
        session.player.interval = 0.0
        await asyncio.sleep(0.01)
        return session, revealed

    session, revealed = asyncio.run(scenario())
    assert revealed == [0]
    assert session.player.state is PlayerState.IDLE
    assert session.player.current_step is None
    assert session.last_result is None
    assert session.store.end is None
    assert not session.editor.locked


def test_edits_are_blocked_while_playing():
    async def scenario():
        session = triangle_session(SLOW)
        session.visualize()
        with pytest.raises(EditorLockedError):
            session.set_mode(EditorMode.ADD_NODE)
        with pytest.raises(EditorLockedError):
            await session.editor.handle_click(500, 500)
        session.clear_visualization()
        session.set_mode(EditorMode.ADD_NODE)
        await session.editor.handle_click(500, 500)
        return session

    session = asyncio.run(scenario())
    assert len(session.store) == 4


def test_new_visualization_replaces_running_one():
    async def scenario():
        session = triangle_session(SLOW)
        session.visualize()
        first_generation = session.player.generation
        session.set_algorithm(Algorithm.DFS)
        session.store.set_end(3)
        session.visualize()
        assert session.player.generation > first_generation
        session.player.skip_to_end()
        return session

    session = asyncio.run(scenario())
    assert session.player.summary.path_string == "1 → 2 → 3"
    assert session.last_result.algorithm is Algorithm.DFS


def test_switching_to_tsp_clears_end_only():
    session = triangle_session()
    session.editor.set_mode(EditorMode.ADD_EDGE)
    session.editor.pending_anchor = 1
    session.set_algorithm("tsp")
    assert session.store.end is None
    assert session.store.start == 1
    assert session.editor.pending_anchor is None

    session.set_algorithm("bfs")
    assert session.store.start == 1


def test_reset_clears_graph():
    session = triangle_session()
    session.editor.set_mode(EditorMode.SELECT)
    asyncio.run(session.editor.handle_click(0, 0))
    session.reset()
    assert len(session.store) == 0
    assert session.store.edges == {}
    assert session.store.start is None
    assert session.snapshot()["selection"] == {"kind": "empty", "ids": []}


def test_delete_selected_prunes_anchor_and_selection():
    session = triangle_session()
    session.editor.set_mode(EditorMode.SELECT)
    asyncio.run(session.editor.handle_click(10, 10))
    assert session.delete_selected() == 1
    assert session.store.end is None
    assert session.snapshot()["graph"]["edges"] == [{"id": "1-2", "from": 1, "to": 2, "weight": 10.0}]


def test_snapshot_shape():
    async def scenario():
        session = triangle_session()
        session.visualize()
        session.player.skip_to_end()
        return session.snapshot()

    snap = asyncio.run(scenario())
    assert snap["algorithm"] == "bfs"
    assert snap["mode"] == "addNode"
    assert snap["player"]["state"] == "completed"
    assert snap["player"]["step"]["path"] == [1, 2, 3]
    assert snap["result"] == {"path_string": "1 → 2 → 3", "total_cost": 20.0, "found": True}
    assert [n["id"] for n in snap["graph"]["nodes"]] == [1, 2, 3]


def test_edit_answered_after_playback_starts_is_discarded():
    async def scenario():
        dialog = PendingEditDialog()
        store = build_store({1: (0, 0), 2: (100, 0), 3: (100, 100)}, [(1, 2, 10.0), (2, 3, 10.0)], start=1, end=3)
        session = LabSession(SLOW, store=store, dialog=dialog)
        session.set_mode(EditorMode.EDIT)
        click = asyncio.ensure_future(session.editor.handle_click(50, 2))
        await asyncio.sleep(0)
        assert dialog.pending.title == "Weight for edge 1-2"

        session.visualize()
        dialog.answer("999")
        outcome = await click
        state = session.player.state
        session.clear_visualization()
        return session, outcome, state

    session, outcome, state = asyncio.run(scenario())
    assert outcome.action == "edit_cancelled"
    assert session.store.edges["1-2"].weight == 10.0
    assert state is PlayerState.PLAYING


def test_visualize_without_event_loop_leaves_editor_usable():
    session = triangle_session()
    with pytest.raises(RuntimeError):
        session.visualize()
    assert not session.editor.locked
    assert session.player.state is PlayerState.IDLE
    assert session.last_result is None
    session.set_mode(EditorMode.ADD_NODE)
