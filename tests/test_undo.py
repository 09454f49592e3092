"""Tests for the snapshot history and its debounce lock."""

import pytest

from mindmapper.models import Node, Edge
from mindmapper.undo import HistoryManager, PushLock, LockState


def _state(i):
    return [Node(str(i), label=f"n{i}")], [Edge(f"e{i}", "0", str(i))]


class TestPushLock:

    def test_state_machine(self, clock):
        lock = PushLock(window=0.1, clock=clock)
        assert lock.state is LockState.IDLE
        assert lock.acquire() is True
        assert lock.state is LockState.LOCKED
        assert lock.acquire() is False

        clock.advance(0.1)
        assert lock.state is LockState.IDLE
        assert lock.acquire() is True

    def test_release(self, clock):
        lock = PushLock(window=0.1, clock=clock)
        lock.acquire()
        lock.release()
        assert lock.state is LockState.IDLE


class TestHistoryManager:

    @pytest.fixture
    def history(self, clock):
        return HistoryManager(max_entries=21, debounce=0.1, clock=clock)

    def test_push_inside_window_is_dropped(self, history, clock):
        assert history.push(*_state(1)) is True
        assert history.push(*_state(2)) is False
        clock.advance(0.05)
        assert history.push(*_state(3)) is False
        clock.advance(0.05)
        assert history.push(*_state(4)) is True
        assert [e.nodes[0].id for e in history.entries] == ["1", "4"]

    def test_checkpoint_push_is_never_dropped(self, history, clock):
        history.push(*_state(1))
        assert history.push(*_state(2), checkpoint=True) is True
        assert history.lock.state is LockState.LOCKED
        clock.advance(0.05)
        assert history.push(*_state(3)) is False
        assert len(history) == 2

    def test_matches_top(self, history):
        assert history.matches_top(*_state(1)) is False
        history.push(*_state(1))
        assert history.matches_top(*_state(1)) is True
        assert history.matches_top(*_state(2)) is False

    def test_entries_are_copies(self, history):
        nodes, edges = _state(1)
        history.push(nodes, edges)
        nodes.append(Node("extra"))
        edges.clear()
        entry = history.entries[0]
        assert [n.id for n in entry.nodes] == ["1"]
        assert len(entry.edges) == 1

    def test_bounded_to_most_recent_entries(self, history, clock):
        for i in range(30):
            history.push(*_state(i))
            clock.advance(1)

        assert len(history) == 21
        assert history.entries[0].nodes[0].id == "9"

        steps = 0
        while history.undo() is not None:
            steps += 1
        assert steps == 20
        assert len(history) == 1
        assert history.entries[-1].nodes[0].id == "9"

    def test_undo_returns_entry_to_restore(self, history, clock):
        history.push(*_state(1))
        clock.advance(1)
        history.push(*_state(2))

        entry = history.undo()
        assert entry.nodes[0].id == "1"
        assert len(history) == 1

    def test_undo_needs_two_entries(self, history):
        assert history.undo() is None
        history.push(*_state(1))
        assert history.can_undo is False
        assert history.undo() is None
        assert len(history) == 1

    def test_reset_leaves_lock_idle(self, history):
        history.push(*_state(1))
        history.reset(*_state(2))
        assert len(history) == 1
        assert history.push(*_state(3)) is True
        assert len(history) == 2

    def test_clear(self, history):
        history.push(*_state(1))
        history.clear()
        assert len(history) == 0

    def test_state_changed_callback(self, history, clock):
        calls = []
        history.on_state_changed = lambda: calls.append(len(history))
        history.push(*_state(1))
        history.push(*_state(2))  # dropped, no notification
        clock.advance(1)
        history.push(*_state(3))
        history.undo()
        assert calls == [1, 2, 1]
