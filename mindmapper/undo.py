"""Undo history for MindMapper."""

import time
from copy import deepcopy
from dataclasses import dataclass
from enum import Enum
from typing import Optional, List, Tuple, Callable, Iterable

from loguru import logger

from mindmapper.models import Node, Edge

DEFAULT_HISTORY_LIMIT = 21
DEFAULT_DEBOUNCE = 0.1


class LockState(Enum):
    """States of the push debounce lock."""
    IDLE = "idle"
    LOCKED = "locked"


class PushLock:
    """Debounce lock: idle -> locked for ``window`` seconds -> idle.

    The clock is injectable so tests can drive it with virtual time.
    """

    def __init__(self, window: float = DEFAULT_DEBOUNCE,
                 clock: Optional[Callable[[], float]] = None):
        self.window = window
        self.clock = clock or time.monotonic
        self._locked_at: Optional[float] = None

    @property
    def state(self) -> LockState:
        if self._locked_at is None:
            return LockState.IDLE
        if self.clock() - self._locked_at >= self.window:
            self._locked_at = None
            return LockState.IDLE
        return LockState.LOCKED

    def acquire(self) -> bool:
        """Enter the locked state; False if the window is still open."""
        if self.state is LockState.LOCKED:
            return False
        self._locked_at = self.clock()
        return True

    def release(self):
        self._locked_at = None


@dataclass(frozen=True)
class HistoryEntry:
    """Deep copy of the whole graph at one point in time."""
    nodes: Tuple[Node, ...]
    edges: Tuple[Edge, ...]


class HistoryManager:
    """Bounded, pop-only snapshot stack.

    The last entry is the state after the last committed edit. There is no
    redo: an entry discarded by ``undo`` is gone.
    """

    def __init__(self, max_entries: int = DEFAULT_HISTORY_LIMIT,
                 debounce: float = DEFAULT_DEBOUNCE,
                 clock: Optional[Callable[[], float]] = None):
        self.max_entries = max_entries
        self.lock = PushLock(debounce, clock)
        self._stack: List[HistoryEntry] = []

        # Callbacks
        self.on_state_changed: Optional[Callable[[], None]] = None

    def __len__(self) -> int:
        return len(self._stack)

    @property
    def can_undo(self) -> bool:
        return len(self._stack) >= 2

    @property
    def entries(self) -> Tuple[HistoryEntry, ...]:
        return tuple(self._stack)

    def matches_top(self, nodes: Iterable[Node], edges: Iterable[Edge]) -> bool:
        """True if the newest entry already holds exactly this state."""
        if not self._stack:
            return False
        top = self._stack[-1]
        return top.nodes == tuple(nodes) and top.edges == tuple(edges)

    @staticmethod
    def _snapshot(nodes: Iterable[Node], edges: Iterable[Edge]) -> HistoryEntry:
        return HistoryEntry(tuple(deepcopy(list(nodes))), tuple(deepcopy(list(edges))))

    def push(self, nodes: Iterable[Node], edges: Iterable[Edge],
             checkpoint: bool = False) -> bool:
        """Record a snapshot unless a push landed less than one window ago.

        A ``checkpoint`` push closes a command that already pushed its
        "before" state: it is always recorded and restarts the window.
        """
        if not self.lock.acquire():
            if not checkpoint:
                logger.debug("History push dropped inside debounce window")
                return False
            self.lock.release()
            self.lock.acquire()

        self._stack.append(self._snapshot(nodes, edges))
        while len(self._stack) > self.max_entries:
            self._stack.pop(0)

        self._notify_changed()
        return True

    def undo(self) -> Optional[HistoryEntry]:
        """Discard the current entry and return the one to restore."""
        if not self.can_undo:
            return None
        self._stack.pop()
        self._notify_changed()
        return self._stack[-1]

    def reset(self, nodes: Iterable[Node], edges: Iterable[Edge]):
        """Start over with a single entry, leaving the lock idle."""
        self._stack = [self._snapshot(nodes, edges)]
        self.lock.release()
        self._notify_changed()

    def clear(self):
        self._stack.clear()
        self.lock.release()
        self._notify_changed()

    def _notify_changed(self):
        if self.on_state_changed:
            self.on_state_changed()
