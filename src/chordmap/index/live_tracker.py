from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from chordmap.keys.dsl import normalize_live_chord
from chordmap.keys.ir import ParsedBinding

from .prefix_tree import PrefixTree, find_node
from .scheduler import Scheduler, ThreadingScheduler, TimerHandle

logger = logging.getLogger(__name__)

COMPLETES_MARKER = "(completes)"
DEFAULT_TIMEOUT_MS = 3000

SequenceListener = Callable[[Tuple[str, ...]], None]


class LiveTrackerState(BaseModel):
    """Snapshot of the tracker; ``quiescent`` means the timeout has elapsed."""

    model_config = ConfigDict(frozen=True)

    active: bool = False
    sequence: Tuple[str, ...] = ()
    quiescent: bool = False


class Subscription:
    """Handle returned by ``subscribe``; ``unsubscribe`` is idempotent."""

    def __init__(self, tracker: LiveSequenceTracker, listener: SequenceListener) -> None:
        self._tracker = tracker
        self._listener: Optional[SequenceListener] = listener

    def unsubscribe(self) -> None:
        if self._listener is None:
            return
        self._tracker._remove_listener(self._listener)
        self._listener = None


class LiveSequenceTracker:
    """Accumulate chord events into a sequence that narrows the binding set.

    Idle -> Armed (``activate``) -> Tracking (``key_event``). When the timer
    fires the sequence is dropped silently; the next event starts over.
    """

    def __init__(
        self,
        *,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        if timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be positive, got: {timeout_ms}")
        self._timeout = timeout_ms / 1000
        self._scheduler = scheduler or ThreadingScheduler()
        self._lock = threading.RLock()
        self._listeners: List[SequenceListener] = []
        self._timer: Optional[TimerHandle] = None
        self._active = False
        self._sequence: List[str] = []
        self._quiescent = False

    @property
    def state(self) -> LiveTrackerState:
        with self._lock:
            return LiveTrackerState(
                active=self._active,
                sequence=tuple(self._sequence),
                quiescent=self._quiescent,
            )

    def is_active(self) -> bool:
        return self._active

    def get_current_sequence(self) -> List[str]:
        with self._lock:
            return list(self._sequence)

    def subscribe(self, listener: SequenceListener) -> Subscription:
        with self._lock:
            self._listeners.append(listener)
        return Subscription(self, listener)

    def activate(self) -> None:
        with self._lock:
            self._active = True
            self._sequence = []
            self._quiescent = False

    def deactivate(self) -> None:
        with self._lock:
            self._active = False
            self._cancel_timer()
            self._sequence = []
            self._quiescent = False
            self._notify()

    def toggle(self) -> bool:
        with self._lock:
            if self._active:
                self.deactivate()
            else:
                self.activate()
            return self._active

    def reset(self) -> None:
        with self._lock:
            if not self._active:
                return
            self._cancel_timer()
            self._sequence = []
            self._quiescent = False
            self._notify()

    def key_event(self, chord: str) -> None:
        chord = normalize_live_chord(chord) if chord else ""
        with self._lock:
            if not self._active:
                logger.debug("ignoring chord %r while inactive", chord)
                return
            if not chord:
                return

            if self._quiescent:
                self._sequence = [chord]
                self._quiescent = False
            else:
                self._sequence.append(chord)

            self._notify()
            self._restart_timer()

    def dispose(self) -> None:
        with self._lock:
            self.deactivate()
            self._listeners.clear()

    def filter_bindings(self, bindings: List[ParsedBinding]) -> List[ParsedBinding]:
        """Keep bindings equal to the live sequence or extending it."""

        with self._lock:
            if not self._sequence:
                return bindings
            current = " ".join(self._sequence).lower()

        prefix = current + " "
        matched: List[ParsedBinding] = []
        for binding in bindings:
            key = " ".join(binding.key_sequence).lower()
            if key == current or key.startswith(prefix):
                matched.append(binding)
        return matched

    def get_next_possible_keys(self, tree: PrefixTree) -> List[str]:
        """Canonical chords that may follow the live sequence.

        ``COMPLETES_MARKER`` is included when the sequence is itself bound.
        """

        with self._lock:
            sequence = list(self._sequence)

        if not sequence:
            return list(tree.keys())

        node = find_node(tree, sequence)
        if node is None:
            return []

        next_keys = list(node.children.keys())
        if node.bindings:
            next_keys.append(COMPLETES_MARKER)
        return next_keys

    def _restart_timer(self) -> None:
        self._cancel_timer()
        handle: Optional[TimerHandle] = None

        def _expire() -> None:
            with self._lock:
                # A replaced or cancelled timer may still fire once on another thread.
                if self._timer is not handle:
                    return
                self._timer = None
                self._sequence = []
                self._quiescent = True

        handle = self._scheduler.call_later(self._timeout, _expire)
        self._timer = handle

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _remove_listener(self, listener: SequenceListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _notify(self) -> None:
        sequence = tuple(self._sequence)
        for listener in list(self._listeners):
            try:
                listener(sequence)
            except Exception:
                logger.exception("sequence listener failed")
