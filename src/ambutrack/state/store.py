"""In-memory tracker state store.

This is the only component allowed to hold the current tracker state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ambutrack.state.events import TrackerEvent
from ambutrack.state.reducer import TrackerState, reduce

_logger = logging.getLogger(__name__)

StateListener = Callable[[TrackerState], None]


class TrackerStore:
    """Holds the current :class:`TrackerState` and notifies listeners on change.

    This store is deterministic: given the same sequence of events it ends
    in the same state. Listeners are called synchronously after each
    transition that changed the state.
    """

    def __init__(self, initial: TrackerState | None = None) -> None:
        self._state = initial if initial is not None else TrackerState()
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> TrackerState:
        return self._state

    def apply(self, event: TrackerEvent) -> bool:
        """Apply an event. Returns ``True`` when the state changed."""
        previous = self._state
        current = reduce(previous, event)
        if current is previous or current == previous:
            _logger.debug("Event %s left state unchanged", type(event).__name__)
            return False
        self._state = current
        _logger.debug(
            "Event %s applied status=%s alert=%s map=%s",
            type(event).__name__,
            current.status,
            current.alert_visible,
            current.map_visible,
        )
        self._notify(current)
        return True

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self, state: TrackerState) -> None:
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                _logger.warning("State listener %r failed", listener, exc_info=True)
