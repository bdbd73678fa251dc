from collections import deque
from enum import Enum
from typing import Callable, Deque, List, Optional, Tuple

from bluecarbon.utils import log

logger = log.get_logger(__name__)


class ConnectivityState(str, Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


Listener = Callable[[ConnectivityState, ConnectivityState], None]


class Subscription:
    """Handle returned by :meth:`ConnectivityMonitor.subscribe`."""

    def __init__(self, monitor: "ConnectivityMonitor", listener: Listener) -> None:
        self._monitor = monitor
        self._listener = listener
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._monitor._remove(self._listener)
            self.active = False


class ConnectivityMonitor:
    """Process-wide view of network reachability.

    The monitor only observes: an external signal source calls
    :meth:`report`, and subscribers are told about every transition
    ``(previous, current)`` in the order the transitions happened. It never
    starts a sync itself.

    Until the first observation arrives the state is ``assume_connected``.
    """

    def __init__(self, assume_connected: bool = True) -> None:
        self._state = ConnectivityState.CONNECTED if assume_connected else ConnectivityState.DISCONNECTED
        self._has_observation = False
        self._listeners: List[Listener] = []
        self._pending: Deque[Tuple[ConnectivityState, ConnectivityState]] = deque()
        self._dispatching = False

    def current(self) -> ConnectivityState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectivityState.CONNECTED

    @property
    def has_observation(self) -> bool:
        return self._has_observation

    def subscribe(self, listener: Listener) -> Subscription:
        self._listeners.append(listener)
        return Subscription(self, listener)

    def _remove(self, listener: Listener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def report(self, is_connected: bool) -> Optional[ConnectivityState]:
        """Record an observation. Returns the new state if it changed."""
        new_state = ConnectivityState.CONNECTED if is_connected else ConnectivityState.DISCONNECTED
        self._has_observation = True
        if new_state is self._state:
            return None

        previous, self._state = self._state, new_state
        logger.info(f"Connectivity changed: {previous.value} -> {new_state.value}")
        self._pending.append((previous, new_state))
        # Reports made from inside a listener are queued behind the one
        # being delivered so every listener sees transitions in order.
        if not self._dispatching:
            self._dispatch()
        return new_state

    def _dispatch(self) -> None:
        self._dispatching = True
        try:
            while self._pending:
                previous, current = self._pending.popleft()
                for listener in list(self._listeners):
                    try:
                        listener(previous, current)
                    except Exception:
                        logger.exception(f"Connectivity listener {listener!r} failed")
        finally:
            self._dispatching = False
