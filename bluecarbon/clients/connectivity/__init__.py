from .monitor import ConnectivityMonitor, ConnectivityState, Listener, Subscription
from .probe import ReachabilityProbe

__all__ = [
    "ConnectivityMonitor",
    "ConnectivityState",
    "Listener",
    "Subscription",
    "ReachabilityProbe",
]
