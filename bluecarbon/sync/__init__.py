from .coordinator import PushFailureInfo, SyncCoordinator, SyncReport

__all__ = ["PushFailureInfo", "SyncCoordinator", "SyncReport"]
