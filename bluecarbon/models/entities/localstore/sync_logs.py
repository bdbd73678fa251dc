from datetime import datetime
from typing import Literal, Optional

from bluecarbon.clients.localstore import BaseLocalModel, BaseLocalEntityData


class SyncLogData(BaseLocalEntityData):
    sync_type: Literal["manual", "reconnect"] = "manual"
    started_at: datetime
    completed_at: Optional[datetime] = None
    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    cancelled: bool = False
    status: Literal["completed", "partial", "cancelled"] = "completed"


class SyncLog(BaseLocalModel[SyncLogData]):
    _collection_name = "syncLogs"
