from datetime import datetime, timezone
from typing import List

from bluecarbon.clients.localstore import RecordStore
from bluecarbon.models.entities.localstore import SyncLog, SyncLogData


async def sync_log_create(
    store: RecordStore,
    sync_type: str,
    started_at: datetime,
    attempted: int,
    succeeded: int,
    failed: int,
    cancelled: bool = False,
) -> SyncLog:
    if cancelled:
        status = "cancelled"
    elif failed:
        status = "partial"
    else:
        status = "completed"
    data = SyncLogData(
        sync_type=sync_type,
        started_at=started_at,
        completed_at=datetime.now(timezone.utc),
        attempted=attempted,
        succeeded=succeeded,
        failed=failed,
        cancelled=cancelled,
        status=status,
    )
    return await SyncLog.create(store, data)


def sync_log_get_recent(store: RecordStore, limit: int = 20) -> List[SyncLog]:
    logs = SyncLog.list(store)
    return list(reversed(logs[-limit:])) if limit > 0 else []
