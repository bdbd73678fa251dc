from typing import List, Optional

from bluecarbon.clients.localstore import RecordStore
from bluecarbon.models.entities.localstore import MonitoringRecord


async def mrv_create(store: RecordStore, record: MonitoringRecord) -> MonitoringRecord:
    return await MonitoringRecord.insert(store, record)


def mrv_get(store: RecordStore, record_id: int) -> Optional[MonitoringRecord]:
    return MonitoringRecord.get(store, record_id)


def mrv_list(store: RecordStore, project_id: Optional[int] = None) -> List[MonitoringRecord]:
    records = MonitoringRecord.list(store)
    if project_id is not None:
        records = [r for r in records if r.data.project_id == project_id]
    return records


def mrv_recent(store: RecordStore, limit: int = 5) -> List[MonitoringRecord]:
    """Most recent submissions first."""
    records = MonitoringRecord.list(store)
    return list(reversed(records[-limit:])) if limit > 0 else []
