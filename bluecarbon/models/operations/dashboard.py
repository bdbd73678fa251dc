from typing import Dict

from pydantic import BaseModel

from bluecarbon.clients.localstore import RecordStore
from bluecarbon.models.entities.localstore import MonitoringRecord, Project, SYNCABLE_MODELS


class DashboardSummary(BaseModel):
    total_projects: int
    total_credits_issued: float
    total_carbon_sequestered: float
    total_monitoring_records: int


class CollectionSyncCounts(BaseModel):
    synced: int
    pending: int


class SyncStatus(BaseModel):
    connected: bool
    collections: Dict[str, CollectionSyncCounts]

    @property
    def pending_total(self) -> int:
        return sum(c.pending for c in self.collections.values())


def dashboard_summary(store: RecordStore) -> DashboardSummary:
    projects = Project.list(store)
    return DashboardSummary(
        total_projects=len(projects),
        total_credits_issued=sum(p.data.credits_issued for p in projects),
        total_carbon_sequestered=sum(p.data.carbon_sequestered for p in projects),
        total_monitoring_records=len(MonitoringRecord.list(store)),
    )


def dashboard_sync_status(store: RecordStore, connected: bool) -> SyncStatus:
    collections = {}
    for model_cls in SYNCABLE_MODELS:
        records = model_cls.list(store)
        synced = sum(1 for r in records if r.synced)
        collections[model_cls.collection_name()] = CollectionSyncCounts(
            synced=synced,
            pending=len(records) - synced,
        )
    return SyncStatus(connected=connected, collections=collections)
