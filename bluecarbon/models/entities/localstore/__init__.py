from pathlib import Path
from typing import Union

from bluecarbon.clients.localstore import FileBackend, RecordStore

from .credits import CreditEntry, CreditEntryData
from .mrv_records import MediaReference, MonitoringRecord, MonitoringRecordData, SPECIES_TAXONOMY
from .projects import Coordinates, Project, ProjectData
from .sync_logs import SyncLog, SyncLogData

ALL_MODELS = [Project, MonitoringRecord, CreditEntry, SyncLog]

# Collections whose records are pushed to the remote registry, with the
# record kind the registry knows them by.
SYNCABLE_MODELS = {
    Project: "project",
    MonitoringRecord: "mrv",
    CreditEntry: "credit",
}


def build_record_store(data_dir: Union[str, Path]) -> RecordStore:
    """Create a store over ``data_dir`` with every collection registered."""
    store = RecordStore(FileBackend(data_dir))
    for model_cls in ALL_MODELS:
        store.register(model_cls)
    return store


__all__ = [
    "ALL_MODELS",
    "SYNCABLE_MODELS",
    "build_record_store",
    "Coordinates",
    "Project",
    "ProjectData",
    "MediaReference",
    "MonitoringRecord",
    "MonitoringRecordData",
    "SPECIES_TAXONOMY",
    "CreditEntry",
    "CreditEntryData",
    "SyncLog",
    "SyncLogData",
]
