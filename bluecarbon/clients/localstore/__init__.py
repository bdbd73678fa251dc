from .backend import FileBackend
from .base_model import (
    BaseLocalModel,
    BaseLocalEntityData,
    DataT,
    T,
)
from .store import RecordStore, Updater

__all__ = [
    "FileBackend",
    "BaseLocalModel",
    "BaseLocalEntityData",
    "DataT",
    "T",
    "RecordStore",
    "Updater",
]
