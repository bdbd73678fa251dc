from datetime import datetime, timezone
from typing import Any, ClassVar, Generic, List, Optional, TypeVar, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from .store import RecordStore


class BaseLocalEntityData(BaseModel):
    model_config = ConfigDict(frozen=True)


DataT = TypeVar("DataT", bound=BaseLocalEntityData)
T = TypeVar("T", bound="BaseLocalModel")


class BaseLocalModel(BaseModel, Generic[DataT]):
    """A record of one local collection.

    ``data`` holds the domain payload; ``synced``, ``remote_id`` and
    ``synced_at`` are the synchronisation metadata the sync coordinator owns.
    Instances are frozen: every change produces a new record that replaces
    the old one in the store.
    """
    model_config = ConfigDict(frozen=True)

    id: int
    data: DataT
    synced: bool = False
    remote_id: Optional[str] = None
    synced_at: Optional[datetime] = None

    _collection_name: ClassVar[str] = ""

    @classmethod
    def collection_name(cls) -> str:
        if not cls._collection_name:
            raise ValueError(f"_collection_name not set for {cls.__name__}")
        return cls._collection_name

    def with_data(self: T, **changes: Any) -> T:
        """Return a copy with ``data`` fields replaced and revalidated."""
        data_cls = type(self.data)
        data = data_cls.model_validate({**self.data.model_dump(), **changes})
        return self.model_copy(update={"data": data})

    def mark_synced(self: T, remote_id: Optional[str] = None) -> T:
        if self.synced:
            return self
        return self.model_copy(update={
            "synced": True,
            "remote_id": remote_id or self.remote_id,
            "synced_at": datetime.now(timezone.utc),
        })

    @classmethod
    def get(cls: type[T], store: "RecordStore", id: int) -> Optional[T]:
        return store.get(cls.collection_name(), id)

    @classmethod
    def list(cls: type[T], store: "RecordStore") -> List[T]:
        return store.get_all(cls.collection_name())

    @classmethod
    async def insert(cls: type[T], store: "RecordStore", record: T, guard=None) -> T:
        return await store.append(cls.collection_name(), record, guard)

    @classmethod
    async def create(cls: type[T], store: "RecordStore", data: DataT) -> T:
        record = cls(id=store.next_id(cls.collection_name()), data=data)
        return await cls.insert(store, record)
