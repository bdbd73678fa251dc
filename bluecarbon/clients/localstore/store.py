import asyncio
import json
from typing import Callable, Dict, List, Optional, Type

from pydantic import ValidationError as PydanticValidationError

from bluecarbon.exceptions import NotFoundError, PersistenceError
from bluecarbon.utils import log

from .backend import FileBackend
from .base_model import BaseLocalModel

logger = log.get_logger(__name__)

Updater = Callable[[BaseLocalModel], BaseLocalModel]
Guard = Callable[[List[BaseLocalModel]], None]


class RecordStore:
    """In-memory mirror of the local collections, persisted wholesale.

    Each registered collection is loaded once with :meth:`load` and kept in
    insertion order. Every mutation writes the whole collection back to the
    backend before the in-memory view changes, so memory never holds a
    record the disk does not.
    """

    def __init__(self, backend: FileBackend) -> None:
        self.backend = backend
        self._models: Dict[str, Type[BaseLocalModel]] = {}
        self._records: Dict[str, List[BaseLocalModel]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, model_cls: Type[BaseLocalModel]) -> None:
        name = model_cls.collection_name()
        self._models[name] = model_cls
        self._records.setdefault(name, [])
        self._locks.setdefault(name, asyncio.Lock())

    def collections(self) -> List[str]:
        return list(self._models)

    def _require(self, collection: str) -> None:
        if collection not in self._models:
            raise KeyError(f"Unknown collection '{collection}'")

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    async def load(self) -> None:
        for name, model_cls in self._models.items():
            self._records[name] = await self._load_collection(name, model_cls)

    async def _load_collection(self, name: str, model_cls: Type[BaseLocalModel]) -> List[BaseLocalModel]:
        try:
            raw = await self.backend.get_item(name)
        except OSError as e:
            logger.warning(f"Could not read collection '{name}', starting empty: {e}")
            return []
        if raw is None:
            logger.info(f"No stored data for '{name}', starting empty")
            return []
        try:
            rows = json.loads(raw)
            if not isinstance(rows, list):
                raise ValueError(f"expected a list, got {type(rows).__name__}")
            records = [model_cls.model_validate(row) for row in rows]
        except (ValueError, PydanticValidationError) as e:
            logger.warning(f"Corrupt data for '{name}', starting empty: {e}")
            return []
        logger.info(f"Loaded {len(records)} records from '{name}'")
        return records

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_all(self, collection: str) -> List[BaseLocalModel]:
        self._require(collection)
        return list(self._records[collection])

    def get(self, collection: str, record_id: int) -> Optional[BaseLocalModel]:
        self._require(collection)
        for record in self._records[collection]:
            if record.id == record_id:
                return record
        return None

    def next_id(self, collection: str) -> int:
        # Sequential ids are safe only while records are never deleted.
        # Only a preview: append assigns the id it actually stores.
        self._require(collection)
        return len(self._records[collection]) + 1

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def append(
        self,
        collection: str,
        record: BaseLocalModel,
        guard: Optional[Guard] = None,
    ) -> BaseLocalModel:
        """Store ``record`` under the next free id and return the stored copy.

        The id is assigned while the collection lock is held, so whatever id
        the caller built the record with is replaced. ``guard`` is called with
        the current records under the same lock and may raise to refuse the
        append.
        """
        self._require(collection)
        async with self._locks[collection]:
            current = self._records[collection]
            if guard is not None:
                guard(list(current))
            stored = record.model_copy(update={"id": len(current) + 1})
            updated = [*current, stored]
            await self._persist(collection, updated)
            self._records[collection] = updated
        return stored

    async def replace(self, collection: str, record_id: int, updater: Updater) -> BaseLocalModel:
        self._require(collection)
        async with self._locks[collection]:
            current = self._records[collection]
            index = next((i for i, r in enumerate(current) if r.id == record_id), None)
            if index is None:
                raise NotFoundError(collection, record_id)
            new_record = updater(current[index])
            if new_record.id != record_id:
                raise ValueError(
                    f"Updater changed record id {record_id} -> {new_record.id} in '{collection}'"
                )
            updated = list(current)
            updated[index] = new_record
            await self._persist(collection, updated)
            self._records[collection] = updated
        return new_record

    async def _persist(self, collection: str, records: List[BaseLocalModel]) -> None:
        payload = json.dumps([r.model_dump(mode="json") for r in records])
        try:
            await self.backend.set_item(collection, payload)
        except OSError as e:
            logger.error(f"Failed to persist '{collection}' ({len(records)} records): {e}")
            raise PersistenceError(f"Could not persist collection '{collection}': {e}") from e
