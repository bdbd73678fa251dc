"""
Sync coordinator.

Pushes locally created records to the remote registry and flips their
``synced`` flag once the registry has accepted them. A record is either
Pending (``synced`` false) or Synced; a failed push leaves it Pending for
the next trigger. Triggers are record creation while connected and an
explicit manual sync.
"""

import asyncio
from datetime import datetime, timezone
from typing import Dict, List, Optional, Set

from pydantic import BaseModel

from bluecarbon.clients.connectivity import ConnectivityMonitor, ConnectivityState, Subscription
from bluecarbon.clients.localstore import BaseLocalModel, RecordStore
from bluecarbon.clients.registry import RegistryClient, RegistryClientError
from bluecarbon.exceptions import NoConnectionError, PersistenceError, PushFailure
from bluecarbon.models.entities.localstore import SYNCABLE_MODELS
from bluecarbon.models.operations.sync_logs import sync_log_create
from bluecarbon.utils import log

logger = log.get_logger(__name__)

DEFAULT_PUSH_TIMEOUT_SECONDS = 15.0


class PushFailureInfo(BaseModel):
    collection: str
    record_id: int
    reason: str


class SyncReport(BaseModel):
    started_at: datetime
    completed_at: Optional[datetime] = None
    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    cancelled: bool = False
    failures: List[PushFailureInfo] = []


class SyncCoordinator:
    def __init__(
        self,
        store: RecordStore,
        monitor: ConnectivityMonitor,
        registry: RegistryClient,
        push_timeout: float = DEFAULT_PUSH_TIMEOUT_SECONDS,
        sync_on_reconnect: bool = False,
    ) -> None:
        self.store = store
        self.monitor = monitor
        self.registry = registry
        self.push_timeout = push_timeout
        self.sync_on_reconnect = sync_on_reconnect
        self._kinds: Dict[str, str] = {
            model_cls.collection_name(): kind for model_cls, kind in SYNCABLE_MODELS.items()
        }
        self._sweep_lock = asyncio.Lock()
        self._cancel_requested = False
        self._subscription: Optional[Subscription] = None
        self._background_tasks: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self._subscription is None:
            self._subscription = self.monitor.subscribe(self._on_connectivity_change)

    def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _on_connectivity_change(self, previous: ConnectivityState, current: ConnectivityState) -> None:
        if current is ConnectivityState.DISCONNECTED:
            logger.info(f"Offline: {len(self.pending_records())} records will wait for the next sync")
            return
        if not self.sync_on_reconnect:
            logger.info("Back online; pending records sync on the next manual sync")
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("Back online but no running event loop, skipping reconnect sync")
            return
        task = loop.create_task(self._reconnect_sweep())
        self._background_tasks.add(task)
        task.add_done_callback(self._on_background_done)

    def _on_background_done(self, task: asyncio.Task) -> None:
        self._background_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Reconnect sync failed: {error!r}")

    async def drain(self) -> None:
        """Wait for reconnect sweeps that are still running."""
        if self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)

    async def _reconnect_sweep(self) -> None:
        try:
            await self.manual_sync(sync_type="reconnect")
        except NoConnectionError:
            logger.info("Connection dropped again before reconnect sync started")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def pending_records(self) -> List[BaseLocalModel]:
        pending = []
        for collection in self._kinds:
            pending.extend(r for r in self.store.get_all(collection) if not r.synced)
        return pending

    def request_cancel(self) -> None:
        """Stop the running sweep after the record currently in flight."""
        if self._sweep_lock.locked():
            self._cancel_requested = True

    # ------------------------------------------------------------------
    # Push
    # ------------------------------------------------------------------

    async def on_record_created(self, record: BaseLocalModel) -> bool:
        """Push a freshly stored record if online. Returns True once synced."""
        if not self.monitor.is_connected:
            logger.info(f"Offline, {record.collection_name()}#{record.id} stays pending")
            return False
        return await self.push_record(record)

    async def push_record(self, record: BaseLocalModel) -> bool:
        if record.synced:
            return True
        try:
            await self._push_once(record)
        except PushFailure as e:
            logger.warning(str(e))
            return False
        return True

    async def _push_once(self, record: BaseLocalModel) -> None:
        collection = record.collection_name()
        kind = self._kinds.get(collection)
        if kind is None:
            raise PushFailure(collection, record.id, "collection is not synchronised")
        current = self.store.get(collection, record.id)
        if current is None:
            raise PushFailure(collection, record.id, "record is not in the local store")
        if current.synced:
            return
        record = current

        payload = record.model_dump(mode="json", exclude={"synced", "synced_at", "remote_id"})
        try:
            result = await asyncio.wait_for(
                self.registry.push(kind, payload),
                timeout=self.push_timeout,
            )
        except asyncio.TimeoutError:
            raise PushFailure(collection, record.id, f"timed out after {self.push_timeout}s")
        except RegistryClientError as e:
            raise PushFailure(collection, record.id, str(e)) from e
        except Exception as e:
            logger.exception(f"Unexpected registry error pushing {collection}#{record.id}")
            raise PushFailure(collection, record.id, f"unexpected error: {e!r}") from e

        if not result.success:
            raise PushFailure(collection, record.id, result.detail or "rejected by registry")

        try:
            await self.store.replace(
                collection, record.id,
                lambda current: current.mark_synced(result.remote_id),
            )
        except PersistenceError as e:
            raise PushFailure(collection, record.id, f"accepted remotely but not saved locally: {e}") from e
        logger.info(f"Synced {collection}#{record.id} (remote id {result.remote_id})")

    # ------------------------------------------------------------------
    # Manual sync
    # ------------------------------------------------------------------

    async def manual_sync(self, sync_type: str = "manual") -> SyncReport:
        """Push every pending record once.

        Raises :class:`NoConnectionError` without doing any work when the
        monitor reports the device offline. Each record succeeds or fails on
        its own; failures stay pending.
        """
        if not self.monitor.is_connected:
            raise NoConnectionError("Cannot sync while offline")

        async with self._sweep_lock:
            self._cancel_requested = False
            report = SyncReport(started_at=datetime.now(timezone.utc))
            pending = self.pending_records()
            logger.info(f"Sync sweep started: {len(pending)} pending records")

            for record in pending:
                if self._cancel_requested:
                    report.cancelled = True
                    logger.info("Sync sweep cancelled")
                    break
                report.attempted += 1
                try:
                    await self._push_once(record)
                except PushFailure as e:
                    logger.warning(str(e))
                    report.failed += 1
                    report.failures.append(PushFailureInfo(
                        collection=e.collection,
                        record_id=e.record_id,
                        reason=e.reason,
                    ))
                else:
                    report.succeeded += 1

            self._cancel_requested = False
            report.completed_at = datetime.now(timezone.utc)
            logger.info(
                f"Sync sweep finished: {report.succeeded} synced, {report.failed} failed"
                f"{' (cancelled)' if report.cancelled else ''}"
            )
            await self._write_sync_log(sync_type, report)
        return report

    async def _write_sync_log(self, sync_type: str, report: SyncReport) -> None:
        try:
            await sync_log_create(
                self.store,
                sync_type=sync_type,
                started_at=report.started_at,
                attempted=report.attempted,
                succeeded=report.succeeded,
                failed=report.failed,
                cancelled=report.cancelled,
            )
        except (PersistenceError, KeyError) as e:
            logger.error(f"Could not record sync log: {e}")
