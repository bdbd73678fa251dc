"""
Inbound facade used by the presentation layer.

Every submission goes through the same path: the record factory validates
and normalises the form, the store appends and persists the record, and
the sync coordinator pushes it straight away when the device is online.
"""

from typing import Any, List, Optional

from bluecarbon.clients.connectivity import ConnectivityMonitor, ConnectivityState
from bluecarbon.clients.localstore import BaseLocalModel, RecordStore
from bluecarbon.models.entities.localstore import CreditEntry, MonitoringRecord, Project
from bluecarbon.models.factory import RecordFactory
from bluecarbon.models.operations.credits import (
    CreditBalance,
    credit_balance,
    credit_issue,
    credit_retire,
    credit_trade,
)
from bluecarbon.models.operations.dashboard import (
    DashboardSummary,
    SyncStatus,
    dashboard_summary,
    dashboard_sync_status,
)
from bluecarbon.models.operations.mrv_import import CsvSource, ImportReport, mrv_import_csv
from bluecarbon.models.operations.mrv_records import mrv_create, mrv_recent
from bluecarbon.models.operations.projects import (
    project_create,
    project_record_sequestration,
    project_set_status,
)
from bluecarbon.sync import SyncCoordinator, SyncReport
from bluecarbon.utils import log

logger = log.get_logger(__name__)


class FieldRegistry:
    def __init__(
        self,
        store: RecordStore,
        monitor: ConnectivityMonitor,
        coordinator: SyncCoordinator,
        factory: Optional[RecordFactory] = None,
    ) -> None:
        self.store = store
        self.monitor = monitor
        self.coordinator = coordinator
        self.factory = factory or RecordFactory(store)

    async def _after_create(self, record: BaseLocalModel) -> Any:
        await self.coordinator.on_record_created(record)
        # The coordinator replaces the stored record when the push succeeds.
        return self.store.get(record.collection_name(), record.id)

    # ── Submissions ───────────────────────────────────────────────────────────

    async def submit_project(self, form: Any) -> Project:
        project = await project_create(self.store, self.factory.build_project(form))
        logger.info(f"Registered project #{project.id} '{project.data.name}'")
        return await self._after_create(project)

    async def submit_monitoring_record(self, form: Any) -> MonitoringRecord:
        record = await mrv_create(self.store, self.factory.build_monitoring_record(form))
        logger.info(f"Stored monitoring record #{record.id} for project #{record.data.project_id}")
        return await self._after_create(record)

    async def import_monitoring_csv(self, source: CsvSource) -> ImportReport:
        return await mrv_import_csv(source, self.submit_monitoring_record)

    # ── Project lifecycle ─────────────────────────────────────────────────────

    async def set_project_status(self, project_id: int, status: str) -> Project:
        return await project_set_status(self.store, project_id, status)

    async def record_sequestration(self, project_id: int, tonnes: float) -> Project:
        return await project_record_sequestration(self.store, project_id, tonnes)

    # ── Credits ───────────────────────────────────────────────────────────────

    async def issue_credits(
        self,
        project_id: int,
        quantity: float,
        unit_price: float = 0.0,
        note: Optional[str] = None,
    ) -> CreditEntry:
        entry = await credit_issue(self.store, self.factory, project_id, quantity, unit_price, note)
        return await self._after_create(entry)

    async def retire_credits(self, project_id: int, quantity: float, note: Optional[str] = None) -> CreditEntry:
        entry = await credit_retire(self.store, self.factory, project_id, quantity, note)
        return await self._after_create(entry)

    async def trade_credits(
        self,
        project_id: int,
        quantity: float,
        unit_price: float,
        counterparty: Optional[str] = None,
        note: Optional[str] = None,
    ) -> CreditEntry:
        entry = await credit_trade(
            self.store, self.factory, project_id, quantity, unit_price, counterparty, note,
        )
        return await self._after_create(entry)

    def credit_balance(self, project_id: int) -> CreditBalance:
        return credit_balance(self.store, project_id)

    # ── Sync ──────────────────────────────────────────────────────────────────

    async def manual_sync(self) -> SyncReport:
        return await self.coordinator.manual_sync()

    def report_connectivity(self, is_connected: bool) -> ConnectivityState:
        self.monitor.report(is_connected)
        return self.monitor.current()

    # ── Reads ─────────────────────────────────────────────────────────────────

    def get_dashboard_summary(self) -> DashboardSummary:
        return dashboard_summary(self.store)

    def get_sync_status(self) -> SyncStatus:
        return dashboard_sync_status(self.store, self.monitor.is_connected)

    def recent_activity(self, limit: int = 5) -> List[MonitoringRecord]:
        return mrv_recent(self.store, limit)
