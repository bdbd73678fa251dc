from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from bluecarbon.models.operations.sync_logs import sync_log_get_recent
from bluecarbon.models.schemas import ConnectivityReport
from bluecarbon.service import FieldRegistry
from bluecarbon.sync import SyncReport

from .dependencies import field_registry_get, record_out

router = APIRouter(tags=["sync"])


@router.get("/sync/status")
async def route_sync_status(
    registry: FieldRegistry = Depends(field_registry_get),
) -> Dict[str, Any]:
    sync_status = registry.get_sync_status()
    return {**sync_status.model_dump(), "pending_total": sync_status.pending_total}


@router.post("/sync", response_model=SyncReport)
async def route_sync(
    registry: FieldRegistry = Depends(field_registry_get),
) -> SyncReport:
    """Push every pending record. Responds 503 while the device is offline."""
    return await registry.manual_sync()


@router.post("/sync/cancel", status_code=202)
async def route_sync_cancel(
    registry: FieldRegistry = Depends(field_registry_get),
) -> Dict[str, Any]:
    registry.coordinator.request_cancel()
    return {"status": "cancel requested"}


@router.get("/sync/logs")
async def route_sync_logs(
    limit: int = 20,
    registry: FieldRegistry = Depends(field_registry_get),
) -> List[Dict[str, Any]]:
    return [record_out(entry) for entry in sync_log_get_recent(registry.store, limit)]


@router.post("/connectivity")
async def route_connectivity_report(
    body: ConnectivityReport,
    registry: FieldRegistry = Depends(field_registry_get),
) -> Dict[str, Any]:
    state = registry.report_connectivity(body.is_connected)
    return {"state": state.value, "connected": registry.monitor.is_connected}
