from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from bluecarbon.models.operations.mrv_import import ImportReport
from bluecarbon.models.operations.mrv_records import mrv_get, mrv_list
from bluecarbon.models.schemas import MonitoringRecordForm
from bluecarbon.service import FieldRegistry

from .dependencies import field_registry_get, record_out

router = APIRouter(tags=["mrv"])


@router.post("/mrv", status_code=201)
async def route_mrv_create(
    body: MonitoringRecordForm,
    registry: FieldRegistry = Depends(field_registry_get),
) -> Dict[str, Any]:
    record = await registry.submit_monitoring_record(body)
    return record_out(record)


@router.get("/mrv")
async def route_mrv_list(
    project_id: Optional[int] = None,
    registry: FieldRegistry = Depends(field_registry_get),
) -> List[Dict[str, Any]]:
    return [record_out(r) for r in mrv_list(registry.store, project_id)]


@router.get("/mrv/recent")
async def route_mrv_recent(
    limit: int = 5,
    registry: FieldRegistry = Depends(field_registry_get),
) -> List[Dict[str, Any]]:
    return [record_out(r) for r in registry.recent_activity(limit)]


@router.get("/mrv/{record_id}")
async def route_mrv_get(
    record_id: int,
    registry: FieldRegistry = Depends(field_registry_get),
) -> Dict[str, Any]:
    record = mrv_get(registry.store, record_id)
    if not record:
        raise HTTPException(status_code=404, detail="Monitoring record not found")
    return record_out(record)


@router.post("/mrv/import")
async def route_mrv_import(
    request: Request,
    registry: FieldRegistry = Depends(field_registry_get),
) -> Dict[str, Any]:
    """
    Bulk import field-survey rows. The request body is the raw CSV text
    (``Content-Type: text/csv``); each row becomes one monitoring record.
    """
    content = await request.body()
    if not content.strip():
        raise HTTPException(status_code=400, detail="Empty CSV upload")
    report: ImportReport = await registry.import_monitoring_csv(content)
    return {
        **report.model_dump(),
        "rows_imported": report.rows_imported,
        "rows_failed": report.rows_failed,
    }
