from typing import Any, Dict

from fastapi import APIRouter, Depends

from bluecarbon.service import FieldRegistry

from .dependencies import field_registry_get, record_out

router = APIRouter(tags=["dashboard"])


@router.get("/dashboard")
async def route_dashboard(
    registry: FieldRegistry = Depends(field_registry_get),
) -> Dict[str, Any]:
    summary = registry.get_dashboard_summary()
    return {
        **summary.model_dump(),
        "recent_activity": [record_out(r) for r in registry.recent_activity()],
    }
