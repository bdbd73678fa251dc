from typing import Any, Dict

from fastapi import HTTPException, Request, status

from bluecarbon.clients.localstore import BaseLocalModel
from bluecarbon.service import FieldRegistry


def field_registry_get(request: Request) -> FieldRegistry:
    registry = getattr(request.app.state, "field_registry", None)
    if registry is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Field registry is not initialised",
        )
    return registry


def record_out(record: BaseLocalModel) -> Dict[str, Any]:
    return {
        "id": record.id,
        **record.data.model_dump(mode="json"),
        "synced": record.synced,
        "remote_id": record.remote_id,
    }
