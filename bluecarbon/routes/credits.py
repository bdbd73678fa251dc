from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends

from bluecarbon.models.operations.credits import credit_list
from bluecarbon.models.schemas import CreditOperationRequest
from bluecarbon.service import FieldRegistry

from .dependencies import field_registry_get, record_out

router = APIRouter(tags=["credits"])


@router.post("/credits/issue", status_code=201)
async def route_credit_issue(
    body: CreditOperationRequest,
    registry: FieldRegistry = Depends(field_registry_get),
) -> Dict[str, Any]:
    entry = await registry.issue_credits(body.project_id, body.quantity, body.unit_price, body.note)
    return record_out(entry)


@router.post("/credits/retire", status_code=201)
async def route_credit_retire(
    body: CreditOperationRequest,
    registry: FieldRegistry = Depends(field_registry_get),
) -> Dict[str, Any]:
    entry = await registry.retire_credits(body.project_id, body.quantity, body.note)
    return record_out(entry)


@router.post("/credits/trade", status_code=201)
async def route_credit_trade(
    body: CreditOperationRequest,
    registry: FieldRegistry = Depends(field_registry_get),
) -> Dict[str, Any]:
    entry = await registry.trade_credits(
        body.project_id, body.quantity, body.unit_price, body.counterparty, body.note,
    )
    return record_out(entry)


@router.get("/credits")
async def route_credit_list(
    project_id: Optional[int] = None,
    registry: FieldRegistry = Depends(field_registry_get),
) -> List[Dict[str, Any]]:
    return [record_out(e) for e in credit_list(registry.store, project_id)]


@router.get("/projects/{project_id}/credits")
async def route_project_credits(
    project_id: int,
    registry: FieldRegistry = Depends(field_registry_get),
) -> Dict[str, Any]:
    balance = registry.credit_balance(project_id)
    return {
        **balance.model_dump(),
        "entries": [record_out(e) for e in credit_list(registry.store, project_id)],
    }
