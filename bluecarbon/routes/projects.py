from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException

from bluecarbon.models.operations.projects import project_get, project_list
from bluecarbon.models.schemas import ProjectForm, ProjectStatusRequest, SequestrationRequest
from bluecarbon.service import FieldRegistry

from .dependencies import field_registry_get, record_out

router = APIRouter(tags=["projects"])


@router.post("/projects", status_code=201)
async def route_project_create(
    body: ProjectForm,
    registry: FieldRegistry = Depends(field_registry_get),
) -> Dict[str, Any]:
    project = await registry.submit_project(body)
    return record_out(project)


@router.get("/projects")
async def route_project_list(
    status: Optional[str] = None,
    registry: FieldRegistry = Depends(field_registry_get),
) -> List[Dict[str, Any]]:
    return [record_out(p) for p in project_list(registry.store, status)]


@router.get("/projects/{project_id}")
async def route_project_get(
    project_id: int,
    registry: FieldRegistry = Depends(field_registry_get),
) -> Dict[str, Any]:
    project = project_get(registry.store, project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return record_out(project)


@router.post("/projects/{project_id}/status")
async def route_project_set_status(
    project_id: int,
    body: ProjectStatusRequest,
    registry: FieldRegistry = Depends(field_registry_get),
) -> Dict[str, Any]:
    project = await registry.set_project_status(project_id, body.status)
    return record_out(project)


@router.post("/projects/{project_id}/sequestration")
async def route_project_record_sequestration(
    project_id: int,
    body: SequestrationRequest,
    registry: FieldRegistry = Depends(field_registry_get),
) -> Dict[str, Any]:
    """Add verified tonnes of CO2e to an active project's cumulative total."""
    project = await registry.record_sequestration(project_id, body.tonnes)
    return record_out(project)
