from typing import Dict, List, Optional, Set

from bluecarbon.clients.localstore import RecordStore
from bluecarbon.exceptions import NotFoundError, ValidationError
from bluecarbon.models.entities.localstore import Project
from bluecarbon.utils import log

logger = log.get_logger(__name__)

STATUS_TRANSITIONS: Dict[str, Set[str]] = {
    "pending": {"active", "rejected"},
    "active": {"completed"},
    "completed": set(),
    "rejected": set(),
}


async def project_create(store: RecordStore, project: Project) -> Project:
    return await Project.insert(store, project)


def project_get(store: RecordStore, project_id: int) -> Optional[Project]:
    return Project.get(store, project_id)


def project_require(store: RecordStore, project_id: int) -> Project:
    project = Project.get(store, project_id)
    if project is None:
        raise NotFoundError(Project.collection_name(), project_id)
    return project


def project_list(store: RecordStore, status: Optional[str] = None) -> List[Project]:
    projects = Project.list(store)
    if status:
        projects = [p for p in projects if p.data.status == status]
    return projects


async def project_set_status(store: RecordStore, project_id: int, status: str) -> Project:
    def _update(project: Project) -> Project:
        current = project.data.status
        if status not in STATUS_TRANSITIONS.get(current, set()):
            raise ValidationError("status", f"cannot move project from '{current}' to '{status}'")
        return project.with_data(status=status)

    project = await store.replace(Project.collection_name(), project_id, _update)
    logger.info(f"Project #{project_id} is now {status}")
    return project


async def project_record_sequestration(store: RecordStore, project_id: int, tonnes: float) -> Project:
    """Add measured sequestration to an active project's cumulative total."""
    if tonnes < 0:
        raise ValidationError("tonnes", "must not be negative")

    def _update(project: Project) -> Project:
        if project.data.status != "active":
            raise ValidationError("status", "sequestration can only be recorded for active projects")
        return project.with_data(carbon_sequestered=project.data.carbon_sequestered + tonnes)

    return await store.replace(Project.collection_name(), project_id, _update)
