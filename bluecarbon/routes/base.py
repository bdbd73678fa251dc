from fastapi import APIRouter, Depends

from bluecarbon.seed import run_seed
from bluecarbon.service import FieldRegistry
from bluecarbon.utils import log

from .credits import router as credits_router
from .dashboard import router as dashboard_router
from .dependencies import field_registry_get
from .mrv import router as mrv_router
from .projects import router as projects_router
from .sync import router as sync_router

logger = log.get_logger(__name__)

router = APIRouter(prefix="/api")
router.include_router(projects_router)
router.include_router(mrv_router)
router.include_router(credits_router)
router.include_router(dashboard_router)
router.include_router(sync_router)


@router.post("/seed", tags=["dev"])
async def route_seed(registry: FieldRegistry = Depends(field_registry_get)):
    """Load the sample projects into an empty store (dev only)."""
    created = await run_seed(registry.store)
    return {"status": "ok", "seeded": len(created)}
