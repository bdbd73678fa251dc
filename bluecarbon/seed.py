"""
Sample data for a fresh device.

Registers the two reference projects the field app ships with, already
active and partly credited, so the dashboard has something to show before
the first survey. Seeding only happens when the project collection is
empty.

Run standalone:   python -m bluecarbon.seed
"""

import asyncio
from datetime import datetime, timezone
from typing import List

from bluecarbon import conf
from bluecarbon.clients.localstore import RecordStore
from bluecarbon.models.entities.localstore import (
    Coordinates,
    Project,
    ProjectData,
    build_record_store,
)
from bluecarbon.utils import log

logger = log.get_logger(__name__)


SAMPLE_PROJECTS = [
    {
        "name": "Sundarbans Mangrove Restoration",
        "ecosystem": "mangrove",
        "coordinates": Coordinates(latitude=22.2587, longitude=89.9101),
        "area_hectares": 150.5,
        "proponent": "Bengal Coastal Conservation Society",
        "methodology": "VM0033",
        "duration_years": 25,
        "expected_annual_sequestration": 2250.5,
        "status": "active",
        "carbon_sequestered": 1850.3,
        "credits_issued": 1665.27,
    },
    {
        "name": "Kerala Backwater Seagrass Project",
        "ecosystem": "seagrass",
        "coordinates": Coordinates(latitude=9.4981, longitude=76.3388),
        "area_hectares": 85.2,
        "proponent": "Malabar Marine Foundation",
        "methodology": "VM0033",
        "duration_years": 20,
        "expected_annual_sequestration": 1420.5,
        "status": "active",
        "carbon_sequestered": 892.1,
        "credits_issued": 802.89,
    },
]


async def run_seed(store: RecordStore) -> List[Project]:
    if Project.list(store):
        logger.info("Projects already present, skipping sample data")
        return []
    created = []
    for sample in SAMPLE_PROJECTS:
        data = ProjectData(registered_at=datetime.now(timezone.utc), **sample)
        created.append(await Project.create(store, data))
    logger.info(f"Seeded {len(created)} sample projects")
    return created


async def _main() -> None:
    log.init(conf.get_log_level(), conf.get_environment())
    store = build_record_store(conf.get_store_conf().data_dir)
    await store.load()
    await run_seed(store)


if __name__ == "__main__":
    asyncio.run(_main())
