from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bluecarbon import conf
from bluecarbon.clients.connectivity import ConnectivityMonitor, ReachabilityProbe
from bluecarbon.clients.registry import HttpRegistryClient, RegistryClient
from bluecarbon.models.entities.localstore import build_record_store
from bluecarbon.models.factory import RecordFactory
from bluecarbon.routes import fake_registry
from bluecarbon.routes.base import router
from bluecarbon.routes.errors import register_error_handlers
from bluecarbon.seed import run_seed
from bluecarbon.service import FieldRegistry
from bluecarbon.sync import SyncCoordinator
from bluecarbon.utils import log

log.init(conf.get_log_level(), conf.get_environment())
logger = log.get_logger(__name__)


def create_app(registry_client: Optional[RegistryClient] = None) -> FastAPI:
    """Build the API. ``registry_client`` replaces the HTTP registry client when given."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store_conf = conf.get_store_conf()
        registry_conf = conf.get_registry_conf()
        connectivity_conf = conf.get_connectivity_conf()

        store = build_record_store(store_conf.data_dir)
        await store.load()
        if store_conf.seed_sample_data:
            await run_seed(store)

        owned_client: Optional[HttpRegistryClient] = None
        client = registry_client
        if client is None:
            owned_client = HttpRegistryClient(registry_conf.url, timeout=registry_conf.push_timeout_seconds)
            client = owned_client
            logger.info(f"Pushing to registry at {registry_conf.url}")

        monitor = ConnectivityMonitor(assume_connected=connectivity_conf.assume_online)
        coordinator = SyncCoordinator(
            store,
            monitor,
            client,
            push_timeout=registry_conf.push_timeout_seconds,
            sync_on_reconnect=conf.get_sync_conf().sync_on_reconnect,
        )
        coordinator.start()
        probe = ReachabilityProbe(monitor, client, connectivity_conf.probe_interval_seconds)
        probe.start()

        app.state.field_registry = FieldRegistry(store, monitor, coordinator, RecordFactory(store))

        yield

        probe.shutdown()
        coordinator.stop()
        await coordinator.drain()
        if owned_client is not None:
            await owned_client.aclose()

    app = FastAPI(
        title="Blue Carbon Field API",
        version="0.1.0",
        docs_url="/docs",
        lifespan=lifespan,
        debug=conf.get_http_expose_errors(),
    )
    app.include_router(router)
    app.include_router(fake_registry.router)
    register_error_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app


if not conf.validate():
    raise ValueError("Invalid configuration.")

app = create_app()

http_conf = conf.get_http_conf()

if __name__ == "__main__":
    logger.info(f"Starting API on port {http_conf.port}")
    uvicorn.run(
        "bluecarbon.main:app",
        host=http_conf.host,
        port=http_conf.port,
        reload=http_conf.autoreload,
        log_level="info",
        log_config=None,
    )
