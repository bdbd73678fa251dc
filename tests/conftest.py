"""Shared pytest fixtures."""

import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

import pytest

from bluecarbon.clients.connectivity import ConnectivityMonitor
from bluecarbon.clients.localstore import FileBackend, RecordStore
from bluecarbon.clients.registry import PushResult, RegistryConnectionError
from bluecarbon.models.entities.localstore import ALL_MODELS, build_record_store
from bluecarbon.models.factory import RecordFactory
from bluecarbon.service import FieldRegistry
from bluecarbon.sync import SyncCoordinator

FIXED_NOW = datetime(2024, 5, 17, 9, 30, tzinfo=timezone.utc)


def run(coro):
    return asyncio.run(coro)


class FakeRegistry:
    """In-memory registry with switchable outcomes.

    mode: "success", "reject", "error" (client error) or "timeout" (hangs).
    """

    def __init__(self, mode: str = "success") -> None:
        self.mode = mode
        self.calls: List[Tuple[str, int]] = []
        self.reject_ids: Set[Tuple[str, int]] = set()
        self.on_push: Optional[Callable[[str, Dict[str, Any]], None]] = None

    async def push(self, kind: str, record: Dict[str, Any]) -> PushResult:
        self.calls.append((kind, record["id"]))
        if self.on_push is not None:
            self.on_push(kind, record)
        if self.mode == "timeout":
            await asyncio.sleep(5)
        if self.mode == "error":
            raise RegistryConnectionError("registry unreachable")
        if self.mode == "reject" or (kind, record["id"]) in self.reject_ids:
            return PushResult(success=False, detail="rejected")
        return PushResult(success=True, remote_id=f"{kind}-{record['id']}")

    async def ping(self) -> bool:
        return self.mode != "error"


class FailingBackend(FileBackend):
    """File backend whose writes can be made to fail, per key or for all keys."""

    def __init__(self, data_dir: Path) -> None:
        super().__init__(data_dir)
        self.fail_all = False
        self.fail_keys: Set[str] = set()

    async def set_item(self, key: str, value: str) -> None:
        if self.fail_all or key in self.fail_keys:
            raise OSError(28, "No space left on device")
        await super().set_item(key, value)


@pytest.fixture
def store(tmp_path: Path) -> RecordStore:
    store = build_record_store(tmp_path)
    run(store.load())
    return store


@pytest.fixture
def failing_backend(tmp_path: Path) -> FailingBackend:
    return FailingBackend(tmp_path)


@pytest.fixture
def failing_store(failing_backend: FailingBackend) -> RecordStore:
    store = RecordStore(failing_backend)
    for model_cls in ALL_MODELS:
        store.register(model_cls)
    run(store.load())
    return store


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def monitor() -> ConnectivityMonitor:
    return ConnectivityMonitor(assume_connected=True)


@pytest.fixture
def factory(store: RecordStore) -> RecordFactory:
    return RecordFactory(store, methodologies=["VM0033", "AR-ACM0003"], clock=lambda: FIXED_NOW)


@pytest.fixture
def coordinator(store: RecordStore, monitor: ConnectivityMonitor, registry: FakeRegistry) -> SyncCoordinator:
    coordinator = SyncCoordinator(store, monitor, registry, push_timeout=0.2)
    coordinator.start()
    yield coordinator
    coordinator.stop()


@pytest.fixture
def field_registry(store, monitor, coordinator, factory) -> FieldRegistry:
    return FieldRegistry(store, monitor, coordinator, factory)


PROJECT_FORM = {
    "name": "Mangrove Test",
    "area": "10.0",
    "proponent": "Org",
}


def active_project(field_registry: FieldRegistry, tonnes: float = 100.0):
    """Register a project, activate it and record ``tonnes`` of sequestration."""
    project = run(field_registry.submit_project(PROJECT_FORM))
    run(field_registry.set_project_status(project.id, "active"))
    return run(field_registry.record_sequestration(project.id, tonnes))
