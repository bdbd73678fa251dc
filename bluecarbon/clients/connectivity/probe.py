"""APScheduler job that feeds registry reachability into the monitor."""

from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from bluecarbon.clients.registry import RegistryClient
from bluecarbon.utils import log

from .monitor import ConnectivityMonitor

logger = log.get_logger(__name__)


class ReachabilityProbe:
    def __init__(
        self,
        monitor: ConnectivityMonitor,
        registry: RegistryClient,
        interval_seconds: int = 30,
    ) -> None:
        self.monitor = monitor
        self.registry = registry
        self.interval_seconds = interval_seconds
        self._scheduler: Optional[AsyncIOScheduler] = None

    async def probe_once(self) -> bool:
        try:
            reachable = await self.registry.ping()
        except Exception as e:
            logger.warning(f"Reachability probe errored, treating as offline: {e}")
            reachable = False
        self.monitor.report(reachable)
        return reachable

    def start(self) -> Optional[AsyncIOScheduler]:
        """Start periodic probing. An interval of 0 disables the probe."""
        if self.interval_seconds <= 0:
            logger.info("Reachability probe disabled")
            return None
        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            self.probe_once,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id="registry_reachability_probe",
            name="Registry Reachability Probe",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self._scheduler.start()
        logger.info(f"Reachability probe started (every {self.interval_seconds}s)")
        return self._scheduler

    def shutdown(self) -> None:
        if self._scheduler:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Reachability probe shut down")
