"""
IOBeat - Disk Statistics Collector

Reads /proc/diskstats at the configured period and hands every snapshot to
a sink.
"""

import asyncio
import time
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict, Optional

import structlog

from ..config import CollectorConfig
from ..diskstats import collect
from ..exceptions import CollectionError
from ..publishers.base import Sink
from .ticker import Ticker

logger = structlog.get_logger(__name__)


class CollectorState(str, Enum):
    """Collector lifecycle state."""
    IDLE = "idle"
    RUNNING = "running"
    COLLECTING = "collecting"
    STOPPED = "stopped"


@dataclass
class CollectorStats:
    """Running counters for health reporting."""
    ticks: int = 0
    published_batches: int = 0
    published_records: int = 0
    collection_errors: int = 0
    sink_errors: int = 0
    overruns: int = 0
    dropped_ticks: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


class DiskStatsCollector:
    """
    Periodic diskstats collector.

    A single loop owns the ticker: collections run strictly one after the
    other and a tick that falls due during a slow collection is coalesced by
    the ticker rather than queued. Stopping is cooperative; a collection that
    is already running completes before the loop exits.

    No timeout is applied to the file read or the sink call. A sink that
    hangs blocks the loop.
    """

    def __init__(self, config: CollectorConfig, sink: Sink, done: Optional[asyncio.Event] = None):
        self.config = config
        self._sink = sink
        self._done = done or asyncio.Event()
        self._stop_requested = False
        self._state = CollectorState.IDLE
        self._ticker: Optional[Ticker] = None
        self.stats = CollectorStats()

    @property
    def state(self) -> CollectorState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state in (CollectorState.RUNNING, CollectorState.COLLECTING)

    async def run(self) -> None:
        """Run the collection loop until stopped."""
        if self._state != CollectorState.IDLE:
            raise RuntimeError(f"Collector cannot run from state {self._state.value}")

        self._ticker = Ticker(self.config.period)
        self._state = CollectorState.RUNNING
        logger.info("Collector started", period=self.config.period, source=self.config.source)

        try:
            while await self._ticker.wait(self._done):
                self._state = CollectorState.COLLECTING
                await self._collect_once()
                self._state = CollectorState.RUNNING
        finally:
            self.stats.dropped_ticks = self._ticker.dropped
            self._state = CollectorState.STOPPED
            logger.info("Collector stopped", **self.stats.to_dict())

    def stop(self) -> None:
        """Signal the loop to exit. Safe to call more than once."""
        if self._stop_requested:
            return
        self._stop_requested = True
        self._done.set()

    async def _collect_once(self) -> None:
        """Collect one snapshot and publish it."""
        timer_start = time.monotonic()
        self.stats.ticks += 1

        try:
            records = collect(self.config.source)
        except CollectionError as e:
            self.stats.collection_errors += 1
            logger.error("Failed to read iostats", error=str(e), source=self.config.source)
        except Exception as e:
            self.stats.collection_errors += 1
            logger.exception("Unexpected error reading iostats", error=str(e), source=self.config.source)
        else:
            try:
                await self._sink.publish(records)
            except Exception as e:
                self.stats.sink_errors += 1
                logger.exception("Failed to publish iostats", error=str(e))
            else:
                self.stats.published_batches += 1
                self.stats.published_records += len(records)
                logger.debug("Published iostats", devices=len(records))

        elapsed = time.monotonic() - timer_start
        if elapsed > self.config.period:
            self.stats.overruns += 1
            logger.warning(
                "Ignoring tick(s) due to processing taking longer than one period",
                elapsed=round(elapsed, 3),
                period=self.config.period,
            )


async def run(config: CollectorConfig, sink: Sink, done: asyncio.Event) -> None:
    """Run a collector until `done` is set."""
    await DiskStatsCollector(config, sink, done).run()
