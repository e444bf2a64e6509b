"""
IOBeat - Test fixtures
"""

import asyncio
from typing import List, Sequence

import pytest
import structlog

from iobeat.diskstats import DeviceIOStats
from iobeat.exceptions import SinkFailure
from iobeat.publishers.base import Sink

SAMPLE_DISKSTATS = (
    "   7       0 loop0 0 0 0 0 0 0 0 0 0 0 0\n"
    "   8       0 sda 1000 50 20000 500 2000 100 40000 800 5 600 1400\n"
    "   8       1 sda1 0 0 0 0 0 0 0 0 0 0 0\n"
    "   8       2 sda2 900 40 18000 450 1900 90 38000 700 0 550 1200\n"
    "   1       0 ram0 12 0 96 1 0 0 0 0 0 1 1\n"
    " 259       0 nvme0n1 5 0 40 2 3 0 24 1 0 3 3 0 0 0 0\n"
)


class RecordingSink(Sink):
    """Sink that keeps every batch it receives."""

    name = "recording"

    def __init__(self, delay: float = 0.0, fail: bool = False):
        self.delay = delay
        self.fail = fail
        self.batches: List[List[DeviceIOStats]] = []
        self.calls = 0
        self.active = 0
        self.max_active = 0
        self.started = False
        self.closed = False

    async def start(self) -> None:
        self.started = True

    async def close(self) -> None:
        self.closed = True

    async def publish(self, records: Sequence[DeviceIOStats]) -> None:
        self.calls += 1
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.fail:
                raise SinkFailure("downstream unavailable")
            self.batches.append(list(records))
        finally:
            self.active -= 1


async def wait_until(predicate, timeout: float = 3.0, interval: float = 0.01) -> None:
    """Poll until predicate() is true or fail the test."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            pytest.fail("condition not met in time")
        await asyncio.sleep(interval)


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture
def diskstats_file(tmp_path):
    """A diskstats snapshot on disk."""
    path = tmp_path / "diskstats"
    path.write_text(SAMPLE_DISKSTATS)
    return path


@pytest.fixture
def sink():
    return RecordingSink()
