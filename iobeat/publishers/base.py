"""
IOBeat - Base Sink Interface

Every output implements this interface. The collector calls `publish` once
per successful tick with the full batch of that tick's records; framing,
timestamping and delivery are the sink's business.
"""

import json
import platform
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from .. import NAME, __version__
from ..diskstats import DeviceIOStats

EVENT_TYPE = "iostats"


def build_event(
    record: DeviceIOStats,
    timestamp: Optional[datetime] = None,
    hostname: Optional[str] = None,
) -> Dict[str, Any]:
    """Wrap a record in the event envelope sent downstream."""
    timestamp = timestamp or datetime.now(timezone.utc)
    return {
        "@timestamp": timestamp.isoformat(),
        "type": EVENT_TYPE,
        "count": 1,
        "beat": {
            "name": NAME,
            "hostname": hostname or platform.node(),
            "version": __version__,
        },
        "device": record.to_dict(),
    }


def build_events(records: Sequence[DeviceIOStats], hostname: Optional[str] = None) -> List[Dict[str, Any]]:
    """Build events for a batch; all events of a batch share one timestamp."""
    timestamp = datetime.now(timezone.utc)
    hostname = hostname or platform.node()
    return [build_event(record, timestamp, hostname) for record in records]


class Sink(ABC):
    """Consumer of per-tick record batches."""

    name: str = "sink"

    async def start(self) -> None:
        """Open connections. Called once before the first publish."""

    async def close(self) -> None:
        """Release connections. Called once after the last publish."""

    @abstractmethod
    async def publish(self, records: Sequence[DeviceIOStats]) -> None:
        """Deliver one tick's records. Raise SinkFailure on delivery errors."""


class JSONSink(Sink):
    """Sink that serializes each batch as a JSON array of events."""

    def __init__(self, hostname: Optional[str] = None):
        self._hostname = hostname

    def encode(self, records: Sequence[DeviceIOStats]) -> bytes:
        return json.dumps(build_events(records, self._hostname)).encode("utf-8")
