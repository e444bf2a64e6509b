"""
IOBeat - Console Sink

Writes one JSON document per device to a text stream (stdout by default).
"""

import json
import sys
from typing import Optional, Sequence, TextIO

from ..diskstats import DeviceIOStats
from .base import Sink, build_events


class ConsoleSink(Sink):
    """Line-delimited JSON output."""

    name = "console"

    def __init__(self, stream: Optional[TextIO] = None, hostname: Optional[str] = None, pretty: bool = False):
        self._stream = stream or sys.stdout
        self._hostname = hostname
        self._indent = 2 if pretty else None

    async def publish(self, records: Sequence[DeviceIOStats]) -> None:
        for event in build_events(records, self._hostname):
            self._stream.write(json.dumps(event, indent=self._indent) + "\n")
        self._stream.flush()
