"""
IOBeat - Publishers Package

Sinks receive one batch of device records per collection tick:
- ConsoleSink: line-delimited JSON on stdout
- MQTTSink: one JSON array message per tick to an MQTT broker
- HTTPSink: one JSON array POST per tick
"""

from .base import Sink, build_event, build_events
from .console import ConsoleSink
from .factory import create_sink
from .http import HTTPSink
from .mqtt import MQTTSink

__all__ = [
    "Sink",
    "ConsoleSink",
    "HTTPSink",
    "MQTTSink",
    "build_event",
    "build_events",
    "create_sink",
]
