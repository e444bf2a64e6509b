"""
IOBeat - Telemetry Package

Periodic collection loop and its ticker.
"""

from .collector import CollectorState, CollectorStats, DiskStatsCollector, run
from .ticker import Ticker

__all__ = ["CollectorState", "CollectorStats", "DiskStatsCollector", "Ticker", "run"]
