"""
IOBeat - Block device I/O statistics agent

Periodically reads /proc/diskstats and publishes per-device counters to an
output sink.
"""

__version__ = "1.0.0"
NAME = "iobeat"
