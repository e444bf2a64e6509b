"""
IOBeat - Disk Statistics Parser

Turns the contents of /proc/diskstats into per-device records.

Each line of the source has the layout:

    major minor name  rd_ios rd_merges rd_sectors rd_ticks
                      wr_ios wr_merges wr_sectors wr_ticks
                      ios_in_progress io_ticks weighted_ticks

Only the 14-field layout is supported. Lines with any other field count
(older kernels, newer kernels with discard/flush columns, blank lines) are
skipped. Devices that have never completed a read are skipped as well, which
drops most loopback, ramdisk and empty cdrom entries while still reporting a
ramdisk that is actually in use.
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, List

from .exceptions import FieldParseFailure, SourceUnavailable

DEFAULT_SOURCE = "/proc/diskstats"

FIELD_COUNT = 14
MAX_COUNTER = 2 ** 64 - 1
MAX_COUNTER_DIGITS = len(str(MAX_COUNTER))

# Skip marker for the reads-completed column.
IDLE_READS = "0"


@dataclass(frozen=True)
class DeviceIOStats:
    """Block device I/O counters as of one collection tick."""
    major_number: int
    minor_number: int
    device_name: str
    reads_completed: int        # Reads completed successfully
    reads_merged: int           # Adjacent reads merged into a single request
    sectors_read: int
    msec_read_time: int         # Time spent by all reads
    writes_completed: int
    writes_merged: int
    sectors_written: int
    msec_write_time: int
    ios_in_flight: int          # Requests currently in progress
    msec_io_time: int           # Time during which ios_in_flight >= 1
    msec_weighted_io_time: int  # Completion time plus backlog

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the event field names used on the wire."""
        return {
            "major": self.major_number,
            "minor": self.minor_number,
            "device": self.device_name,
            "read_requests": self.reads_completed,
            "read_merged": self.reads_merged,
            "read_sectors": self.sectors_read,
            "msec_read": self.msec_read_time,
            "write_requests": self.writes_completed,
            "write_merged": self.writes_merged,
            "write_sectors": self.sectors_written,
            "msec_write": self.msec_write_time,
            "ios_in_progress": self.ios_in_flight,
            "msec_total": self.msec_io_time,
            "msec_weighted_total": self.msec_weighted_io_time,
        }


# Positional order of the columns in a diskstats line.
FIELD_NAMES = tuple(f.name for f in fields(DeviceIOStats))


def _parse_unsigned(text: str, line_number: int, name: str) -> int:
    # int() would also accept signs, underscores and non-ASCII digits
    if not (text.isascii() and text.isdigit()):
        raise FieldParseFailure(line_number, name, text, "not an unsigned integer")
    # length checked before int() so huge values never hit the digit limit
    digits = text.lstrip("0") or "0"
    if len(digits) > MAX_COUNTER_DIGITS:
        raise FieldParseFailure(line_number, name, text, "out of range")
    value = int(digits)
    if value > MAX_COUNTER:
        raise FieldParseFailure(line_number, name, text, "out of range")
    return value


def parse_line(parts: List[str], line_number: int = 1) -> DeviceIOStats:
    """Build a record from the 14 fields of one diskstats line."""
    values: Dict[str, Any] = {}
    for name, text in zip(FIELD_NAMES, parts):
        if name == "device_name":
            values[name] = text
        else:
            values[name] = _parse_unsigned(text, line_number, name)
    return DeviceIOStats(**values)


def parse(raw_text: str) -> List[DeviceIOStats]:
    """
    Parse the full contents of the diskstats source.

    Returns one record per supported line, in file order. Raises
    FieldParseFailure if any numeric field is invalid; no partial result is
    returned in that case.
    """
    records = []
    for line_number, line in enumerate(raw_text.splitlines(), start=1):
        parts = line.split()
        if len(parts) != FIELD_COUNT:
            continue
        if parts[3] == IDLE_READS:
            continue
        records.append(parse_line(parts, line_number))
    return records


def read_source(path: str = DEFAULT_SOURCE) -> str:
    """Read the statistics source in one go."""
    try:
        with open(Path(path), "r") as f:
            return f.read()
    except FileNotFoundError as e:
        raise SourceUnavailable(path, "not found") from e
    except (OSError, UnicodeDecodeError) as e:
        raise SourceUnavailable(path, str(e)) from e


def collect(path: str = DEFAULT_SOURCE) -> List[DeviceIOStats]:
    """Read and parse the current snapshot of the source."""
    return parse(read_source(path))
