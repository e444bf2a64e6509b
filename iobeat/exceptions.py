"""
IOBeat - Exceptions

Errors raised by the parser, configuration layer and bundled sinks.
"""

from typing import Optional


class IOBeatError(Exception):
    """Base class for all agent errors."""


class ConfigurationError(IOBeatError):
    """Invalid configuration; aborts startup before the collection loop runs."""


class CollectionError(IOBeatError):
    """A single collection tick failed. The loop logs it and keeps running."""


class SourceUnavailable(CollectionError):
    """The statistics source file is missing or unreadable."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        message = f"{path} not available"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class FieldParseFailure(CollectionError):
    """A numeric field could not be parsed; the whole snapshot is rejected."""

    def __init__(self, line_number: int, field: str, value: str, reason: Optional[str] = None):
        self.line_number = line_number
        self.field = field
        self.value = value
        message = f"line {line_number}: invalid {field} value {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class SinkFailure(IOBeatError):
    """A sink could not deliver a batch of records."""
