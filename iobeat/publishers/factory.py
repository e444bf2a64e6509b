"""
IOBeat - Sink Factory

Builds the configured output from the `output` section of the config.
"""

from typing import Any, Callable, Dict, Optional

import structlog

from ..exceptions import ConfigurationError
from .base import Sink
from .console import ConsoleSink
from .http import HTTPSink
from .mqtt import MQTTSink

logger = structlog.get_logger(__name__)


def _console(options: Dict[str, Any]) -> Sink:
    return ConsoleSink(pretty=bool(options.get("pretty", False)))


def _mqtt(options: Dict[str, Any]) -> Sink:
    qos = options.get("qos", 0)
    if qos not in (0, 1, 2):
        raise ConfigurationError(f"mqtt qos must be 0, 1 or 2, got {qos!r}")
    return MQTTSink(
        host=options.get("host", "localhost"),
        port=int(options.get("port", 1883)),
        topic=options.get("topic"),
        qos=qos,
        username=options.get("username"),
        password=options.get("password"),
        password_file=options.get("password_file"),
        client_id=options.get("client_id", "iobeat"),
    )


def _http(options: Dict[str, Any]) -> Sink:
    url = options.get("url")
    if not url:
        raise ConfigurationError("http output requires a url")
    return HTTPSink(
        url=url,
        timeout=float(options.get("timeout", 10.0)),
        headers=options.get("headers"),
    )


SINK_BUILDERS: Dict[str, Callable[[Dict[str, Any]], Sink]] = {
    "console": _console,
    "mqtt": _mqtt,
    "http": _http,
}


def create_sink(output_config: Optional[Dict[str, Any]] = None) -> Sink:
    """
    Create a sink from the output configuration.

    The `type` key selects the sink; its options live under a key of the
    same name, e.g. ``{"type": "mqtt", "mqtt": {"host": "broker"}}``.
    """
    output_config = output_config or {}
    sink_type = output_config.get("type", "console")

    builder = SINK_BUILDERS.get(sink_type)
    if builder is None:
        raise ConfigurationError(
            f"Unknown output type {sink_type!r}, expected one of {', '.join(sorted(SINK_BUILDERS))}"
        )

    options = output_config.get(sink_type) or {}
    if not isinstance(options, dict):
        raise ConfigurationError(f"output.{sink_type} must be a mapping")

    try:
        sink = builder(options)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid {sink_type} output options: {e}") from e

    logger.debug("Sink created", type=sink_type)
    return sink
