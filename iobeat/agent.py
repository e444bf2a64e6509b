"""
IOBeat - Agent

Host lifecycle around the diskstats collector: configure, start (blocks until
stopped), stop. Usable from the bundled CLI or embedded in another process.

Usage:
    iobeat [--config CONFIG_PATH] [--log-level LEVEL]
"""

import argparse
import asyncio
import logging
import signal
from typing import Any, Dict, Optional

import structlog

from . import __version__
from .config import DEFAULT_CONFIG_PATH, CollectorConfig, load_config
from .exceptions import ConfigurationError
from .publishers import Sink, create_sink
from .telemetry import DiskStatsCollector

logger = structlog.get_logger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging on top of the stdlib logger."""
    numeric_level = logging.getLevelName(str(level).upper())
    if not isinstance(numeric_level, int):
        raise ConfigurationError(f"Unknown log level {level!r}")

    logging.basicConfig(format="%(message)s", level=numeric_level, force=True)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class IOBeat:
    """Main agent application."""

    def __init__(self, sink: Optional[Sink] = None):
        self._injected_sink = sink
        self.sink: Optional[Sink] = sink
        self.config: Optional[CollectorConfig] = None
        self.collector: Optional[DiskStatsCollector] = None
        self._stop_requested = False

    @property
    def is_running(self) -> bool:
        return bool(self.collector and self.collector.is_running)

    def configure(self, raw_config: Optional[Dict[str, Any]] = None) -> None:
        """Validate raw configuration and build the collector."""
        raw_config = raw_config or {}
        if not isinstance(raw_config, dict):
            raise ConfigurationError("configuration must be a mapping")

        self.config = CollectorConfig.from_dict(raw_config.get("iobeat"))
        self.sink = self._injected_sink or create_sink(raw_config.get("output"))
        self.collector = DiskStatsCollector(self.config, self.sink)

        if self._stop_requested:
            self.collector.stop()

        logger.debug("Agent configured", period=self.config.period, sink=self.sink.name)

    async def start(self) -> None:
        """Run until stopped."""
        if self._stop_requested:
            logger.info("Stop requested before start, not starting")
            return
        if self.collector is None:
            raise ConfigurationError("Agent is not configured")

        logger.info("Starting IOBeat", version=__version__, period=self.config.period)
        try:
            await self.sink.start()
            await self.collector.run()
        finally:
            await self.sink.close()
        logger.info("IOBeat stopped")

    def stop(self) -> None:
        """Request shutdown. Non-blocking and idempotent."""
        if self._stop_requested:
            return
        self._stop_requested = True
        logger.info("Stopping IOBeat")
        if self.collector:
            self.collector.stop()

    def handle_signal(self, signum, frame=None):
        """Handle shutdown signals."""
        logger.info("Received signal", signal=signum)
        self.stop()


async def run_agent(raw_config: Dict[str, Any]) -> None:
    agent = IOBeat()
    agent.configure(raw_config)

    loop = asyncio.get_running_loop()
    for signum in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(signum, agent.handle_signal, signum)

    await agent.start()


def main(argv=None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="IOBeat - block device I/O statistics agent")
    parser.add_argument(
        "--config", "-c",
        default=DEFAULT_CONFIG_PATH,
        help="Path to configuration file"
    )
    parser.add_argument("--log-level", help="Override logging.level from the config file")
    parser.add_argument("--version", action="version", version=f"iobeat {__version__}")
    args = parser.parse_args(argv)

    try:
        configure_logging(args.log_level or "INFO")
        raw_config = load_config(args.config)
        level = args.log_level or (raw_config.get("logging") or {}).get("level", "INFO")
        configure_logging(level)
        asyncio.run(run_agent(raw_config))
    except ConfigurationError as e:
        logger.error("Invalid configuration", error=str(e))
        return 1
    except Exception as e:
        logger.exception("Agent failed", error=str(e))
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
