"""
IOBeat - HTTP Sink

POSTs each tick's batch as a JSON array to an HTTP endpoint.
"""

import asyncio
from typing import Dict, Optional, Sequence

import aiohttp
import structlog

from ..diskstats import DeviceIOStats
from ..exceptions import SinkFailure
from .base import JSONSink

logger = structlog.get_logger(__name__)


class HTTPSink(JSONSink):
    """HTTP output backed by a shared aiohttp session."""

    name = "http"

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        headers: Optional[Dict[str, str]] = None,
        hostname: Optional[str] = None,
    ):
        super().__init__(hostname)
        self.url = url
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._headers = {"Content-Type": "application/json", **(headers or {})}
        self._session: Optional[aiohttp.ClientSession] = None

    async def start(self) -> None:
        self._session = aiohttp.ClientSession(timeout=self._timeout, headers=self._headers)
        logger.info("HTTP sink started", url=self.url)

    async def close(self) -> None:
        if self._session:
            await self._session.close()
            self._session = None
        logger.info("HTTP sink stopped")

    async def publish(self, records: Sequence[DeviceIOStats]) -> None:
        if not self._session:
            raise SinkFailure("HTTP sink not started")

        try:
            async with self._session.post(self.url, data=self.encode(records)) as response:
                if response.status >= 300:
                    body = await response.text()
                    raise SinkFailure(f"HTTP {response.status}: {body[:200]}")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise SinkFailure(f"HTTP request failed: {e}") from e
