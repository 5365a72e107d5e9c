"""
Connectivity flag consulted before every request.

The flag can be flipped directly (tests, host apps with their own
reachability source) or kept current by a background TCP probe.
"""

import asyncio
import logging
from typing import Optional
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)


class ConnectivityMonitor:
    def __init__(self, connected: bool = True):
        self._connected = connected
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def is_connected(self) -> bool:
        return self._connected

    def set_connected(self, connected: bool) -> None:
        if connected != self._connected:
            logger.info("Network %s", "available" if connected else "unavailable")
        self._connected = connected

    async def probe(self, url: str, timeout: float = 3.0) -> bool:
        """Open (and close) a TCP connection to the host of ``url``."""
        parts = urlsplit(url)
        host = parts.hostname
        if not host:
            return False
        port = parts.port or (443 if parts.scheme == "https" else 80)
        try:
            _, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout)
        except (OSError, asyncio.TimeoutError):
            return False
        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            pass
        return True

    async def watch(self, url: str, interval: float = 10.0) -> None:
        while True:
            self.set_connected(await self.probe(url))
            await asyncio.sleep(interval)

    def start(self, url: str, interval: float = 10.0) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self.watch(url, interval))

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
