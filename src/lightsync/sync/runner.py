"""Caller-side reconnect policy around SyncCoordinator sessions."""

from __future__ import annotations

import asyncio
from typing import Optional

import structlog

from lightsync.core.config import SyncConfig
from lightsync.core.exceptions import SourceUnavailableError
from lightsync.sync.coordinator import SyncCoordinator

logger = structlog.get_logger()


class ReconnectingRunner:
    """
    Re-runs sync sessions after the source drops.

    The coordinator itself never retries; this wrapper waits
    reconnect_delay_s between attempts and gives up after
    max_reconnect_attempts consecutive failures (0 = unlimited). A session
    that read at least one line resets the failure count.
    """

    def __init__(self, coordinator: SyncCoordinator, config: Optional[SyncConfig] = None):
        self.coordinator = coordinator
        self.config = config or coordinator.config
        self._stopped = False
        self._wake: Optional[asyncio.Event] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self.attempts = 0

    async def run(self) -> None:
        """Run until stop(), a clean end of stream, or retries are exhausted."""
        self._loop = asyncio.get_running_loop()
        self._wake = asyncio.Event()
        failures = 0

        while not self._stopped:
            self.attempts += 1
            try:
                await self.coordinator.start()
                return
            except SourceUnavailableError as e:
                if self.coordinator.get_stats()["pipeline"].get("lines", 0) > 0:
                    failures = 0
                failures += 1

                if self._stopped or not self.config.reconnect:
                    raise
                limit = self.config.max_reconnect_attempts
                if limit and failures >= limit:
                    logger.error("Giving up on source", attempts=failures, error=e.reason)
                    raise

                logger.warning(
                    "Source lost, reconnecting",
                    error=e.reason,
                    delay_s=self.config.reconnect_delay_s,
                    failures=failures,
                )
                try:
                    await asyncio.wait_for(self._wake.wait(), self.config.reconnect_delay_s)
                except asyncio.TimeoutError:
                    pass

    def stop(self) -> None:
        """Stop the current session and any pending reconnect wait."""
        self._stopped = True
        self.coordinator.stop()
        if self._loop is not None and self._wake is not None:
            self._loop.call_soon_threadsafe(self._wake.set)
