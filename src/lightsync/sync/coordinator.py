"""
Synchronization Coordinator: mirrors source color changes to sinks.

Lifecycle is IDLE -> LISTENING -> STOPPING -> IDLE. Each start() builds a
fresh EventPipeline and SinkDispatcher scoped to that session, reads the
source on a single task and hands every ColorChangeEvent to the dispatcher
without waiting on any sink.
"""

from __future__ import annotations

import asyncio
import threading
from typing import Optional, Sequence

import structlog

from lightsync.core.config import SyncConfig
from lightsync.core.exceptions import SyncAlreadyRunningError, SyncStateError
from lightsync.core.ports import ColorSink, EventSource
from lightsync.core.state import AccumulatedState, ColorRGB, SyncState
from lightsync.stream.pipeline import EventPipeline
from lightsync.sync.dispatch import DispatchReport, SinkDispatcher, fan_out

logger = structlog.get_logger()


class SyncCoordinator:
    """
    Owns the subscription between one source and a fixed set of sinks.

    stop() may be called from any thread or from a signal handler; it is a
    no-op while idle. A stopped coordinator can be started again.
    """

    def __init__(
        self,
        source: Optional[EventSource] = None,
        sinks: Sequence[ColorSink] = (),
        config: Optional[SyncConfig] = None,
    ):
        self.source = source
        self.sinks = list(sinks)
        self.config = config or SyncConfig()

        self._state = SyncState.IDLE
        self._state_lock = threading.Lock()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stop_event: Optional[asyncio.Event] = None

        self._pipeline: Optional[EventPipeline] = None
        self._dispatcher: Optional[SinkDispatcher] = None
        self._carried_state: Optional[AccumulatedState] = None
        self._sessions = 0

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is not SyncState.IDLE

    async def start(
        self,
        source: Optional[EventSource] = None,
        sinks: Optional[Sequence[ColorSink]] = None,
    ) -> None:
        """
        Run one sync session until stop() is called or the stream ends.

        Raises SyncAlreadyRunningError when a session is active and
        SourceUnavailableError when the source connection fails.
        """
        with self._state_lock:
            if self._state is not SyncState.IDLE:
                raise SyncAlreadyRunningError(self._state.value)
            session_source = source or self.source
            if session_source is None:
                raise SyncStateError("No source configured for sync")
            self._loop = asyncio.get_running_loop()
            self._stop_event = asyncio.Event()
            self._state = SyncState.LISTENING

        session_sinks = list(sinks) if sinks is not None else list(self.sinks)
        self._sessions += 1
        self._pipeline = None
        self._dispatcher = None

        tasks: list[asyncio.Task] = []
        stopped = False
        try:
            self._pipeline = EventPipeline(
                self.config.power_off_policy,
                initial=self._carried_state if self.config.carry_state_across_sessions else None,
            )
            self._dispatcher = SinkDispatcher(
                session_sinks,
                serialize=self.config.serialize_per_sink,
                queue_size=self.config.sink_queue_size,
            )
            self._dispatcher.start()

            logger.info(
                "Sync started",
                source=session_source.name,
                sinks=[sink.name for sink in session_sinks],
                session=self._sessions,
            )

            read_task = asyncio.create_task(
                self._read_stream(session_source, self._pipeline, self._dispatcher),
                name="sync-read",
            )
            tasks.append(read_task)
            tasks.append(asyncio.create_task(self._stop_event.wait(), name="sync-stop"))

            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
            stopped = read_task not in done
            if not stopped:
                read_task.result()
        finally:
            with self._state_lock:
                self._state = SyncState.STOPPING
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            await self._teardown(drain=not stopped)

    async def _read_stream(
        self,
        source: EventSource,
        pipeline: EventPipeline,
        dispatcher: SinkDispatcher,
    ) -> None:
        async for line in source.stream_lines():
            event = pipeline.feed_line(line)
            if event is not None:
                dispatcher.dispatch(event.rgb)
        logger.info("Source stream ended", source=source.name)

    async def _teardown(self, drain: bool) -> None:
        try:
            if self._dispatcher is not None:
                await self._dispatcher.close(
                    drain=drain, timeout=self.config.drain_timeout_s
                )
        finally:
            if self._pipeline is not None:
                self._carried_state = self._pipeline.accumulator.snapshot()
            stats = self.get_stats()
            self._stop_event = None
            self._loop = None
            with self._state_lock:
                self._state = SyncState.IDLE
            logger.info("Sync stopped", **stats)

    def stop(self) -> None:
        """Signal the active session to stop. No-op while idle."""
        with self._state_lock:
            if self._state is not SyncState.LISTENING:
                return
            self._state = SyncState.STOPPING
            loop, stop_event = self._loop, self._stop_event

        logger.info("Sync stop requested")
        if loop is None or stop_event is None:
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            stop_event.set()
        else:
            loop.call_soon_threadsafe(stop_event.set)

    async def sync_color(self, r: int, g: int, b: int) -> DispatchReport:
        """Push one color to the source and every sink, bypassing the stream."""
        color = ColorRGB(r, g, b)
        logger.info("Manual color sync", rgb=color.as_tuple())
        return await fan_out(
            self._targets(), "apply_color", lambda target: target.apply_color(color)
        )

    async def sync_effect(self, name: str) -> DispatchReport:
        """Select one effect on the source and every sink."""
        logger.info("Manual effect sync", effect=name)
        return await fan_out(
            self._targets(), "apply_effect", lambda target: target.apply_effect(name)
        )

    def _targets(self) -> list[ColorSink]:
        targets: list[ColorSink] = []
        if isinstance(self.source, ColorSink):
            targets.append(self.source)
        targets.extend(self.sinks)
        return targets

    def get_stats(self) -> dict:
        """Get statistics for the current or most recent session."""
        return {
            "state": self._state.value,
            "sessions": self._sessions,
            "pipeline": self._pipeline.get_stats() if self._pipeline else {},
            "sinks": self._dispatcher.get_stats() if self._dispatcher else {},
        }
