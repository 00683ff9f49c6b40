"""
Sink dispatch with per-sink failure containment.

Each sink gets its own SinkWorker. In serialized mode a worker owns a
bounded queue and a single delivery task, so calls to one sink never
overlap and arrive in stream order; when the queue is full the oldest
pending color is dropped in favour of the newest. In unserialized mode
every color becomes an independent task.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, Sequence

import structlog

from lightsync.core.exceptions import DeviceConfigError, SinkDispatchError
from lightsync.core.ports import ColorSink
from lightsync.core.state import ColorRGB

logger = structlog.get_logger()


@dataclass
class DispatchReport:
    """Outcome of a one-shot fan-out."""

    results: dict[str, bool] = field(default_factory=dict)
    errors: dict[str, SinkDispatchError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return all(self.results.values())

    @property
    def failed(self) -> list[str]:
        return [name for name, ok in self.results.items() if not ok]


def ensure_unique_names(targets: Sequence[ColorSink]) -> None:
    """Reports and stats are keyed by name, so every target needs its own."""
    seen: set[str] = set()
    for target in targets:
        if target.name in seen:
            raise DeviceConfigError(target.name, "duplicate sink name")
        seen.add(target.name)


async def guarded_call(
    sink: ColorSink,
    operation: str,
    call: Callable[[], Awaitable[bool]],
) -> Optional[SinkDispatchError]:
    """Run one sink call; return the failure instead of raising it."""
    try:
        ok = await call()
    except Exception as e:
        error = SinkDispatchError(sink.name, f"{operation}: {e}")
    else:
        if ok:
            return None
        error = SinkDispatchError(sink.name, f"{operation} reported failure")

    logger.warning("Sink dispatch failed", sink=sink.name, error=error.reason)
    return error


async def fan_out(
    targets: Sequence[ColorSink],
    operation: str,
    call: Callable[[ColorSink], Awaitable[bool]],
) -> DispatchReport:
    """Invoke every target concurrently and collect a DispatchReport."""
    ensure_unique_names(targets)
    outcomes = await asyncio.gather(
        *(guarded_call(target, operation, lambda t=target: call(t)) for target in targets)
    )

    report = DispatchReport()
    for target, error in zip(targets, outcomes):
        report.results[target.name] = error is None
        if error is not None:
            report.errors[target.name] = error
    return report


class SinkWorker:
    """Delivers colors to a single sink."""

    def __init__(self, sink: ColorSink, serialize: bool = True, queue_size: int = 4):
        self.sink = sink
        self.serialize = serialize
        self._queue: asyncio.Queue[ColorRGB] = asyncio.Queue(maxsize=queue_size)
        self._task: Optional[asyncio.Task] = None
        self._inflight: set[asyncio.Task] = set()

        # Stats
        self._delivered = 0
        self._failed = 0
        self._dropped = 0

    def start(self) -> None:
        if self.serialize and self._task is None:
            self._task = asyncio.create_task(
                self._run(), name=f"sink-worker-{self.sink.name}"
            )

    def submit(self, color: ColorRGB) -> None:
        """Queue a color without waiting for the sink."""
        if not self.serialize:
            task = asyncio.create_task(self._deliver(color))
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)
            return

        if self._queue.full():
            self._queue.get_nowait()
            self._queue.task_done()
            self._dropped += 1
            logger.debug("Sink queue full, dropping oldest color", sink=self.sink.name)
        self._queue.put_nowait(color)

    async def _run(self) -> None:
        while True:
            color = await self._queue.get()
            try:
                await self._deliver(color)
            finally:
                self._queue.task_done()

    async def _deliver(self, color: ColorRGB) -> None:
        error = await guarded_call(
            self.sink, "apply_color", lambda: self.sink.apply_color(color)
        )
        if error is None:
            self._delivered += 1
        else:
            self._failed += 1

    async def drain(self, timeout: float) -> bool:
        """Wait for pending deliveries; False if the timeout expired."""
        pending: list[Awaitable] = []
        if self.serialize:
            pending.append(self._queue.join())
        if self._inflight:
            pending.append(asyncio.gather(*self._inflight, return_exceptions=True))
        if not pending:
            return True
        try:
            await asyncio.wait_for(asyncio.gather(*pending), timeout)
        except asyncio.TimeoutError:
            logger.warning("Sink drain timed out", sink=self.sink.name, timeout_s=timeout)
            return False
        return True

    async def close(self) -> None:
        """Cancel the worker and any in-flight deliveries."""
        tasks = list(self._inflight)
        if self._task is not None:
            tasks.append(self._task)
            self._task = None
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._inflight.clear()

        while not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()

    def get_stats(self) -> dict:
        return {
            "delivered": self._delivered,
            "failed": self._failed,
            "dropped": self._dropped,
        }


class SinkDispatcher:
    """Fans each color out to every sink of one sync session."""

    def __init__(
        self,
        sinks: Sequence[ColorSink],
        serialize: bool = True,
        queue_size: int = 4,
    ):
        ensure_unique_names(sinks)
        self.workers = [SinkWorker(sink, serialize, queue_size) for sink in sinks]

    def start(self) -> None:
        for worker in self.workers:
            worker.start()

    def dispatch(self, color: ColorRGB) -> None:
        for worker in self.workers:
            worker.submit(color)

    async def close(self, drain: bool = False, timeout: float = 2.0) -> None:
        if drain:
            await asyncio.gather(*(worker.drain(timeout) for worker in self.workers))
        await asyncio.gather(*(worker.close() for worker in self.workers))

    def get_stats(self) -> dict:
        return {worker.sink.name: worker.get_stats() for worker in self.workers}
