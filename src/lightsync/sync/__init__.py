"""Synchronization of source color changes to sinks."""

from lightsync.sync.coordinator import SyncCoordinator
from lightsync.sync.dispatch import DispatchReport, SinkDispatcher, SinkWorker
from lightsync.sync.runner import ReconnectingRunner

__all__ = [
    "DispatchReport",
    "ReconnectingRunner",
    "SinkDispatcher",
    "SinkWorker",
    "SyncCoordinator",
]
