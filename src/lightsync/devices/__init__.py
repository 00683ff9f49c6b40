"""Device clients for the Nanoleaf source and Cync sinks."""

from lightsync.devices.cync import CyncController
from lightsync.devices.nanoleaf import NanoleafController

__all__ = [
    "CyncController",
    "NanoleafController",
]
