from __future__ import annotations

import asyncio
import json

import httpx

from lightsync.core.config import CyncSinkConfig
from lightsync.core.state import ColorRGB
from lightsync.devices.cync import CyncController


class Recorder:
    def __init__(self, status: int = 200) -> None:
        self.status = status
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status, json={"ok": self.status < 400})

    @property
    def payloads(self) -> list[dict]:
        return [json.loads(request.content) for request in self.requests]


def _controller(handler, **overrides) -> CyncController:
    values = {"server_url": "http://cync-lan:8080/", "device_ip": "192.168.1.40"}
    values.update(overrides)
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return CyncController(CyncSinkConfig(**values), client=client)


def test_apply_color_posts_rgb_command() -> None:
    recorder = Recorder()
    controller = _controller(recorder)

    assert asyncio.run(controller.apply_color(ColorRGB(12, 34, 56))) is True

    request = recorder.requests[0]
    assert request.method == "POST"
    assert str(request.url) == "http://cync-lan:8080/api/devices/192.168.1.40"
    assert recorder.payloads == [{"status": 1, "color": {"r": 12, "g": 34, "b": 56, "s": 0}}]


def test_name_defaults_to_device_ip() -> None:
    assert _controller(Recorder()).name == "192.168.1.40"
    assert _controller(Recorder(), name="kitchen").name == "kitchen"


def test_power_and_brightness_commands() -> None:
    recorder = Recorder()
    controller = _controller(recorder)

    async def scenario() -> None:
        await controller.turn_on()
        await controller.turn_off()
        await controller.set_brightness(150)

    asyncio.run(scenario())

    assert recorder.payloads == [
        {"status": 1},
        {"status": 0},
        {"status": 1, "brightness": 100},
    ]


def test_server_rejection_returns_false() -> None:
    controller = _controller(Recorder(status=500))

    assert asyncio.run(controller.apply_color(ColorRGB(1, 1, 1))) is False


def test_transport_error_returns_false() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    assert asyncio.run(_controller(handler).apply_color(ColorRGB(1, 1, 1))) is False


def test_effects_are_not_supported() -> None:
    recorder = Recorder()

    assert asyncio.run(_controller(recorder).apply_effect("Flames")) is False
    assert recorder.requests == []


def test_unconfigured_device_sends_nothing() -> None:
    recorder = Recorder()
    controller = _controller(recorder, device_ip=None)

    assert asyncio.run(controller.apply_color(ColorRGB(1, 1, 1))) is False
    assert recorder.requests == []
