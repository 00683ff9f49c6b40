from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from lightsync.core.config import NanoleafConfig
from lightsync.core.exceptions import SourceUnavailableError
from lightsync.core.state import ColorRGB
from lightsync.devices.nanoleaf import NanoleafController
from lightsync.stream.pipeline import EventPipeline

STREAM_BODY = (
    b"id: 1\n"
    b'data: {"events":[{"attr":2,"value":100},{"attr":4,"value":100}]}\n'
    b"\n"
    b"id: 1\n"
    b'data: {"events":[{"attr":3,"value":120}]}\n'
    b"\n"
)


def _controller(handler, **overrides) -> NanoleafController:
    config = NanoleafConfig(host="10.0.0.5", auth_token="tok", **overrides)
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return NanoleafController(config, client=client)


async def _collect(controller: NanoleafController) -> list[str]:
    return [line async for line in controller.stream_lines()]


def test_stream_requests_state_events_and_yields_lines() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200, content=STREAM_BODY, headers={"Content-Type": "text/event-stream"}
        )

    controller = _controller(handler)
    lines = asyncio.run(_collect(controller))

    request = seen[0]
    assert request.method == "GET"
    assert request.url.path == "/api/v1/tok/events"
    assert request.url.port == 16021
    assert request.url.params["id"] == "1"
    assert request.headers["Accept"] == "text/event-stream"

    pipeline = EventPipeline()
    events = [e for e in (pipeline.feed_line(line) for line in lines) if e is not None]
    assert [e.rgb for e in events] == [ColorRGB(0, 255, 0)]


def test_stream_subscribes_to_configured_event_types() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=b"")

    asyncio.run(_collect(_controller(handler, event_types=[1, 3])))

    assert seen[0].url.params["id"] == "1,3"


@pytest.mark.parametrize("status", [401, 403])
def test_rejected_token_maps_to_source_unavailable(status: int) -> None:
    controller = _controller(lambda request: httpx.Response(status))

    with pytest.raises(SourceUnavailableError) as excinfo:
        asyncio.run(_collect(controller))

    assert "authentication rejected" in excinfo.value.reason
    assert excinfo.value.recoverable is False


def test_server_error_maps_to_source_unavailable() -> None:
    controller = _controller(lambda request: httpx.Response(500))

    with pytest.raises(SourceUnavailableError) as excinfo:
        asyncio.run(_collect(controller))

    assert "HTTP 500" in excinfo.value.reason


def test_connection_refused_maps_to_source_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(SourceUnavailableError) as excinfo:
        asyncio.run(_collect(_controller(handler)))

    assert excinfo.value.reason.startswith("connection refused")


def test_timeout_maps_to_source_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(SourceUnavailableError) as excinfo:
        asyncio.run(_collect(_controller(handler)))

    assert excinfo.value.reason.startswith("timed out")


def test_other_request_errors_map_to_source_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.DecodingError("corrupt gzip stream", request=request)

    with pytest.raises(SourceUnavailableError) as excinfo:
        asyncio.run(_collect(_controller(handler)))

    assert excinfo.value.reason.startswith("request failed")


def test_unconfigured_controller_refuses_to_stream() -> None:
    controller = NanoleafController(NanoleafConfig())

    with pytest.raises(SourceUnavailableError):
        asyncio.run(_collect(controller))
    assert asyncio.run(controller.apply_effect("Flames")) is False


def test_apply_color_writes_hsb_state() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(204)

    assert asyncio.run(_controller(handler).apply_color(ColorRGB(255, 0, 0))) is True

    request = seen[0]
    assert request.method == "PUT"
    assert request.url.path == "/api/v1/tok/state"
    assert json.loads(request.content) == {
        "brightness": {"value": 100},
        "hue": {"value": 0},
        "sat": {"value": 100},
    }


def test_apply_effect_and_power_payloads() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(204)

    controller = _controller(handler)
    assert asyncio.run(controller.apply_effect("Northern Lights")) is True
    assert asyncio.run(controller.set_power(False)) is True

    assert seen[0].url.path == "/api/v1/tok/effects"
    assert json.loads(seen[0].content) == {"select": "Northern Lights"}
    assert json.loads(seen[1].content) == {"on": {"value": False}}


def test_rejected_write_returns_false() -> None:
    controller = _controller(lambda request: httpx.Response(422, text="bad effect"))

    assert asyncio.run(controller.apply_effect("Nope")) is False
