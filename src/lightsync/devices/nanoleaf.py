"""
Nanoleaf Source: Open API client for the upstream panel controller.

Streams state events from the controller's server-sent-events endpoint and
accepts color/effect writes so that one-shot syncs reach the panels too.
"""

from __future__ import annotations

from typing import Any, AsyncIterator, Optional

import httpx
import structlog

from lightsync.color.convert import rgb_color_to_hsb
from lightsync.core.config import NanoleafConfig
from lightsync.core.exceptions import SourceUnavailableError
from lightsync.core.state import ColorRGB

logger = structlog.get_logger()

EVENT_STREAM_MEDIA_TYPE = "text/event-stream"


class NanoleafController:
    """
    HTTP client for one Nanoleaf controller.

    Satisfies both EventSource and ColorSink. The underlying AsyncClient is
    closed by aclose() only when this controller created it.
    """

    def __init__(
        self,
        config: NanoleafConfig,
        client: Optional[httpx.AsyncClient] = None,
        name: Optional[str] = None,
    ):
        self.config = config
        self.name = name or f"nanoleaf@{config.host}"
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=config.request_timeout_s)

    @property
    def is_configured(self) -> bool:
        return bool(self.config.host and self.config.auth_token)

    @property
    def base_url(self) -> str:
        return f"http://{self.config.host}:{self.config.port}/api/v1/{self.config.auth_token}"

    async def stream_lines(self) -> AsyncIterator[str]:
        """Yield raw event-stream lines until the controller closes the stream."""
        if not self.is_configured:
            raise SourceUnavailableError(self.name, "host or auth token not configured")

        url = f"{self.base_url}/events"
        params = {"id": ",".join(str(t) for t in self.config.event_types)}
        timeout = httpx.Timeout(self.config.request_timeout_s, read=self.config.read_timeout_s)

        try:
            async with self._client.stream(
                "GET",
                url,
                params=params,
                headers={"Accept": EVENT_STREAM_MEDIA_TYPE},
                timeout=timeout,
            ) as response:
                if response.status_code in (401, 403):
                    raise SourceUnavailableError(
                        self.name, f"authentication rejected (HTTP {response.status_code})"
                    )
                if response.is_error:
                    raise SourceUnavailableError(
                        self.name, f"event stream returned HTTP {response.status_code}"
                    )

                logger.info("Nanoleaf event stream opened", source=self.name)
                async for line in response.aiter_lines():
                    yield line
        except httpx.ConnectError as e:
            raise SourceUnavailableError(self.name, f"connection refused: {e}") from e
        except httpx.TimeoutException as e:
            raise SourceUnavailableError(self.name, f"timed out: {e}") from e
        except httpx.TransportError as e:
            raise SourceUnavailableError(self.name, f"stream reset: {e}") from e
        except httpx.HTTPError as e:
            raise SourceUnavailableError(self.name, f"request failed: {e}") from e

    async def apply_color(self, color: ColorRGB) -> bool:
        """Write a color as HSB, the controller's native representation."""
        hsb = rgb_color_to_hsb(color)
        payload = {
            "brightness": {"value": hsb.brightness},
            "hue": {"value": hsb.hue},
            "sat": {"value": hsb.saturation},
        }
        return await self._put("state", payload)

    async def apply_effect(self, name: str) -> bool:
        return await self._put("effects", {"select": name})

    async def set_power(self, on: bool) -> bool:
        return await self._put("state", {"on": {"value": on}})

    async def _put(self, path: str, payload: dict[str, Any]) -> bool:
        if not self.is_configured:
            logger.warning("Nanoleaf host or auth token is not configured", source=self.name)
            return False

        url = f"{self.base_url}/{path}"
        try:
            response = await self._client.put(url, json=payload)
        except httpx.HTTPError as e:
            logger.error("Nanoleaf request failed", source=self.name, path=path, error=str(e))
            return False

        if response.is_success:
            logger.debug("Nanoleaf command sent", source=self.name, path=path, payload=payload)
            return True

        logger.warning(
            "Nanoleaf command rejected",
            source=self.name,
            path=path,
            status=response.status_code,
            body=response.text,
        )
        return False

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "NanoleafController":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
