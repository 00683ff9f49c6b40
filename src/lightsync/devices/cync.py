"""
Cync Sink: drives a Cync bulb through a cync-lan server.

cync-lan exposes ``POST /api/devices/{device_ip}`` with a small JSON command
body. Authentication with the bulbs is handled by the server.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import httpx
import structlog

from lightsync.core.config import CyncSinkConfig
from lightsync.core.state import ColorRGB

logger = structlog.get_logger()

STATUS_ON = 1
STATUS_OFF = 0
# cync-lan color saturation: 0 = most saturated, 255 = white
VIVID_SATURATION = 0


class CyncController:
    """HTTP client for one Cync device."""

    def __init__(self, config: CyncSinkConfig, client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self.name = config.name or config.device_ip or "cync"
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=config.request_timeout_s)

    @property
    def is_configured(self) -> bool:
        return bool(self.config.server_url.strip() and self.config.device_ip)

    @property
    def api_url(self) -> str:
        return f"{self.config.server_url.rstrip('/')}/api/devices/{self.config.device_ip}"

    async def apply_color(self, color: ColorRGB) -> bool:
        return await self._send_command(
            {
                "status": STATUS_ON,
                "color": {"r": color.r, "g": color.g, "b": color.b, "s": VIVID_SATURATION},
            }
        )

    async def apply_effect(self, name: str) -> bool:
        logger.warning("Cync devices do not support effects", sink=self.name, effect=name)
        return False

    async def turn_on(self) -> bool:
        return await self._send_command({"status": STATUS_ON})

    async def turn_off(self) -> bool:
        return await self._send_command({"status": STATUS_OFF})

    async def set_brightness(self, brightness: int) -> bool:
        brightness = max(0, min(100, brightness))
        return await self._send_command({"status": STATUS_ON, "brightness": brightness})

    async def _send_command(self, payload: dict[str, Any]) -> bool:
        if not self.is_configured:
            logger.warning("Cync LAN server URL or device IP is not configured", sink=self.name)
            return False

        try:
            response = await self._client.post(self.api_url, json=payload)
        except httpx.HTTPError as e:
            logger.error("Error sending request to Cync LAN server", sink=self.name, error=str(e))
            return False

        if response.is_success:
            logger.debug("Cync command sent", sink=self.name, payload=json.dumps(payload))
            return True

        logger.warning(
            "Cync command rejected",
            sink=self.name,
            status=response.status_code,
            body=response.text,
        )
        return False

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "CyncController":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
