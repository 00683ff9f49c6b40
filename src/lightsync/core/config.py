"""
Configuration Management for LightSync.

Uses Pydantic Settings for type-safe configuration with environment
variable support and YAML file loading.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings
import yaml

from lightsync.core.state import PowerOffPolicy

NANOLEAF_DEFAULT_PORT = 16021
NANOLEAF_STATE_EVENT = 1


class NanoleafConfig(BaseModel):
    """Source device (Nanoleaf Open API) configuration."""
    host: Optional[str] = None
    auth_token: Optional[str] = None
    port: int = NANOLEAF_DEFAULT_PORT
    # 1=state, 2=layout, 3=effects, 4=touch
    event_types: List[int] = Field(default=[NANOLEAF_STATE_EVENT])
    request_timeout_s: float = 5.0
    read_timeout_s: Optional[float] = None  # None = wait forever on the stream


class CyncSinkConfig(BaseModel):
    """One Cync bulb reached through a cync-lan server."""
    name: Optional[str] = None  # defaults to the device IP
    server_url: str = "http://localhost:8080"
    device_ip: Optional[str] = None
    enabled: bool = True
    request_timeout_s: float = 5.0


class SyncConfig(BaseModel):
    """Synchronization coordinator configuration."""
    power_off_policy: PowerOffPolicy = PowerOffPolicy.IGNORE
    serialize_per_sink: bool = True
    sink_queue_size: int = Field(default=4, ge=1)
    drain_timeout_s: float = Field(default=2.0, ge=0)
    carry_state_across_sessions: bool = False

    # Caller-side retry policy for lost source streams
    reconnect: bool = False
    reconnect_delay_s: float = Field(default=5.0, ge=0)
    max_reconnect_attempts: int = Field(default=0, ge=0)  # 0 = unlimited


class Settings(BaseSettings):
    """
    Main application settings.

    Can be configured via:
    - Environment variables (prefixed with LIGHTSYNC_)
    - YAML config file
    - Direct instantiation
    """

    nanoleaf: NanoleafConfig = Field(default_factory=NanoleafConfig)
    sinks: List[CyncSinkConfig] = Field(default_factory=list)
    sync: SyncConfig = Field(default_factory=SyncConfig)

    # Debug
    debug: bool = False
    log_level: str = "INFO"

    class Config:
        env_prefix = "LIGHTSYNC_"
        env_nested_delimiter = "__"

    @classmethod
    def from_yaml(cls, path: Path) -> "Settings":
        """Load settings from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    def to_yaml(self, path: Path) -> None:
        """Save settings to a YAML file."""
        with open(path, "w") as f:
            yaml.dump(self.model_dump(mode="json"), f, default_flow_style=False)

    @property
    def enabled_sinks(self) -> List[CyncSinkConfig]:
        return [sink for sink in self.sinks if sink.enabled]
