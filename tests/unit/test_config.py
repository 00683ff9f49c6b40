from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from lightsync.core.config import CyncSinkConfig, Settings, SyncConfig
from lightsync.core.state import PowerOffPolicy


def test_defaults() -> None:
    settings = Settings()

    assert settings.nanoleaf.port == 16021
    assert settings.nanoleaf.event_types == [1]
    assert settings.sync.power_off_policy is PowerOffPolicy.IGNORE
    assert settings.sync.serialize_per_sink is True
    assert settings.sync.reconnect is False
    assert settings.sinks == []


def test_environment_variables_override_nested_fields(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LIGHTSYNC_NANOLEAF__HOST", "10.0.0.5")
    monkeypatch.setenv("LIGHTSYNC_NANOLEAF__AUTH_TOKEN", "secret")
    monkeypatch.setenv("LIGHTSYNC_SYNC__POWER_OFF_POLICY", "blackout")
    monkeypatch.setenv("LIGHTSYNC_LOG_LEVEL", "DEBUG")

    settings = Settings()

    assert settings.nanoleaf.host == "10.0.0.5"
    assert settings.nanoleaf.auth_token == "secret"
    assert settings.sync.power_off_policy is PowerOffPolicy.BLACKOUT
    assert settings.log_level == "DEBUG"


def test_yaml_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    settings = Settings(
        sinks=[
            CyncSinkConfig(name="lamp", device_ip="192.168.1.40"),
            CyncSinkConfig(device_ip="192.168.1.41", enabled=False),
        ],
        sync=SyncConfig(power_off_policy=PowerOffPolicy.SUPPRESS, sink_queue_size=8),
    )
    settings.nanoleaf.host = "10.0.0.5"

    settings.to_yaml(path)
    loaded = Settings.from_yaml(path)

    assert loaded.nanoleaf.host == "10.0.0.5"
    assert loaded.sync.power_off_policy is PowerOffPolicy.SUPPRESS
    assert loaded.sync.sink_queue_size == 8
    assert [sink.device_ip for sink in loaded.enabled_sinks] == ["192.168.1.40"]


def test_empty_yaml_file_gives_defaults(tmp_path: Path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("")

    assert Settings.from_yaml(path).sync == SyncConfig()


def test_invalid_values_are_rejected() -> None:
    with pytest.raises(ValidationError):
        SyncConfig(sink_queue_size=0)
    with pytest.raises(ValidationError):
        SyncConfig(power_off_policy="dim")
    with pytest.raises(ValidationError):
        SyncConfig(drain_timeout_s=-1)
    with pytest.raises(ValidationError):
        SyncConfig(reconnect_delay_s=-0.5)
    with pytest.raises(ValidationError):
        SyncConfig(max_reconnect_attempts=-1)
