"""
Command-Line Interface for LightSync.

Provides commands for running the sync loop, watching the source stream,
and pushing one-shot colors or effects.
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import Any, Optional

import click
import structlog

from lightsync import __version__
from lightsync.core.config import Settings
from lightsync.core.exceptions import DeviceConfigError, LightSyncError
from lightsync.sync.dispatch import DispatchReport

logger = structlog.get_logger()


def _validate_startup_config(settings: Settings, mock: bool) -> None:
    """Reject device settings that cannot work before any connection is made."""
    if mock:
        return

    nanoleaf = settings.nanoleaf
    if not nanoleaf.host:
        raise DeviceConfigError("nanoleaf", "host is not set")
    if not nanoleaf.auth_token:
        raise DeviceConfigError("nanoleaf", "auth token is not set")

    enabled = settings.enabled_sinks
    if not enabled:
        raise DeviceConfigError("sinks", "no enabled sinks configured")
    names: set[str] = set()
    for index, sink in enumerate(enabled):
        label = sink.name or sink.device_ip or f"sinks[{index}]"
        if label in names:
            raise DeviceConfigError(label, "duplicate sink name")
        names.add(label)
        if not sink.device_ip:
            raise DeviceConfigError(label, "device_ip is not set")
        if not sink.server_url.strip():
            raise DeviceConfigError(label, "server_url is not set")


def _build_devices(settings: Settings, mock: bool) -> tuple[Any, list[Any]]:
    """Create the source and sinks for the configured (or mock) devices."""
    if mock:
        from lightsync.devices.mocks import MockNanoleafSource, MockSink

        return MockNanoleafSource(), [MockSink("mock-sink-1"), MockSink("mock-sink-2")]

    from lightsync.devices.cync import CyncController
    from lightsync.devices.nanoleaf import NanoleafController

    source = NanoleafController(settings.nanoleaf)
    sinks = [CyncController(sink) for sink in settings.enabled_sinks]
    return source, sinks


async def _close_devices(*devices: Any) -> None:
    for device in devices:
        aclose = getattr(device, "aclose", None)
        if aclose is not None:
            await aclose()


def _configure_logging(log_level: str) -> None:
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
    )


def _load_settings(ctx: click.Context) -> Settings:
    if ctx.obj["config_path"]:
        settings = Settings.from_yaml(ctx.obj["config_path"])
    else:
        settings = Settings()
    if ctx.obj["debug"]:
        settings.debug = True
    else:
        _configure_logging(settings.log_level)
    return settings


@click.group()
@click.version_option(version=__version__)
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    type=click.Path(exists=True),
    help="Path to configuration file",
)
@click.pass_context
def cli(ctx: click.Context, debug: bool, config: Optional[str]) -> None:
    """
    LightSync - mirror Nanoleaf color state to Cync bulbs

    Listens to the Nanoleaf event stream and pushes every color change to
    each configured Cync device through a cync-lan server.
    """
    ctx.ensure_object(dict)

    _configure_logging("DEBUG" if debug else "INFO")

    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config) if config else None


async def _run_sync(settings: Settings, mock: bool) -> None:
    from lightsync.sync.coordinator import SyncCoordinator
    from lightsync.sync.runner import ReconnectingRunner

    source, sinks = _build_devices(settings, mock)
    coordinator = SyncCoordinator(source, sinks, settings.sync)
    runner = ReconnectingRunner(coordinator)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, runner.stop)
        except (NotImplementedError, RuntimeError):
            # Not supported on this platform; Ctrl+C falls back to KeyboardInterrupt.
            pass

    try:
        await runner.run()
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.remove_signal_handler(sig)
            except (NotImplementedError, RuntimeError):
                pass
        await _close_devices(source, *sinks)
        logger.info("Sync finished", **coordinator.get_stats())


@cli.command()
@click.option("--mock", is_flag=True, help="Use mock devices (no hardware)")
@click.option(
    "--reconnect/--no-reconnect",
    default=None,
    help="Reconnect when the source stream drops (overrides config)",
)
@click.pass_context
def run(ctx: click.Context, mock: bool, reconnect: Optional[bool]) -> None:
    """Mirror the Nanoleaf color to every configured sink."""
    settings = _load_settings(ctx)
    if reconnect is not None:
        settings.sync.reconnect = reconnect

    click.echo(f"LightSync v{__version__}")
    click.echo("=" * 50)
    click.echo(f"Mode: {'Mock' if mock else 'Live'}")
    click.echo(f"Power-off policy: {settings.sync.power_off_policy.value}")
    click.echo(f"Serialize per sink: {settings.sync.serialize_per_sink}")
    click.echo()

    try:
        _validate_startup_config(settings, mock)
        click.echo("Press Ctrl+C to stop.")
        click.echo()
        asyncio.run(_run_sync(settings, mock))

    except KeyboardInterrupt:
        click.echo("\nShutting down...")
    except LightSyncError as e:
        click.echo(f"Error: {e}", err=True)
        if ctx.obj["debug"]:
            raise
        sys.exit(1)


async def _monitor(settings: Settings, mock: bool) -> None:
    from lightsync.stream.pipeline import EventPipeline

    source, sinks = _build_devices(settings, mock)
    pipeline = EventPipeline(settings.sync.power_off_policy)
    try:
        async for line in source.stream_lines():
            event = pipeline.feed_line(line)
            if event is None:
                continue
            hsb = event.hsb
            if hsb is not None:
                hsb_text = f"H={hsb.hue:3d} S={hsb.saturation:3d} B={hsb.brightness:3d}"
            else:
                hsb_text = "off"
            r, g, b = event.rgb.as_tuple()
            click.echo(f"{event.rgb.hex}  R={r:3d} G={g:3d} B={b:3d}  ({hsb_text})")
    finally:
        await _close_devices(source, *sinks)
        click.echo(f"Stream stats: {pipeline.get_stats()}")


@cli.command()
@click.option("--mock", is_flag=True, help="Use a mock source (no hardware)")
@click.pass_context
def monitor(ctx: click.Context, mock: bool) -> None:
    """Print every color change decoded from the source stream."""
    settings = _load_settings(ctx)
    if not mock and not (settings.nanoleaf.host and settings.nanoleaf.auth_token):
        click.echo("Error: Nanoleaf host and auth token must be configured", err=True)
        sys.exit(1)

    click.echo("Watching source stream. Press Ctrl+C to stop.")
    try:
        asyncio.run(_monitor(settings, mock))
    except KeyboardInterrupt:
        pass
    except LightSyncError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


async def _one_shot(
    settings: Settings,
    mock: bool,
    color: Optional[tuple[int, int, int]],
    effect: Optional[str],
) -> DispatchReport:
    from lightsync.sync.coordinator import SyncCoordinator

    source, sinks = _build_devices(settings, mock)
    coordinator = SyncCoordinator(source, sinks, settings.sync)
    try:
        if color is not None:
            return await coordinator.sync_color(*color)
        return await coordinator.sync_effect(effect or "")
    finally:
        await _close_devices(source, *sinks)


def _report(report: DispatchReport) -> None:
    for name, ok in report.results.items():
        status = "ok" if ok else f"FAILED ({report.errors[name].reason})"
        click.echo(f"  {name}: {status}")
    if not report.ok:
        sys.exit(1)


@cli.command("set-color")
@click.argument("r", type=click.IntRange(0, 255))
@click.argument("g", type=click.IntRange(0, 255))
@click.argument("b", type=click.IntRange(0, 255))
@click.option("--mock", is_flag=True, help="Use mock devices (no hardware)")
@click.pass_context
def set_color(ctx: click.Context, r: int, g: int, b: int, mock: bool) -> None:
    """Push one RGB color to the source and every sink."""
    settings = _load_settings(ctx)
    click.echo(f"Setting color R={r} G={g} B={b}...")
    _report(asyncio.run(_one_shot(settings, mock, (r, g, b), None)))


@cli.command("set-effect")
@click.argument("name")
@click.option("--mock", is_flag=True, help="Use mock devices (no hardware)")
@click.pass_context
def set_effect(ctx: click.Context, name: str, mock: bool) -> None:
    """Select an effect on the source and every sink."""
    settings = _load_settings(ctx)
    click.echo(f"Selecting effect '{name}'...")
    _report(asyncio.run(_one_shot(settings, mock, None, name)))


@cli.command()
@click.option("--hsb", nargs=3, type=int, default=None, help="Hue, saturation, brightness")
@click.option("--rgb", nargs=3, type=click.IntRange(0, 255), default=None, help="Red, green, blue")
def convert(hsb: Optional[tuple[int, int, int]], rgb: Optional[tuple[int, int, int]]) -> None:
    """Convert a color between HSB and RGB."""
    from lightsync.color.convert import hsb_to_rgb, rgb_to_hsb

    if (hsb is None) == (rgb is None):
        click.echo("Error: pass exactly one of --hsb or --rgb", err=True)
        sys.exit(1)

    if hsb is not None:
        color = hsb_to_rgb(*hsb)
        click.echo(f"R={color.r} G={color.g} B={color.b} ({color.hex})")
    else:
        result = rgb_to_hsb(*rgb)
        click.echo(f"H={result.hue} S={result.saturation} B={result.brightness}")


def main() -> None:
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
