"""Control commands - send one logical command to a device."""

import json
import logging

import click
from pydantic import ValidationError

from fakecandy.controller import LocalController
from fakecandy.exceptions import FakecandyError
from fakecandy.models import (
    MAX_LED_COUNT,
    BrightnessAbsolute,
    ColorAbsolute,
    CommandStatus,
    ControlKind,
    ControlTarget,
    LogicalCommand,
    OnOff,
)

from ..output import fail

logger = logging.getLogger(__name__)


def _parse_rgb(ctx, param, value: str) -> int:
    """Accept ff00ff, #ff00ff, 0xff00ff or a decimal integer."""
    text = value.strip().lower()
    try:
        if text.startswith("#"):
            rgb = int(text[1:], 16)
        elif text.startswith("0x") or any(c in "abcdef" for c in text) or len(text) == 6:
            rgb = int(text, 16)
        else:
            rgb = int(text, 10)
    except ValueError:
        raise click.BadParameter(f"not an RGB color: {value}") from None
    if not 0 <= rgb <= 0xFFFFFF:
        raise click.BadParameter(f"RGB color out of range: {value}")
    return rgb


@click.group(name="control")
@click.option('--protocol', type=click.Choice([k.value for k in ControlKind], case_sensitive=False),
              default=ControlKind.TCP.value, show_default=True, help='Control protocol')
@click.option('--host', default='127.0.0.1', show_default=True, help='Device address')
@click.option('--port', type=click.IntRange(0, 65535), default=7890, show_default=True, help='Device OPC port')
@click.option('--channel', type=click.IntRange(0, 255), default=1, show_default=True, help='OPC channel')
@click.option('--leds', type=click.IntRange(1, MAX_LED_COUNT), default=16, show_default=True,
              help='Number of LEDs on the strand')
@click.option('--timeout', type=float, default=5.0, show_default=True, help='Seconds to wait for the device')
@click.pass_context
def control_group(ctx, protocol: str, host: str, port: int, channel: int, leds: int, timeout: float):
    """Send a command to a running device."""
    try:
        target = ControlTarget(
            id=f"{host}:{port}/{channel}",
            channel=channel,
            leds=leds,
            host=host,
            port=port,
            control_protocol=ControlKind(protocol.upper()),
        )
    except ValidationError as e:
        raise click.UsageError("; ".join(err["msg"] for err in e.errors())) from e
    ctx.obj = {"target": target, "timeout": timeout}


def _execute(ctx: click.Context, command: LogicalCommand) -> None:
    target: ControlTarget = ctx.obj["target"]
    with LocalController(timeout=ctx.obj["timeout"]) as controller:
        result = controller.execute(command, [target])[0]

    if result.status is CommandStatus.SUCCESS:
        click.echo(json.dumps(result.states))
        return
    click.echo(f"ERROR: {command.command_name} failed: {result.error_code}", err=True)
    ctx.exit(1)


@control_group.command(name="color")
@click.argument('rgb', callback=_parse_rgb)
@click.pass_context
def color(ctx, rgb: int):
    """Fill the strand with one color (e.g. ff00ff)."""
    _execute(ctx, ColorAbsolute(spectrum_rgb=rgb))


@control_group.command(name="power")
@click.argument('state', type=click.Choice(['on', 'off'], case_sensitive=False))
@click.pass_context
def power(ctx, state: str):
    """Turn the light on or off."""
    _execute(ctx, OnOff(on=state.lower() == 'on'))


@control_group.command(name="brightness")
@click.argument('percent', type=click.IntRange(0, 100))
@click.pass_context
def brightness(ctx, percent: int):
    """Set brightness in percent (0-100)."""
    _execute(ctx, BrightnessAbsolute(brightness=percent))


@control_group.command(name="query")
@click.pass_context
def query(ctx):
    """Print the strand's current color."""
    target: ControlTarget = ctx.obj["target"]
    try:
        with LocalController(timeout=ctx.obj["timeout"]) as controller:
            state = controller.query(target)
    except FakecandyError as e:
        fail(e)

    click.echo(json.dumps({
        "online": state.online,
        "color": {"spectrumRGB": state.spectrum_rgb},
        "hex": f"#{state.spectrum_rgb:06X}",
    }))
