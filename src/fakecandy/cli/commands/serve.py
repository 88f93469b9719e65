"""Serve command - runs the simulated device."""

import logging
from pathlib import Path
from typing import Optional

import click
from click.core import ParameterSource
from pydantic import ValidationError

from fakecandy.exceptions import FakecandyError, wrap_pydantic_error
from fakecandy.models import AppConfig, ControlKind, DiscoveryKind

from ..output import fail

logger = logging.getLogger(__name__)

# CLI option -> (config section, field)
OPTION_FIELDS = {
    "device_id": ("device", "device_id"),
    "device_model": ("device", "model"),
    "hardware_revision": ("device", "hw_rev"),
    "firmware_revision": ("device", "fw_rev"),
    "channel": ("device", "channels"),
    "led_count": ("device", "led_count"),
    "led_char": ("device", "led_char"),
    "control_protocol": ("control", "protocol"),
    "opc_port": ("control", "port"),
    "discovery_protocol": ("discovery", "protocol"),
    "udp_discovery_port": ("discovery", "udp_port"),
    "udp_discovery_packet": ("discovery", "udp_packet"),
    "mdns_service_name": ("discovery", "mdns_service_name"),
    "mdns_instance_name": ("discovery", "mdns_instance_name"),
    "upnp_server_port": ("discovery", "upnp_server_port"),
    "upnp_device_type": ("discovery", "upnp_device_type"),
    "upnp_service_type": ("discovery", "upnp_service_type"),
}


def build_config(ctx: click.Context, config_file: Optional[Path], options: dict) -> AppConfig:
    """
    Effective configuration from a config file and command line options.

    Without a file every option applies (defaults included). With a file,
    only options given explicitly on the command line override it.
    """
    if config_file is not None:
        data = AppConfig.load(config_file).model_dump()
        explicit = {
            name for name in OPTION_FIELDS
            if ctx.get_parameter_source(name) is ParameterSource.COMMANDLINE
        }
    else:
        data = {"device": {}, "control": {}, "discovery": {}}
        explicit = set(OPTION_FIELDS)

    for name in explicit:
        value = options[name]
        if value is None or (name == "channel" and not value):
            continue
        section, field = OPTION_FIELDS[name]
        data[section][field] = list(value) if name == "channel" else value

    if "display" in options and (
        config_file is None or ctx.get_parameter_source("display") is ParameterSource.COMMANDLINE
    ):
        data["display"] = options["display"]

    if not data["device"].get("device_id"):
        raise click.UsageError("--device-id is required (or give it in --config)")

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        raise wrap_pydantic_error(e, str(config_file or "command line")) from e


@click.command()
@click.option('--config', 'config_file', type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help='Load configuration from a JSON file')
@click.option('--save-config', type=click.Path(dir_okay=False, path_type=Path), default=None,
              help='Write the effective configuration to a JSON file')
@click.option('--device-id', type=str, default=None, help='Device id returned in discovery responses')
@click.option('--device-model', type=str, default='fakecandy', show_default=True,
              help='Device model returned in discovery responses')
@click.option('--hardware-revision', type=str, default='evt-1', show_default=True,
              help='Hardware revision returned in discovery responses')
@click.option('--firmware-revision', type=str, default='v1-beta', show_default=True,
              help='Firmware revision returned in discovery responses')
@click.option('--channel', type=int, multiple=True, default=(1,), show_default=True,
              help='Add a LED strand with this channel number (repeatable)')
@click.option('--led-count', type=int, default=16, show_default=True, help='Number of LEDs per strand')
@click.option('--led-char', type=str, default='◉', show_default=True, help='Glyph shown for each LED')
@click.option('-c', '--control-protocol', type=click.Choice([k.value for k in ControlKind], case_sensitive=False),
              default=ControlKind.TCP.value, show_default=True, help='Control protocol')
@click.option('--opc-port', type=int, default=7890, show_default=True,
              help='Port to listen on for OPC messages')
@click.option('-d', '--discovery-protocol',
              type=click.Choice([k.value for k in DiscoveryKind], case_sensitive=False),
              default=DiscoveryKind.UDP.value, show_default=True, help='Discovery protocol')
@click.option('--udp-discovery-port', type=int, default=3311, show_default=True,
              help='Port to listen on for UDP discovery probes')
@click.option('--udp-discovery-packet', type=str, default='A5A5A5A5', show_default=True,
              help='Hex encoded probe content to answer')
@click.option('--mdns-service-name', type=str, default='_sample._tcp.local', show_default=True,
              help='mDNS service type')
@click.option('--mdns-instance-name', type=str, default=None, help='mDNS instance name (default: device id)')
@click.option('--upnp-server-port', type=int, default=8080, show_default=True,
              help='Port serving the UPnP description document')
@click.option('--upnp-device-type', type=str, default='urn:sample:device:strand:1', show_default=True,
              help='UPnP device type')
@click.option('--upnp-service-type', type=str, default='urn:sample:service:strand:1', show_default=True,
              help='UPnP service type')
@click.option('--display/--no-display', default=True, help='Print strands to the console on change')
@click.pass_context
def serve(ctx: click.Context, config_file: Optional[Path], save_config: Optional[Path], **options):
    """
    Run a simulated OPC light until interrupted.

    \b
    Examples:
      fakecandy serve --device-id strand1
      fakecandy serve --device-id proxy1 --channel 1 --channel 2 -c UDP
      fakecandy serve --config device.json --opc-port 7891
    """
    from fakecandy.device.server import DeviceServer

    options["control_protocol"] = options["control_protocol"].upper()
    options["discovery_protocol"] = options["discovery_protocol"].upper()

    try:
        config = build_config(ctx, config_file, options)
        if save_config is not None:
            config.save(save_config)
            click.echo(f"Configuration saved to {save_config}", err=True)

        device = DeviceServer(config)
        device.run()
    except (FakecandyError, OSError) as e:
        logger.error(f"Device failed: {e}")
        fail(e)
