"""Probe command - discover devices on the local network."""

import json
import logging

import click

from fakecandy.controller import identify
from fakecandy.exceptions import DiscoveryError
from fakecandy.models import DiscoveryKind

from ..output import fail

logger = logging.getLogger(__name__)


@click.command()
@click.option('-d', '--protocol', type=click.Choice([k.value for k in DiscoveryKind], case_sensitive=False),
              default=DiscoveryKind.UDP.value, show_default=True, help='Discovery protocol')
@click.option('--address', default='255.255.255.255', show_default=True, help='UDP probe destination')
@click.option('--port', type=int, default=3311, show_default=True, help='UDP discovery port')
@click.option('--packet', default='A5A5A5A5', show_default=True, help='Hex encoded UDP probe packet')
@click.option('--service-name', default='_sample._tcp.local', show_default=True, help='mDNS service type')
@click.option('--search-target', default='urn:sample:device:strand:1', show_default=True,
              help='SSDP search target')
@click.option('--timeout', type=float, default=2.0, show_default=True, help='Seconds to wait for replies')
@click.option('--json', 'as_json', is_flag=True, help='Print IDENTIFY payloads as JSON')
def probe(protocol: str, address: str, port: int, packet: str, service_name: str,
          search_target: str, timeout: float, as_json: bool):
    """
    Discover devices and print their identity.

    \b
    Examples:
      fakecandy probe
      fakecandy probe --protocol MDNS
      fakecandy probe --protocol UPNP --json
    """
    from fakecandy.discovery import browse, decode_scan_data, search
    from fakecandy.discovery import probe as udp_probe

    kind = DiscoveryKind(protocol.upper())
    try:
        if kind is DiscoveryKind.UDP:
            scans = udp_probe(address, port, bytes.fromhex(packet), timeout)
        elif kind is DiscoveryKind.MDNS:
            scans = browse(service_name, timeout)
        else:
            scans = search(search_target, timeout)
    except (OSError, ValueError) as e:
        fail(e)

    if not scans:
        click.echo("No devices found.", err=True)
        return

    for scan in scans:
        try:
            record = decode_scan_data(scan)
        except DiscoveryError as e:
            logger.warning(f"Ignoring {kind.value} reply: {e.technical_message}")
            continue

        result = identify(record)
        if as_json:
            click.echo(json.dumps(result.to_payload()))
            continue

        channels = ", ".join(str(c) for c in record.channels)
        kind_label = "proxy" if result.is_proxy else "device"
        click.echo(f"{record.id}  {kind_label}  model={record.model} hw={record.hw_rev} "
                   f"fw={record.fw_rev} channels=[{channels}]")
