"""Discovery record encoders, decoders and responders."""

from fakecandy.models import DiscoveryConfig, DiscoveryKind, DiscoveryRecord

from .base import DiscoveryResponder, record_from_mapping, route_local_ip
from .mdns import MdnsAdvertiser, browse, decode_txt_record, encode_txt_record, parse_service_name
from .scan import decode_scan_data, fetch_description
from .udp import UdpDiscoveryResponder, decode_discovery_response, encode_discovery_response, probe
from .upnp import (
    SsdpResponder,
    UpnpAdvertiser,
    build_device_description,
    create_description_app,
    parse_device_description,
    search,
)


def create_discovery_responder(
    config: DiscoveryConfig, record: DiscoveryRecord, control_port: int
) -> DiscoveryResponder:
    """Build the responder selected by `config.protocol`."""
    if config.protocol is DiscoveryKind.UDP:
        return UdpDiscoveryResponder(record, config.udp_port, config.udp_packet_bytes)
    if config.protocol is DiscoveryKind.MDNS:
        return MdnsAdvertiser(
            record,
            config.mdns_service_name,
            port=control_port,
            instance_name=config.mdns_instance_name,
            address=config.advertise_address,
        )
    if config.protocol is DiscoveryKind.UPNP:
        return UpnpAdvertiser(
            record,
            server_port=config.upnp_server_port,
            description_path=config.upnp_description_path,
            device_type=config.upnp_device_type,
            service_type=config.upnp_service_type,
            address=config.advertise_address,
        )
    raise ValueError(f"Unsupported discovery protocol: {config.protocol}")


__all__ = [
    "DiscoveryResponder",
    "MdnsAdvertiser",
    "SsdpResponder",
    "UdpDiscoveryResponder",
    "UpnpAdvertiser",
    "browse",
    "build_device_description",
    "create_description_app",
    "create_discovery_responder",
    "decode_discovery_response",
    "decode_scan_data",
    "decode_txt_record",
    "encode_discovery_response",
    "encode_txt_record",
    "fetch_description",
    "parse_device_description",
    "parse_service_name",
    "probe",
    "record_from_mapping",
    "route_local_ip",
    "search",
]
