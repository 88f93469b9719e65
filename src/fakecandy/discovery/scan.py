"""Decode any kind of scan data back into a DiscoveryRecord."""

import logging
from collections.abc import Callable
from typing import Optional

import httpx

from fakecandy.exceptions import MissingScanDataError
from fakecandy.models import DiscoveryRecord, MdnsScanData, UdpScanData, UpnpScanData

from .mdns import decode_txt_record
from .udp import decode_discovery_response
from .upnp import parse_device_description

logger = logging.getLogger(__name__)

DescriptionFetcher = Callable[[UpnpScanData], str]


def fetch_description(scan: UpnpScanData, timeout: float = 5.0) -> str:
    """
    GET the description document named by an SSDP response.

    Raises:
        MissingScanDataError: If the document cannot be retrieved
    """
    if "://" not in scan.location and (scan.host is None or scan.port is None):
        raise MissingScanDataError("description host and port", "UPnP scan data")

    url = scan.description_url
    logger.debug(f"UPnP: fetching description from {url}")
    try:
        response = httpx.get(url, timeout=timeout)
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise MissingScanDataError(f"description at {url} ({e})", "UPnP scan data") from e
    return response.text


def decode_scan_data(scan, fetch_description: Optional[DescriptionFetcher] = fetch_description) -> DiscoveryRecord:
    """
    Recover the discovery record from one scan result.

    Args:
        scan: UdpScanData, MdnsScanData or UpnpScanData
        fetch_description: Retrieves the UPnP description XML for UPnP scans

    Raises:
        MissingScanDataError: If scan is None or of an unknown kind, or
            the UPnP description is missing or malformed
        MissingDiscoveryDataError: If a UDP or mDNS payload lacks record fields
    """
    if isinstance(scan, UdpScanData):
        return decode_discovery_response(scan.data)
    if isinstance(scan, MdnsScanData):
        return decode_txt_record(scan.txt)
    if isinstance(scan, UpnpScanData):
        if fetch_description is None:
            raise MissingScanDataError("description fetcher", "UPnP scan data")
        return parse_device_description(fetch_description(scan))
    raise MissingScanDataError(f"recognized scan data (got {type(scan).__name__})")
