"""
Request parsing for DDNS Relay.

Turns the DynDNS-style query parameters (`ip`/`myip` and `hostname`) into
the list of address records the client wants to see.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ddns_relay.models import DesiredRecord, Failure, RecordType

if TYPE_CHECKING:
    from collections.abc import Mapping
    from typing import Final


AUTO_IP: Final[str] = "auto"
DEFAULT_CLIENT_IP_HEADER: Final[str] = "CF-Connecting-IP"

# CloudFlare treats a TTL of 1 as "automatic"
AUTOMATIC_TTL: Final[int] = 1


logger = logging.getLogger(__name__)


def classify_record_type(ip: str) -> RecordType:
    """
    Get the record type for an IP address string.

    Parameters
    ----------
    ip : str
        The IP address.

    Returns
    -------
    RecordType
        A if the string contains a dot, AAAA otherwise.
    """
    return RecordType.A if "." in ip else RecordType.AAAA


def build_desired_records(
    params: Mapping[str, str],
    headers: Mapping[str, str],
    ip_header: str = DEFAULT_CLIENT_IP_HEADER,
) -> list[DesiredRecord] | Failure:
    """
    Build the desired records from query parameters.

    Parameters
    ----------
    params : Mapping[str, str]
        Query parameters of the request.
    headers : Mapping[str, str]
        Request headers, used to resolve `ip=auto`.
    ip_header : str, optional
        Header carrying the client address as seen by the edge proxy.

    Returns
    -------
    list[DesiredRecord] | Failure
        One record per hostname, in request order, or a failure.
    """
    ip = params.get("ip") or params.get("myip")
    if ip is None:
        return Failure.invalid_input(
            'The "ip" parameter is required and cannot be empty. '
            "Specify ip=auto to use the client IP.",
        )

    if ip == AUTO_IP:
        client_ip = headers.get(ip_header)
        if client_ip is None:
            return Failure.server_error(
                "Request asked for ip=auto but client IP address cannot be determined.",
            )
        logger.info("Resolved ip=auto to client IP %s.", client_ip)
        ip = client_ip

    hostnames = params.get("hostname")
    if hostnames is None:
        return Failure.invalid_input(
            'The "hostname" parameter is required and cannot be empty.',
        )

    record_type = classify_record_type(ip)
    return [
        DesiredRecord(name=hostname, type=record_type, content=ip, ttl=AUTOMATIC_TTL)
        for hostname in hostnames.split(",")
    ]
