"""
Credential decoding for DDNS Relay.

Clients authenticate with an HTTP Basic style header whose payload is
`base64(email:token)`. The decoded credentials are passed through to the
DNS provider untouched; their validity is only checked by the provider.
"""

from __future__ import annotations

import base64
import binascii
import re
from typing import TYPE_CHECKING

from ddns_relay.models import Credentials, Failure

if TYPE_CHECKING:
    from collections.abc import Mapping
    from typing import Final


MISSING_TOKEN_MESSAGE: Final[str] = "API token missing."
INVALID_TOKEN_MESSAGE: Final[str] = "Invalid API key or token."

# C0 control characters and DEL
_CONTROL_BYTES: Final[re.Pattern[bytes]] = re.compile(rb"[\x00-\x1f\x7f]")


def _b64decode(payload: str) -> bytes | None:
    """
    Decode a base64 payload, tolerating missing padding.

    Parameters
    ----------
    payload : str
        The encoded payload.

    Returns
    -------
    bytes | None
        The decoded bytes, or None if the payload is not valid base64.
    """
    padded = payload + "=" * (-len(payload) % 4)
    try:
        return base64.b64decode(padded, validate=True)
    except (binascii.Error, ValueError):
        return None


def decode_credentials(headers: Mapping[str, str]) -> Credentials | Failure:
    """
    Extract provider credentials from the `Authorization` header.

    The header value is split on single spaces and the second element is
    decoded; the scheme itself is not inspected.

    Parameters
    ----------
    headers : Mapping[str, str]
        Request headers. Lookups must be case-insensitive for real requests.

    Returns
    -------
    Credentials | Failure
        The decoded credentials, or an unauthenticated failure.
    """
    authorization = headers.get("authorization")
    if not authorization:
        return Failure.unauthenticated(MISSING_TOKEN_MESSAGE)

    parts = authorization.split(" ")
    payload = parts[1] if len(parts) > 1 else ""

    decoded = _b64decode(payload)
    if decoded is None or b":" not in decoded or _CONTROL_BYTES.search(decoded):
        return Failure.unauthenticated(INVALID_TOKEN_MESSAGE)

    # One character per byte
    text = decoded.decode("latin-1")

    email, _, token = text.partition(":")
    return Credentials(email=email, token=token)
