"""
Wire codec for relay datagrams.

Layout (big-endian, fixed length per family):

    offset  IPv4 (10 bytes)        IPv6 (22 bytes)
    0-3     magic 00 52 EB 11      magic 00 52 EB 11
    4-7     address (4)            4-19   address (16)
    8-9     port                   20-21  port
"""

import struct
from dataclasses import dataclass
from typing import Optional

from .endpoint import AddressFamily, Endpoint

MAGIC = b"\x00\x52\xeb\x11"

_FORMATS = {
    AddressFamily.IPV4: struct.Struct(">4s4sH"),
    AddressFamily.IPV6: struct.Struct(">4s16sH"),
}


@dataclass(frozen=True)
class RelayRequest:
    """Decoded relay datagram: magic plus the embedded endpoint."""
    magic: bytes
    endpoint: Endpoint


def decode(data: bytes, family: AddressFamily) -> Optional[RelayRequest]:
    """
    Decode a relay datagram received on a socket of the given family.

    Args:
        data: Raw datagram bytes
        family: Family of the receiving socket

    Returns:
        RelayRequest, or None if the length or magic is wrong
    """
    fmt = _FORMATS[family]
    if len(data) != fmt.size:
        return None

    magic, address, port = fmt.unpack(data)
    if magic != MAGIC:
        return None

    return RelayRequest(
        magic=magic,
        endpoint=Endpoint(family=family, address=address, port=port),
    )


def encode(request: RelayRequest) -> bytes:
    """Serialize a request to its fixed-length wire form."""
    endpoint = request.endpoint
    return _FORMATS[endpoint.family].pack(request.magic, endpoint.address, endpoint.port)


def build_request(endpoint: Endpoint) -> bytes:
    """Build the datagram a peer sends to ask for a relay to ``endpoint``."""
    return encode(RelayRequest(magic=MAGIC, endpoint=endpoint))
