"""
Rendezvous relay for UDP hole punching.

This module provides:
- Endpoint model for IPv4 and IPv6
- Address classification (external vs. private/reserved)
- Fixed-length wire codec
- Relay engine and the select-based server loop
- Peer-side request helpers
"""

from .endpoint import (
    AddressFamily,
    Endpoint,
)
from .classify import (
    is_external,
    is_external_address,
)
from .codec import (
    MAGIC,
    RelayRequest,
    build_request,
    decode,
    encode,
)
from .relay import (
    Relayed,
    process_datagram,
    relay,
)
from .server import (
    RendezvousServer,
    create_socket,
)
from .client import (
    open_socket,
    receive_notification,
    send_request,
)

__all__ = [
    "AddressFamily",
    "Endpoint",
    "is_external",
    "is_external_address",
    "MAGIC",
    "RelayRequest",
    "build_request",
    "decode",
    "encode",
    "Relayed",
    "process_datagram",
    "relay",
    "RendezvousServer",
    "create_socket",
    "open_socket",
    "receive_notification",
    "send_request",
]
