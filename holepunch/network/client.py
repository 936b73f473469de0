"""
Peer side of the rendezvous handshake.

A peer sends one request naming the endpoint it wants to reach. If that
peer does the same, the server forwards each side's observed endpoint to
the other, and both can start sending directly.
"""

import logging
import socket
import time
from typing import Optional

from .codec import build_request, decode
from .endpoint import AddressFamily, Endpoint

logger = logging.getLogger(__name__)


def open_socket(server: Endpoint, local_port: int = 0) -> socket.socket:
    """Create a UDP socket matching the server's family."""
    sock = socket.socket(server.family.socket_family, socket.SOCK_DGRAM)
    if local_port:
        host = "0.0.0.0" if server.family is AddressFamily.IPV4 else "::"
        sock.bind((host, local_port))
    return sock


def send_request(sock: socket.socket, server: Endpoint, peer: Endpoint) -> int:
    """
    Ask the rendezvous server to tell ``peer`` about us.

    Args:
        sock: UDP socket the peer will also use for direct traffic
        server: Rendezvous server endpoint
        peer: Endpoint of the peer to notify

    Returns:
        Number of bytes sent
    """
    if peer.family is not server.family:
        raise ValueError(f"Peer {peer} and server {server} must share an address family")

    datagram = build_request(peer)
    sent = sock.sendto(datagram, server.to_sockaddr())
    logger.info(f"Requested relay to {peer} via {server}")
    return sent


def receive_notification(
    sock: socket.socket,
    server: Endpoint,
    timeout: float = 10.0,
) -> Optional[Endpoint]:
    """
    Wait for the server to forward another peer's observed endpoint.

    Datagrams from anywhere other than the server, or that do not decode,
    are ignored until the timeout expires.

    Args:
        sock: Socket the request was sent from
        server: Rendezvous server endpoint
        timeout: Seconds to wait

    Returns:
        The other peer's endpoint, or None on timeout
    """
    size = server.family.packet_size
    deadline = time.monotonic() + timeout

    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            logger.debug(f"No notification from {server} after {timeout}s")
            return None
        sock.settimeout(remaining)
        try:
            data, sockaddr = sock.recvfrom(size + 1)
        except socket.timeout:
            logger.debug(f"No notification from {server} after {timeout}s")
            return None

        if Endpoint.from_sockaddr(server.family, sockaddr) != server:
            continue

        request = decode(data, server.family)
        if request is not None:
            return request.endpoint
