"""
Rendezvous server event loop.

One thread waits on the IPv4 and IPv6 listening sockets, reads one
datagram from each ready socket, and relays it. Nothing is kept between
datagrams apart from the sockets and their receive buffers.
"""

import logging
import select
import socket
from typing import Dict, Mapping, Optional

from ..config import Config
from ..errors import StartupError, TransientError, log_error
from .classify import is_external
from .endpoint import AddressFamily, Endpoint
from .relay import Classifier, Relayed, process_datagram

logger = logging.getLogger(__name__)


def create_socket(family: AddressFamily, host: str, port: int) -> socket.socket:
    """
    Create and bind a UDP listening socket.

    IPv6 sockets are restricted to IPv6 traffic so an IPv4 socket can be
    bound to the same port alongside.

    Args:
        family: Address family of the socket
        host: Bind address ("0.0.0.0" or "::")
        port: UDP port

    Returns:
        Bound socket

    Raises:
        StartupError: If socket creation, IPV6_V6ONLY or bind fails
    """
    try:
        sock = socket.socket(family.socket_family, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
    except OSError as e:
        raise StartupError.from_os_error("socket", e)

    try:
        if family is AddressFamily.IPV6:
            try:
                sock.setsockopt(socket.IPPROTO_IPV6, socket.IPV6_V6ONLY, 1)
            except OSError as e:
                raise StartupError.from_os_error("setsockopt", e)

        try:
            sock.bind((host, port))
        except OSError as e:
            raise StartupError.from_os_error("bind", e)
    except StartupError:
        sock.close()
        raise

    return sock


class RendezvousServer:
    """
    Single-threaded relay over one socket per address family.

    Each cycle blocks until at least one socket is readable, then services
    every ready socket once, so a busy family cannot starve the other.
    """

    def __init__(
        self,
        sockets: Mapping[AddressFamily, socket.socket],
        classifier: Classifier = is_external,
    ):
        """
        Initialize the server.

        Args:
            sockets: Bound listening socket per address family
            classifier: Predicate both endpoints of a request must satisfy
        """
        if not sockets:
            raise ValueError("At least one listening socket is required")

        self.sockets: Dict[AddressFamily, socket.socket] = dict(sockets)
        self.classifier = classifier
        # One extra byte so oversized datagrams are seen as oversized
        self._buffers: Dict[AddressFamily, bytearray] = {
            family: bytearray(family.packet_size + 1) for family in self.sockets
        }

    @classmethod
    def bind(cls, config: Config) -> "RendezvousServer":
        """Open the IPv4 and IPv6 listening sockets described by ``config``."""
        sockets: Dict[AddressFamily, socket.socket] = {}
        try:
            logger.info("Binding IPv4 socket...")
            sockets[AddressFamily.IPV4] = create_socket(AddressFamily.IPV4, config.host4, config.port)

            logger.info("Binding IPv6 socket...")
            sockets[AddressFamily.IPV6] = create_socket(AddressFamily.IPV6, config.host6, config.port)
        except StartupError:
            for sock in sockets.values():
                sock.close()
            raise

        return cls(sockets)

    def __enter__(self) -> "RendezvousServer":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        """Close all listening sockets."""
        for sock in self.sockets.values():
            sock.close()

    def serve_forever(self) -> None:
        """Relay datagrams until the process is terminated."""
        families = ", ".join(family.label for family in self.sockets)
        logger.info(f"Relaying on {families}")
        while True:
            self.poll()

    def poll(self) -> None:
        """Wait for readiness and handle one datagram per ready socket."""
        try:
            readable, _, _ = select.select(list(self.sockets.values()), [], [])
        except OSError as e:
            log_error(logger, TransientError.from_os_error("select", e))
            return

        for family, sock in self.sockets.items():
            if sock in readable:
                self.handle(sock, family)

    def handle(self, sock: socket.socket, family: AddressFamily) -> Optional[Relayed]:
        """
        Receive one datagram and relay it if valid.

        Args:
            sock: Readable listening socket
            family: Address family of ``sock``

        Returns:
            The relayed datagram, or None if nothing was sent
        """
        buffer = self._buffers[family]

        try:
            nbytes, sockaddr = sock.recvfrom_into(buffer)
        except OSError as e:
            log_error(logger, TransientError.from_os_error("recvfrom", e))
            return None

        source = Endpoint.from_sockaddr(family, sockaddr)
        relayed = process_datagram(bytes(buffer[:nbytes]), source, self.classifier)
        if relayed is None:
            return None

        logger.info(f"{relayed.source} -> {relayed.destination}")
        self._send(sock, relayed)
        return relayed

    def _send(self, sock: socket.socket, relayed: Relayed) -> None:
        """Single send attempt; failures are logged, never retried."""
        try:
            sent = sock.sendto(relayed.payload, relayed.destination.to_sockaddr())
        except OSError as e:
            log_error(logger, TransientError.from_os_error("sendto", e))
            return

        if sent < len(relayed.payload):
            logger.warning(
                f"sendto sent fewer bytes than expected ({sent} < {len(relayed.payload)})",
                extra={"kind": "transient", "call": "sendto", "errno": None},
            )
