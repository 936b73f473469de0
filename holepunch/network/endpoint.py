"""
Endpoint model shared by both address families.

An endpoint is the (address, port) pair identifying one side of a UDP
conversation. Addresses are kept as raw network-order bytes so the codec
and classifier work on exactly what travels on the wire.
"""

import ipaddress
import socket
from dataclasses import dataclass
from enum import Enum


class AddressFamily(Enum):
    """Address family of an endpoint, with its wire constants."""
    IPV4 = "ipv4"
    IPV6 = "ipv6"

    @property
    def address_length(self) -> int:
        """Raw address size in bytes."""
        return 4 if self is AddressFamily.IPV4 else 16

    @property
    def packet_size(self) -> int:
        """Size of a relay datagram: magic + address + port."""
        return 4 + self.address_length + 2

    @property
    def socket_family(self) -> int:
        return socket.AF_INET if self is AddressFamily.IPV4 else socket.AF_INET6

    @property
    def label(self) -> str:
        return "IPv4" if self is AddressFamily.IPV4 else "IPv6"


@dataclass(frozen=True)
class Endpoint:
    """An address and port in one address family."""
    family: AddressFamily
    address: bytes
    port: int

    def __post_init__(self):
        if len(self.address) != self.family.address_length:
            raise ValueError(
                f"{self.family.label} address must be {self.family.address_length} bytes, "
                f"got {len(self.address)}"
            )
        if not 0 <= self.port <= 0xFFFF:
            raise ValueError(f"Port out of range: {self.port}")

    @property
    def host(self) -> str:
        """Dotted or colon text form of the address."""
        return socket.inet_ntop(self.family.socket_family, self.address)

    def __str__(self) -> str:
        return f"{self.host}p{self.port}"

    def to_sockaddr(self) -> tuple:
        """Address tuple accepted by ``socket.sendto``."""
        if self.family is AddressFamily.IPV4:
            return (self.host, self.port)
        return (self.host, self.port, 0, 0)

    @classmethod
    def from_sockaddr(cls, family: AddressFamily, sockaddr: tuple) -> "Endpoint":
        """Build an endpoint from the address tuple returned by ``recvfrom``."""
        host, port = sockaddr[0], sockaddr[1]
        # Link-local IPv6 peers come back as "fe80::1%eth0"
        host = host.split("%", 1)[0]
        return cls(
            family=family,
            address=socket.inet_pton(family.socket_family, host),
            port=port,
        )

    @classmethod
    def parse(cls, text: str) -> "Endpoint":
        """
        Parse ``host:port`` or ``[v6host]:port``.

        Args:
            text: Endpoint text, e.g. ``203.0.113.5:40000`` or ``[2001:db8::1]:443``

        Returns:
            Parsed Endpoint

        Raises:
            ValueError: If the text is not a literal address with a port
        """
        host, sep, port_text = text.rpartition(":")
        if not sep or not host:
            raise ValueError(f"Expected host:port, got {text!r}")
        if host.startswith("[") and host.endswith("]"):
            host = host[1:-1]
        elif ":" in host:
            raise ValueError(f"IPv6 addresses must be bracketed: {text!r}")

        try:
            port = int(port_text)
        except ValueError:
            raise ValueError(f"Invalid port in {text!r}") from None

        ip = ipaddress.ip_address(host)
        family = AddressFamily.IPV4 if ip.version == 4 else AddressFamily.IPV6
        return cls(family=family, address=ip.packed, port=port)
