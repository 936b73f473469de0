"""
Address classification.

Only externally routable endpoints take part in a relay. Anything in a
private, loopback, unspecified or broadcast range is treated as internal
and the datagram carrying it is dropped.
"""

from .endpoint import AddressFamily, Endpoint

_IPV4_BROADCAST = b"\xff\xff\xff\xff"
_IPV6_UNSPECIFIED = bytes(16)
_IPV6_LOOPBACK = bytes(15) + b"\x01"


def _is_external4(raw: bytes) -> bool:
    if raw == _IPV4_BROADCAST:
        return False

    a, b = raw[0], raw[1]
    if a in (0, 10, 127):
        return False
    if a == 172:
        return not 16 <= b <= 31
    if a == 192:
        return b != 168
    return True


def _is_external6(raw: bytes) -> bool:
    # fc00::/7 unique-local
    if raw[0] & 0xFE == 0xFC:
        return False
    return raw not in (_IPV6_UNSPECIFIED, _IPV6_LOOPBACK)


def is_external_address(family: AddressFamily, raw: bytes) -> bool:
    """Check a raw network-order address of the given family."""
    if len(raw) != family.address_length:
        return False
    if family is AddressFamily.IPV4:
        return _is_external4(raw)
    return _is_external6(raw)


def is_external(endpoint: Endpoint) -> bool:
    """
    Check if an endpoint is externally routable.

    IPv4 internal ranges: 0/8, 10/8, 127/8, 172.16/12, 192.168/16 and
    255.255.255.255. IPv6 internal ranges: fc00::/7, :: and ::1.
    """
    return is_external_address(endpoint.family, endpoint.address)
