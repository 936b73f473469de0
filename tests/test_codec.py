"""
Tests for the relay datagram codec.
"""

import struct

import pytest

from holepunch.network.codec import (
    MAGIC,
    RelayRequest,
    build_request,
    decode,
    encode,
)
from holepunch.network.endpoint import AddressFamily, Endpoint


class TestDecode:
    """Tests for decoding."""

    def test_decode_ipv4(self):
        data = MAGIC + bytes([198, 51, 100, 9]) + struct.pack(">H", 50000)

        request = decode(data, AddressFamily.IPV4)

        assert request is not None
        assert request.magic == MAGIC
        assert request.endpoint == Endpoint.parse("198.51.100.9:50000")

    def test_decode_ipv6(self):
        address = Endpoint.parse("[2001:db8::9]:1").address
        data = MAGIC + address + b"\x01\xbb"

        request = decode(data, AddressFamily.IPV6)

        assert request is not None
        assert request.endpoint.host == "2001:db8::9"
        assert request.endpoint.port == 443

    def test_port_is_big_endian(self):
        data = MAGIC + bytes([8, 8, 8, 8]) + b"\x12\x34"
        assert decode(data, AddressFamily.IPV4).endpoint.port == 0x1234

    @pytest.mark.parametrize("length", [0, 1, 4, 9, 11, 22, 64])
    def test_wrong_length_ipv4(self, length):
        data = (MAGIC + bytes(64))[:length]
        assert decode(data, AddressFamily.IPV4) is None

    @pytest.mark.parametrize("length", [0, 10, 21, 23])
    def test_wrong_length_ipv6(self, length):
        data = (MAGIC + bytes(64))[:length]
        assert decode(data, AddressFamily.IPV6) is None

    @pytest.mark.parametrize("magic", [
        b"\x00\x00\x00\x00",
        b"\x11\xeb\x52\x00",
        b"\x00\x52\xeb\x12",
        b"\x01\x52\xeb\x11",
    ])
    def test_wrong_magic(self, magic):
        data = magic + bytes([8, 8, 8, 8]) + b"\x00\x50"
        assert decode(data, AddressFamily.IPV4) is None

    def test_ipv4_sized_datagram_on_ipv6_socket(self):
        data = MAGIC + bytes([8, 8, 8, 8]) + b"\x00\x50"
        assert decode(data, AddressFamily.IPV6) is None


class TestEncode:
    """Tests for encoding."""

    def test_layout_ipv4(self):
        request = RelayRequest(magic=MAGIC, endpoint=Endpoint.parse("203.0.113.5:40000"))

        data = encode(request)

        assert len(data) == 10
        assert data[:4] == MAGIC
        assert data[4:8] == bytes([203, 0, 113, 5])
        assert data[8:10] == struct.pack(">H", 40000)

    def test_layout_ipv6(self):
        endpoint = Endpoint.parse("[2001:db8::5]:40000")

        data = build_request(endpoint)

        assert len(data) == 22
        assert data[:4] == MAGIC
        assert data[4:20] == endpoint.address
        assert data[20:22] == struct.pack(">H", 40000)

    @pytest.mark.parametrize("text", ["8.8.8.8:53", "[2001:db8::1]:53"])
    def test_length_matches_family_packet_size(self, text):
        endpoint = Endpoint.parse(text)
        assert len(build_request(endpoint)) == endpoint.family.packet_size

    def test_magic_preserved(self):
        request = RelayRequest(magic=b"\xde\xad\xbe\xef", endpoint=Endpoint.parse("8.8.8.8:53"))
        assert encode(request)[:4] == b"\xde\xad\xbe\xef"
