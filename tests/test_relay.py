"""
Tests for the relay engine.
"""

from holepunch.network.codec import MAGIC, build_request, decode
from holepunch.network.endpoint import AddressFamily, Endpoint
from holepunch.network.relay import process_datagram, relay


class TestRelay:
    """Tests for the endpoint swap."""

    def test_swap(self):
        source = Endpoint.parse("203.0.113.5:40000")
        embedded = Endpoint.parse("198.51.100.9:50000")

        destination, outbound = relay(source, embedded)

        assert destination == embedded
        assert outbound == source


class TestProcessDatagram:
    """Tests for the decode/classify/relay/encode pipeline."""

    def test_end_to_end_ipv4(self):
        source = Endpoint.parse("203.0.113.5:40000")
        data = build_request(Endpoint.parse("198.51.100.9:50000"))

        result = process_datagram(data, source)

        assert result is not None
        assert result.destination == Endpoint.parse("198.51.100.9:50000")
        assert len(result.payload) == 10
        assert result.payload[:4] == MAGIC
        assert decode(result.payload, AddressFamily.IPV4).endpoint == source

    def test_end_to_end_ipv6(self):
        source = Endpoint.parse("[2001:db8::5]:40000")
        peer = Endpoint.parse("[2001:db8:1::9]:50000")

        result = process_datagram(build_request(peer), source)

        assert result is not None
        assert result.destination == peer
        assert len(result.payload) == 22
        assert decode(result.payload, AddressFamily.IPV6).endpoint == source

    def test_private_embedded_endpoint_rejected(self):
        source = Endpoint.parse("203.0.113.5:40000")
        data = build_request(Endpoint.parse("192.168.1.50:1234"))

        assert process_datagram(data, source) is None

    def test_private_source_rejected(self):
        source = Endpoint.parse("10.1.2.3:40000")
        data = build_request(Endpoint.parse("198.51.100.9:50000"))

        assert process_datagram(data, source) is None

    def test_unique_local_ipv6_rejected(self):
        source = Endpoint.parse("[2001:db8::5]:40000")
        data = build_request(Endpoint.parse("[fd00::1]:50000"))

        assert process_datagram(data, source) is None

    def test_wrong_length_rejected(self):
        source = Endpoint.parse("203.0.113.5:40000")
        data = build_request(Endpoint.parse("198.51.100.9:50000"))

        assert process_datagram(data + b"\x00", source) is None
        assert process_datagram(data[:-1], source) is None

    def test_wrong_magic_rejected(self):
        source = Endpoint.parse("203.0.113.5:40000")
        data = b"\x00\x52\xeb\x10" + build_request(Endpoint.parse("198.51.100.9:50000"))[4:]

        assert process_datagram(data, source) is None

    def test_ipv6_request_from_ipv4_source_rejected(self):
        source = Endpoint.parse("203.0.113.5:40000")
        data = build_request(Endpoint.parse("[2001:db8::9]:50000"))

        assert process_datagram(data, source) is None

    def test_custom_classifier(self):
        source = Endpoint.parse("127.0.0.1:40000")
        data = build_request(Endpoint.parse("127.0.0.1:50000"))

        result = process_datagram(data, source, classifier=lambda endpoint: True)

        assert result is not None
        assert result.destination.port == 50000

    def test_stateless(self):
        """Outcomes depend only on each datagram, not on order."""
        a = (build_request(Endpoint.parse("198.51.100.9:50000")), Endpoint.parse("203.0.113.5:40000"))
        b = (build_request(Endpoint.parse("192.0.2.77:6000")), Endpoint.parse("8.8.4.4:7000"))

        first = [process_datagram(*a), process_datagram(*b)]
        second = [process_datagram(*b), process_datagram(*a)]

        assert first[0] == second[1]
        assert first[1] == second[0]
        assert first[0] != first[1]
