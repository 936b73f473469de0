"""
Relay engine.

When peer A sends a request naming peer B, the server tells B what A's
observed address is. Each datagram triggers exactly one such one-way
notification; for a bidirectional punch both peers send a request naming
the other.
"""

import logging
from dataclasses import dataclass, replace
from typing import Callable, Optional, Tuple

from .classify import is_external
from .codec import decode, encode
from .endpoint import Endpoint

logger = logging.getLogger(__name__)

Classifier = Callable[[Endpoint], bool]


@dataclass(frozen=True)
class Relayed:
    """An outbound datagram and where to send it."""
    source: Endpoint
    destination: Endpoint
    payload: bytes


def relay(source: Endpoint, embedded: Endpoint) -> Tuple[Endpoint, Endpoint]:
    """
    Swap endpoints for forwarding.

    Args:
        source: Observed (NAT-translated) sender endpoint
        embedded: Endpoint named inside the sender's datagram

    Returns:
        (destination, outbound_embedded): send to the named peer,
        telling it the sender's observed endpoint
    """
    return embedded, source


def process_datagram(
    data: bytes,
    source: Endpoint,
    classifier: Classifier = is_external,
) -> Optional[Relayed]:
    """
    Run one datagram through decode, classify, relay and encode.

    Args:
        data: Raw datagram as received
        source: Sender endpoint reported by the receive call
        classifier: Predicate both endpoints must satisfy

    Returns:
        Relayed datagram, or None if the datagram is dropped
    """
    request = decode(data, source.family)
    if request is None:
        logger.debug(f"Dropped malformed datagram from {source} ({len(data)} bytes)")
        return None

    if not classifier(source) or not classifier(request.endpoint):
        logger.debug(f"Dropped datagram from {source} naming {request.endpoint}: not external")
        return None

    destination, embedded = relay(source, request.endpoint)
    payload = encode(replace(request, endpoint=embedded))

    return Relayed(source=source, destination=destination, payload=payload)
