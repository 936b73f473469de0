"""
holepunch - rendezvous relay for UDP hole punching

Two peers behind NATs each send a short datagram to a well-known server.
The server forwards each sender's observed public endpoint to the peer it
names, so both sides can then talk directly.

Example:
    >>> from holepunch import Config, RendezvousServer
    >>> with RendezvousServer.bind(Config(port=35002)) as server:
    ...     server.serve_forever()
"""

__version__ = "1.0.0"

from .config import Config, get_config
from .errors import HolepunchError, StartupError, TransientError
from .network import Endpoint, RendezvousServer, is_external

__all__ = [
    "__version__",
    "Config",
    "get_config",
    "HolepunchError",
    "StartupError",
    "TransientError",
    "Endpoint",
    "RendezvousServer",
    "is_external",
]
