"""
Configuration management for holepunch.

Handles:
- Listening port and bind addresses
- Build revision and startup notice
- Log level
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional
import logging

logger = logging.getLogger(__name__)

DEFAULT_PORT = 35002
DEFAULT_HOST4 = "0.0.0.0"
DEFAULT_HOST6 = "::"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

NOTICE = """\
holepunch - rendezvous relay for UDP hole punching
Released under the MIT License.
This software is provided "as is", without warranty of any kind."""


def _parse_port(value: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise ValueError(f"Invalid port: {value!r}") from None
    if not 0 < port <= 0xFFFF:
        raise ValueError(f"Port out of range: {port}")
    return port


def _parse_log_level(value: str) -> str:
    level = value.strip().upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"Unknown log level: {value!r} (expected one of {', '.join(LOG_LEVELS)})")
    return level


@dataclass
class Config:
    """
    Main holepunch configuration.

    Values are fixed at deploy time through the environment:
    HOLEPUNCH_PORT, HOLEPUNCH_REVISION and LOG_LEVEL.
    """
    port: int = DEFAULT_PORT
    host4: str = DEFAULT_HOST4
    host6: str = DEFAULT_HOST6

    # Build revision shown in the startup banner
    revision: str = "unknown"
    notice: str = NOTICE

    log_level: str = "INFO"

    def __post_init__(self):
        if not 0 < self.port <= 0xFFFF:
            raise ValueError(f"Port out of range: {self.port}")

    def to_dict(self) -> dict:
        return {
            "port": self.port,
            "host4": self.host4,
            "host6": self.host6,
            "revision": self.revision,
            "log_level": self.log_level,
        }

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """Load configuration from environment variables."""
        env = os.environ if environ is None else environ

        config = cls(
            revision=env.get("HOLEPUNCH_REVISION", "unknown"),
            log_level=_parse_log_level(env.get("LOG_LEVEL") or "INFO"),
        )
        if env.get("HOLEPUNCH_PORT"):
            config.port = _parse_port(env["HOLEPUNCH_PORT"])

        logger.debug(f"Configuration loaded: {config.to_dict()}")
        return config


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def set_config(config: Config) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config
    _config = None
