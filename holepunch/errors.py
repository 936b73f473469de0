"""
Error taxonomy for socket-level failures.

Startup failures are fatal and raised to the caller. Failures on an
already-open socket are transient: they are logged and the event loop
carries on.
"""

import logging
from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """How a socket failure affects the process."""
    FATAL = "fatal"
    TRANSIENT = "transient"


class HolepunchError(Exception):
    """Base exception for socket failures."""

    kind = ErrorKind.FATAL

    def __init__(self, call: str, errno: Optional[int] = None, strerror: Optional[str] = None):
        self.call = call
        self.errno = errno
        self.strerror = strerror or "unknown error"
        super().__init__(f"{call}: {self.strerror}")

    @classmethod
    def from_os_error(cls, call: str, exc: OSError) -> "HolepunchError":
        """Wrap an OSError raised by the named socket call."""
        error = cls(call, errno=exc.errno, strerror=exc.strerror or str(exc))
        error.__cause__ = exc
        return error


class StartupError(HolepunchError):
    """Socket creation, option or bind failure at startup."""
    kind = ErrorKind.FATAL


class TransientError(HolepunchError):
    """Receive, send or select failure on an open socket."""
    kind = ErrorKind.TRANSIENT


def log_error(logger: logging.Logger, error: HolepunchError) -> None:
    """Emit a structured record naming the failed call and system error."""
    logger.error(
        str(error),
        extra={
            "kind": error.kind.value,
            "call": error.call,
            "errno": error.errno,
        },
    )
