"""
Exceptions for bridge client operations.

Defines the error taxonomy of the bridge: connection errors, protocol errors,
declined commands, configuration errors and caller validation errors.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .bridge_client.reply import Reply


class BridgeError(Exception):
    """Base exception for bridge errors."""

    pass


class ConnectionError(BridgeError):
    """Socket could not be opened, or closed while a frame was in transit.

    Fatal to the connection: every later operation on it fails too.
    """

    pass


class TimeoutError(ConnectionError):
    """Exception for socket timeouts (only when a timeout is configured)."""

    pass


class ProtocolError(BridgeError):
    """Exception for malformed reply lines."""

    pass


class ConfigurationError(BridgeError):
    """Exception for invalid configuration (unknown encoding, bad port, ...)."""

    pass


class ValidationError(BridgeError):
    """Exception for caller-supplied values that cannot be sent."""

    pass


class CommandError(BridgeError):
    """Exception for commands declined by the server.

    Only raised by helpers that have no in-band failure value; the four
    protocol operations report a declined command by returning False.
    """

    def __init__(self, message: str, reply: Optional["Reply"] = None):
        """Initialize command error.

        Args:
            message: Error message
            reply: Reply carrying the non-ok status
        """
        super().__init__(message)
        self.reply = reply
