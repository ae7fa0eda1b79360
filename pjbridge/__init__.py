"""
PJBridge - client bridge for the PJBS line protocol.

Speaks the base64 token protocol of a remote JDBC proxy server over one
persistent TCP connection.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

from pjbridge.core.bridge_client import BridgeSession, Reply, Row
from pjbridge.core.config import BridgeConfig
from pjbridge.core.exceptions import (
    BridgeError,
    CommandError,
    ConfigurationError,
    ConnectionError,
    ProtocolError,
    TimeoutError,
    ValidationError,
)

__version__ = "1.0.0"

__all__ = [
    "BridgeSession",
    "BridgeConfig",
    "Reply",
    "Row",
    "BridgeError",
    "CommandError",
    "ConfigurationError",
    "ConnectionError",
    "ProtocolError",
    "TimeoutError",
    "ValidationError",
]
