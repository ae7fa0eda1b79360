"""
Bridge client package.

Codec, line framing, exchange engine and session for the PJBS protocol.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

from .codec import TokenCodec
from .exchange import ExchangeEngine
from .framing import FrameStream, build_line, split_line
from .reply import Reply, Row
from .session import BridgeSession

__all__ = [
    "BridgeSession",
    "ExchangeEngine",
    "FrameStream",
    "Reply",
    "Row",
    "TokenCodec",
    "build_line",
    "split_line",
]
