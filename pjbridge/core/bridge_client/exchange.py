"""
Exchange engine: one encoded command line out, one decoded reply line in.

The protocol carries no request identifiers, so the engine serializes all
traffic on its stream with a re-entrant lock. Callers that need several
reads for one command (row fetch) hold ``locked()`` for the whole sequence.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, List, Sequence, TypeVar

from ..exceptions import ConnectionError
from .codec import TokenCodec, TokenText
from .framing import FrameStream
from .reply import Reply

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ExchangeEngine:
    """Runs request/response round trips over one FrameStream."""

    def __init__(self, stream: FrameStream, codec: TokenCodec):
        """Initialize exchange engine.

        Args:
            stream: Connected frame stream (owned by the engine from now on)
            codec: Token codec for both directions
        """
        self.stream = stream
        self.codec = codec
        self._lock = threading.RLock()
        self._broken = False

    @property
    def closed(self) -> bool:
        return self._broken or self.stream.closed

    @contextmanager
    def locked(self) -> Iterator[ExchangeEngine]:
        """Hold the stream lock for a multi-frame sequence."""
        with self._lock:
            yield self

    def exchange(self, command_tokens: Sequence[TokenText]) -> Reply:
        """Send one command and return its decoded reply.

        Args:
            command_tokens: Operation name followed by its arguments

        Returns:
            Decoded reply

        Raises:
            ValidationError: If a token cannot be encoded (nothing is sent)
            ConnectionError: If the stream fails; the engine is closed
            ProtocolError: If the reply line is malformed
        """
        if not command_tokens:
            raise ValueError("Command must contain at least the operation name")
        # Nothing is written unless every token encodes
        wire_tokens = [self.codec.encode_token(tok) for tok in command_tokens]
        operation = command_tokens[0]
        with self._lock:
            self._ensure_open()
            logger.debug(
                "exchange op=%s args=%s", operation, len(command_tokens) - 1
            )
            self._guarded(lambda: self.stream.write_command_line(wire_tokens))
            reply = self.read_reply()
        logger.debug(
            "exchange op=%s status=%s payload=%s",
            operation,
            reply.status,
            len(reply.payload),
        )
        return reply

    def read_reply(self) -> Reply:
        """Read and decode one reply line without sending a command.

        Raises:
            ConnectionError: If the stream fails; the engine is closed
            ProtocolError: If the reply line is malformed
        """
        wire_tokens = self.read_raw_line()
        return self.decode_line(wire_tokens)

    def read_raw_line(self) -> List[str]:
        """Read one line as transport tokens, without decoding them.

        Raises:
            ConnectionError: If the stream fails; the engine is closed
            ProtocolError: If the line is too long or not ASCII
        """
        with self._lock:
            self._ensure_open()
            return self._guarded(self.stream.read_reply_line)

    def decode_line(self, wire_tokens: Sequence[str]) -> Reply:
        """Decode transport tokens into a Reply.

        Raises:
            ProtocolError: If a token is not valid base64 or charset text
        """
        return Reply.from_tokens([self.codec.decode_token(tok) for tok in wire_tokens])

    def close(self) -> None:
        """Close the underlying stream. Safe to call more than once."""
        with self._lock:
            self._broken = True
            self.stream.close()

    def _ensure_open(self) -> None:
        if self.closed:
            raise ConnectionError("Connection is closed")

    def _guarded(self, action: Callable[[], T]) -> T:
        try:
            return action()
        except ConnectionError:
            logger.warning("Connection failed, closing stream")
            self.close()
            raise
