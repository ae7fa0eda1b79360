"""
Line framing over a byte stream.

Frame layout::

    <token> SP <token> SP ... <token> LF

- Tokens are base64 transport tokens (see codec), joined by one ASCII space
- Each frame is terminated by exactly one newline
- Empty tokens are preserved ("a  b" splits into "a", "", "b")

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

from __future__ import annotations

import logging
import socket
from typing import BinaryIO, List, Optional, Sequence

from ..constants import DEFAULT_MAX_LINE_LENGTH, LINE_TERMINATOR, TOKEN_SEPARATOR
from ..exceptions import ConnectionError, ProtocolError, TimeoutError

logger = logging.getLogger(__name__)


def build_line(tokens: Sequence[str]) -> bytes:
    """Join transport tokens into one newline-terminated frame.

    Args:
        tokens: Transport tokens (ASCII, without spaces or newlines)

    Returns:
        Frame bytes ready to be written

    Raises:
        ProtocolError: If a token contains a separator or terminator
    """
    parts = []
    for token in tokens:
        raw = token.encode("ascii")
        if TOKEN_SEPARATOR in raw or LINE_TERMINATOR in raw:
            raise ProtocolError(f"Transport token contains a delimiter: {token!r}")
        parts.append(raw)
    return TOKEN_SEPARATOR.join(parts) + LINE_TERMINATOR


def split_line(line: bytes) -> List[str]:
    """Split one received frame into transport tokens.

    Args:
        line: Frame bytes including the trailing newline

    Returns:
        List of transport tokens

    Raises:
        ProtocolError: If the frame is not ASCII
    """
    if line.endswith(LINE_TERMINATOR):
        line = line[: -len(LINE_TERMINATOR)]
    if line.endswith(b"\r"):
        line = line[:-1]
    try:
        text = line.decode("ascii")
    except UnicodeDecodeError as e:
        raise ProtocolError(f"Reply line is not ASCII: {e}") from e
    return text.split(TOKEN_SEPARATOR.decode("ascii"))


class FrameStream:
    """Reads and writes protocol frames on a connected socket.

    Usage::

        stream = FrameStream.open("localhost", 4444)
        stream.write_command_line(["Y29ubmVjdA==", ...])
        tokens = stream.read_reply_line()
        stream.close()
    """

    def __init__(
        self,
        sock: socket.socket,
        max_line_length: int = DEFAULT_MAX_LINE_LENGTH,
    ) -> None:
        self._sock: Optional[socket.socket] = sock
        self._reader: Optional[BinaryIO] = sock.makefile("rb")
        self._max_line_length = max_line_length
        self.frames_sent = 0
        self.frames_received = 0

    @classmethod
    def open(
        cls,
        host: str,
        port: int,
        timeout: Optional[float] = None,
        max_line_length: int = DEFAULT_MAX_LINE_LENGTH,
    ) -> FrameStream:
        """Open a TCP connection and wrap it.

        Args:
            host: Server host
            port: Server port
            timeout: Optional socket timeout in seconds (None blocks forever)
            max_line_length: Maximum accepted reply line length in bytes

        Returns:
            Connected FrameStream

        Raises:
            ConnectionError: If the socket cannot be opened
        """
        try:
            sock = socket.create_connection((host, port), timeout=timeout)
        except OSError as e:
            raise ConnectionError(f"Cannot connect to {host}:{port}: {e}") from e
        logger.info("Connected to bridge server %s:%s", host, port)
        return cls(sock, max_line_length=max_line_length)

    @property
    def closed(self) -> bool:
        return self._sock is None

    def write_command_line(self, tokens: Sequence[str]) -> None:
        """Write one command frame with a single send call.

        Raises:
            ConnectionError: If the stream is closed or the send fails
        """
        sock = self._require_socket()
        data = build_line(tokens)
        try:
            sock.sendall(data)
        except socket.timeout as e:
            raise TimeoutError(f"Timed out sending command: {e}") from e
        except OSError as e:
            raise ConnectionError(f"Failed to send command: {e}") from e
        self.frames_sent += 1

    def read_reply_line(self) -> List[str]:
        """Read one reply frame and split it into transport tokens.

        Blocks until a newline arrives (or the configured timeout expires).

        Raises:
            ConnectionError: If the stream ends before a newline
            TimeoutError: If a configured timeout expires
            ProtocolError: If the line is too long or not ASCII
        """
        reader = self._require_reader()
        try:
            line = reader.readline(self._max_line_length + 1)
        except socket.timeout as e:
            raise TimeoutError(f"Timed out waiting for reply: {e}") from e
        except OSError as e:
            raise ConnectionError(f"Failed to receive reply: {e}") from e

        if not line.endswith(LINE_TERMINATOR):
            if len(line) > self._max_line_length:
                # Rest of the line is still unread, stream cannot be resynchronized
                self.close()
                raise ProtocolError(
                    f"Reply line exceeds {self._max_line_length} bytes"
                )
            if not line:
                raise ConnectionError("Connection closed by server")
            raise ConnectionError(
                f"Connection closed mid-line after {len(line)} bytes"
            )

        self.frames_received += 1
        return split_line(line)

    def close(self) -> None:
        """Close reader and socket. Safe to call more than once."""
        if self._sock is None:
            return
        reader, sock = self._reader, self._sock
        self._reader = None
        self._sock = None
        try:
            if reader is not None:
                reader.close()
        finally:
            try:
                sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                # Peer may already be gone
                pass
            sock.close()
            logger.debug(
                "Stream closed (frames sent=%s, received=%s)",
                self.frames_sent,
                self.frames_received,
            )

    def _require_socket(self) -> socket.socket:
        if self._sock is None:
            raise ConnectionError("Stream is closed")
        return self._sock

    def _require_reader(self) -> BinaryIO:
        if self._sock is None or self._reader is None:
            raise ConnectionError("Stream is closed")
        return self._reader
