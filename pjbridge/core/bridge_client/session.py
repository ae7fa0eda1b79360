"""
Bridge session: public protocol operations over one connection.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

from __future__ import annotations

import logging
from typing import Any, Iterator, List, Optional, Sequence, Tuple, Union

from ..config import BridgeConfig
from ..constants import (
    OP_CONNECT,
    OP_EXEC,
    OP_FETCH_ARRAY,
    OP_FREE_RESULT,
    ROW_LINE_TOKENS,
)
from ..exceptions import CommandError, ProtocolError, ValidationError
from .codec import TokenCodec, TokenText
from .exchange import ExchangeEngine
from .framing import FrameStream
from .reply import Reply, Row

logger = logging.getLogger(__name__)

ExecResult = Union[str, bool]
FetchResult = Union[Row, bool]


class BridgeSession:
    """Session with a remote JDBC proxy server.

    The TCP connection is opened by the constructor and released by
    ``close()``; use the session as a context manager to guarantee release::

        with BridgeSession("localhost", 4444) as session:
            if session.connect("jdbc:mysql://db/test", "user", "secret"):
                rows = session.query("SELECT * FROM t WHERE id = ?", [42])

    A declined command (non-"ok" status) is not an exception: ``connect``
    and ``free_result`` return False, ``exec`` and ``fetch_array`` return
    False instead of their value. Connection and protocol failures raise.
    """

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        wire_encoding: Optional[str] = None,
        local_encoding: Optional[str] = None,
        timeout: Optional[float] = None,
        max_line_length: Optional[int] = None,
        config: Optional[BridgeConfig] = None,
    ):
        """Initialize session and open the connection.

        Explicit arguments override values from ``config``.

        Args:
            host: Server host (default: "localhost")
            port: Server port (default: 4444)
            wire_encoding: Charset on the wire, JDBC side (default: "ascii")
            local_encoding: Charset of application text (default: "ascii")
            timeout: Socket timeout in seconds (default: None, block forever)
            max_line_length: Maximum reply line length in bytes
            config: Optional base configuration

        Raises:
            ConfigurationError: If an option is invalid
            ConnectionError: If the socket cannot be opened
        """
        self.config = (config or BridgeConfig()).merged(
            host=host,
            port=port,
            wire_encoding=wire_encoding,
            local_encoding=local_encoding,
            timeout=timeout,
            max_line_length=max_line_length,
        )
        codec = TokenCodec(self.config.wire_encoding, self.config.local_encoding)
        stream = FrameStream.open(
            self.config.host,
            self.config.port,
            timeout=self.config.timeout,
            max_line_length=self.config.max_line_length,
        )
        self._engine = ExchangeEngine(stream, codec)
        self.last_error: Optional[Reply] = None

    @classmethod
    def from_config(cls, config: BridgeConfig) -> BridgeSession:
        """Create session from configuration object."""
        return cls(config=config)

    def __enter__(self) -> BridgeSession:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        host, port = self.endpoint
        state = "closed" if self.closed else "open"
        return f"BridgeSession({host}:{port}, {state})"

    @property
    def endpoint(self) -> Tuple[str, int]:
        return self.config.host, self.config.port

    @property
    def closed(self) -> bool:
        return self._engine.closed

    @property
    def engine(self) -> ExchangeEngine:
        return self._engine

    def close(self) -> None:
        """Close the connection. Later operations raise ConnectionError."""
        if not self._engine.closed:
            logger.info("Closing bridge session %s:%s", *self.endpoint)
        self._engine.close()

    def connect(self, url: str, user: str, password: str) -> bool:
        """Open a database connection on the server side.

        Args:
            url: JDBC URL
            user: Database user
            password: Database password

        Returns:
            True if the server accepted the connection, False otherwise
        """
        reply = self._engine.exchange([OP_CONNECT, url, user, password])
        return self._accepted(reply)

    def exec(self, query: TokenText, params: Sequence[Any] = ()) -> ExecResult:
        """Execute a statement with optional bound parameters.

        Args:
            query: SQL text
            params: Bound parameters, sent in order after the query

        Returns:
            Result handle (or result string) on success, False otherwise

        Raises:
            ValidationError: If a parameter is None or cannot be encoded
            ProtocolError: If an "ok" reply carries no result token
        """
        command: List[TokenText] = [OP_EXEC, query]
        command.extend(self._param_token(i, value) for i, value in enumerate(params))
        reply = self._engine.exchange(command)
        if not self._accepted(reply):
            return False
        result = reply.payload_at(0)
        if result is None:
            raise ProtocolError("exec reply is missing the result token")
        return result

    def fetch_array(self, handle: str) -> FetchResult:
        """Fetch the next row of a result set.

        Args:
            handle: Result handle returned by ``exec``

        Returns:
            Row mapping column name to value, or False when the server
            declines (typically: no more rows)

        Raises:
            ProtocolError: If the column count or a row line is malformed
            ConnectionError: If the stream ends before all row lines arrive
        """
        with self._engine.locked():
            try:
                reply = self._engine.exchange([OP_FETCH_ARRAY, handle])
                if not self._accepted(reply):
                    return False
                count = self._column_count(reply)
            except ProtocolError:
                # Unknown number of row lines may follow
                logger.warning("Unreadable fetch_array reply, closing connection")
                self._engine.close()
                raise
            return self._read_row(count)

    def free_result(self, handle: str) -> bool:
        """Release a result set on the server.

        Args:
            handle: Result handle returned by ``exec``

        Returns:
            True if the server released it, False otherwise
        """
        reply = self._engine.exchange([OP_FREE_RESULT, handle])
        return self._accepted(reply)

    def iter_rows(self, handle: str) -> Iterator[Row]:
        """Yield rows until ``fetch_array`` reports the end of the result set."""
        while True:
            row = self.fetch_array(handle)
            if row is False:
                return
            yield row

    def fetch_all(self, handle: str) -> List[Row]:
        """Fetch all remaining rows of a result set."""
        return list(self.iter_rows(handle))

    def query(self, query: TokenText, params: Sequence[Any] = ()) -> List[Row]:
        """Execute a statement, fetch every row and free the result.

        Raises:
            CommandError: If the server declines the statement
        """
        handle = self.exec(query, params)
        if handle is False:
            raise CommandError(
                f"Statement declined by server (status {self._status_text()})",
                reply=self.last_error,
            )
        try:
            return self.fetch_all(handle)
        finally:
            if not self.closed and not self.free_result(handle):
                logger.warning("Server declined to free result %s", handle)

    def _accepted(self, reply: Reply) -> bool:
        if reply.is_ok():
            return True
        self.last_error = reply
        logger.debug("Command declined with status %r", reply.status)
        return False

    def _status_text(self) -> str:
        return repr(self.last_error.status) if self.last_error else "unknown"

    def _column_count(self, reply: Reply) -> int:
        raw = reply.payload_at(0)
        if raw is None:
            raise ProtocolError("fetch_array reply is missing the column count")
        if raw.startswith("-") and raw[1:].isascii() and raw[1:].isdigit():
            raise ProtocolError(f"Column count is negative: {raw}")
        if not (raw.isascii() and raw.isdigit()):
            raise ProtocolError(f"Column count is not an integer: {raw!r}")
        return int(raw)

    def _read_row(self, count: int) -> Row:
        row: Row = {}
        problems: List[str] = []
        for index in range(count):
            # Raw reads: the server sends row lines without a new command
            try:
                line = self._engine.decode_line(self._engine.read_raw_line())
            except ProtocolError as e:
                if self._engine.closed:
                    raise
                problems.append(f"row line {index}: {e}")
                continue
            if len(line) != ROW_LINE_TOKENS:
                problems.append(
                    f"row line {index} has {len(line)} tokens, "
                    f"expected {ROW_LINE_TOKENS}"
                )
                continue
            name, value = line.tokens
            if name in row:
                problems.append(f"duplicate column {name!r}")
                continue
            row[name] = value
        if problems:
            raise ProtocolError("Malformed row: " + "; ".join(problems))
        return row

    @staticmethod
    def _param_token(index: int, value: Any) -> TokenText:
        if value is None:
            raise ValidationError(f"Parameter {index} is None")
        if isinstance(value, (str, bytes)):
            return value
        if isinstance(value, bool):
            return "1" if value else "0"
        return str(value)
