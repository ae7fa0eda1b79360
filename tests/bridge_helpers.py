"""
Helpers for bridge client tests: wire token builders and a scripted server.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

import base64
import socket
import threading
import time
from dataclasses import dataclass
from typing import List, Sequence, Union


def b64(text: str, encoding: str = "ascii") -> str:
    """Transport token for text in the given wire encoding."""
    return base64.b64encode(text.encode(encoding)).decode("ascii")


def wire_line(*tokens: str, encoding: str = "ascii") -> bytes:
    """Build one newline-terminated wire line from plain text tokens."""
    return (" ".join(b64(t, encoding) for t in tokens) + "\n").encode("ascii")


def decode_line(line: bytes, encoding: str = "ascii") -> List[str]:
    """Decode one received command line into plain text tokens."""
    return [
        base64.b64decode(tok).decode(encoding)
        for tok in line.rstrip(b"\n").decode("ascii").split(" ")
    ]


@dataclass
class Hangup:
    """Send ``data`` (possibly a partial line) and close the connection."""

    data: bytes = b""


Response = Union[bytes, Hangup]


class ScriptedServer:
    """Single-connection TCP server answering each command with a script entry.

    The i-th received line is answered with ``responses[i]``. Once the script
    is exhausted the server keeps reading (recording any extra lines) until
    the client disconnects.
    """

    def __init__(self, responses: Sequence[Response]):
        self.responses = list(responses)
        self.received: List[bytes] = []
        self.connections = 0
        self._listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._listener.bind(("127.0.0.1", 0))
        self._listener.listen(1)
        self.host, self.port = self._listener.getsockname()
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _serve(self) -> None:
        try:
            conn, _ = self._listener.accept()
        except OSError:
            return
        self.connections += 1
        with conn:
            reader = conn.makefile("rb")
            try:
                index = 0
                while True:
                    line = reader.readline()
                    if not line:
                        return
                    self.received.append(line)
                    if index >= len(self.responses):
                        continue
                    response = self.responses[index]
                    index += 1
                    if isinstance(response, Hangup):
                        if response.data:
                            conn.sendall(response.data)
                        conn.shutdown(socket.SHUT_RDWR)
                        return
                    conn.sendall(response)
            except OSError:
                return
            finally:
                reader.close()

    def commands(self, encoding: str = "ascii") -> List[List[str]]:
        """Received command lines decoded to plain tokens."""
        return [decode_line(line, encoding) for line in self.received]

    def wait_for_lines(self, expected: int, timeout: float = 5.0) -> None:
        """Wait until ``expected`` lines were recorded (or time out)."""
        deadline = time.monotonic() + timeout
        while len(self.received) < expected and time.monotonic() < deadline:
            time.sleep(0.01)

    def join(self, timeout: float = 5.0) -> None:
        self._thread.join(timeout)

    def stop(self) -> None:
        try:
            # Wakes a pending accept()
            self._listener.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self._listener.close()
        self.join()
