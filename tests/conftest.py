"""
Pytest fixtures for bridge client testing.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

import logging
import socket
from typing import List, Sequence

import pytest

from tests.bridge_helpers import Response, ScriptedServer


@pytest.fixture
def scripted_server():
    """Factory fixture: start a ScriptedServer with the given responses."""
    servers: List[ScriptedServer] = []

    def _start(responses: Sequence[Response]) -> ScriptedServer:
        server = ScriptedServer(responses)
        servers.append(server)
        return server

    yield _start

    for server in servers:
        server.stop()


@pytest.fixture
def free_port() -> int:
    """A local port with nothing listening on it."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


@pytest.fixture(autouse=True)
def reset_bridge_logger():
    """Undo handler changes made by setup_logging between tests."""
    yield
    bridge_logger = logging.getLogger("pjbridge")
    for handler in bridge_logger.handlers[:]:
        bridge_logger.removeHandler(handler)
        handler.close()
    bridge_logger.propagate = True
    bridge_logger.setLevel(logging.NOTSET)
