"""
Tests for the exchange engine.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

import socket
import threading

import pytest

from pjbridge.core.bridge_client.codec import TokenCodec
from pjbridge.core.bridge_client.exchange import ExchangeEngine
from pjbridge.core.bridge_client.framing import FrameStream
from pjbridge.core.exceptions import ConnectionError, ProtocolError, ValidationError
from tests.bridge_helpers import decode_line, wire_line


@pytest.fixture
def engine_pair():
    """ExchangeEngine on one end of a socketpair, reader/socket on the other."""
    left, right = socket.socketpair()
    engine = ExchangeEngine(FrameStream(left), TokenCodec())
    reader = right.makefile("rb")
    yield engine, right, reader
    engine.close()
    reader.close()
    right.close()


class TestExchangeEngine:
    """Test one-line round trips."""

    def test_exchange_round_trip(self, engine_pair):
        """Command tokens are encoded, reply tokens decoded."""
        engine, peer, reader = engine_pair
        peer.sendall(wire_line("ok", "res42"))
        reply = engine.exchange(["exec", "SELECT 1"])
        assert decode_line(reader.readline()) == ["exec", "SELECT 1"]
        assert reply.is_ok()
        assert reply.tokens == ("ok", "res42")
        assert reply.payload == ("res42",)

    def test_exchange_one_write_one_read(self, engine_pair):
        engine, peer, _ = engine_pair
        peer.sendall(wire_line("ok"))
        engine.exchange(["free_result", "res42"])
        assert engine.stream.frames_sent == 1
        assert engine.stream.frames_received == 1

    def test_read_reply_without_command(self, engine_pair):
        """Raw read consumes a line and sends nothing."""
        engine, peer, _ = engine_pair
        peer.sendall(wire_line("id", "1"))
        reply = engine.read_reply()
        assert reply.tokens == ("id", "1")
        assert engine.stream.frames_sent == 0

    def test_raw_line_read_before_decode(self, engine_pair):
        """A line that fails decoding is still consumed from the stream."""
        engine, peer, _ = engine_pair
        peer.sendall(b"!!bad MQ==\n" + wire_line("name", "A"))
        wire_tokens = engine.read_raw_line()
        assert wire_tokens == ["!!bad", "MQ=="]
        with pytest.raises(ProtocolError):
            engine.decode_line(wire_tokens)
        assert engine.read_reply().tokens == ("name", "A")
        assert engine.stream.frames_received == 2

    def test_invalid_token_sends_nothing(self, engine_pair):
        """Encoding failure happens before the stream is touched."""
        engine, _, _ = engine_pair
        with pytest.raises(ValidationError):
            engine.exchange(["exec", "naïve"])
        assert engine.stream.frames_sent == 0
        assert not engine.closed

    def test_empty_command(self, engine_pair):
        engine, _, _ = engine_pair
        with pytest.raises(ValueError):
            engine.exchange([])

    def test_connection_error_closes_engine(self, engine_pair):
        """After a connection failure every call fails."""
        engine, peer, _ = engine_pair
        peer.shutdown(socket.SHUT_WR)
        with pytest.raises(ConnectionError):
            engine.exchange(["connect", "url", "u", "p"])
        assert engine.closed
        with pytest.raises(ConnectionError):
            engine.exchange(["free_result", "res42"])

    def test_protocol_error_keeps_connection(self, engine_pair):
        """A malformed token fails the call but not the connection."""
        engine, peer, _ = engine_pair
        peer.sendall(b"b2s= !!!\n" + wire_line("ok"))
        with pytest.raises(ProtocolError):
            engine.exchange(["exec", "SELECT 1"])
        assert not engine.closed
        assert engine.read_reply().is_ok()

    def test_closed_engine(self, engine_pair):
        engine, _, _ = engine_pair
        engine.close()
        engine.close()
        with pytest.raises(ConnectionError):
            engine.exchange(["exec", "SELECT 1"])

    def test_concurrent_exchanges_serialized(self, engine_pair):
        """Threads sharing an engine never interleave command lines."""
        engine, peer, reader = engine_pair
        results = []

        def responder():
            for _ in range(20):
                tokens = decode_line(reader.readline())
                peer.sendall(wire_line("ok", tokens[1]))

        server = threading.Thread(target=responder, daemon=True)
        server.start()

        def worker(name):
            for i in range(5):
                reply = engine.exchange(["exec", f"{name}-{i}"])
                results.append((f"{name}-{i}", reply.payload[0]))

        workers = [threading.Thread(target=worker, args=(n,)) for n in "abcd"]
        for w in workers:
            w.start()
        for w in workers:
            w.join(5)
        server.join(5)

        assert len(results) == 20
        assert all(sent == echoed for sent, echoed in results)

    def test_locked_holds_stream_for_sequence(self, engine_pair):
        """locked() is re-entrant for exchange and raw reads."""
        engine, peer, _ = engine_pair
        peer.sendall(wire_line("ok", "1") + wire_line("id", "7"))
        with engine.locked():
            head = engine.exchange(["fetch_array", "res"])
            row = engine.read_reply()
        assert head.payload == ("1",)
        assert row.tokens == ("id", "7")
