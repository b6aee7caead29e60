"""Unit tests for the transmitter."""
import json
import socket
import pytest
from unittest.mock import MagicMock, patch
from udp_node.errors import ErrorCode, ResolutionFailed
from udp_node.protocol import xor_fold
from udp_node.resolver import AddressFamily
from udp_node.transport import transmit


@pytest.fixture
def receiver():
    """A plain UDP socket on an ephemeral loopback port."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(2.0)
    yield sock
    sock.close()


def test_transmit_delivers_frame(receiver):
    """Test that a frame reaches a real socket."""
    port = receiver.getsockname()[1]
    
    rv = transmit(port, AddressFamily.IPV4, "127.0.0.1", "Be happy for this moment")
    
    assert rv == ErrorCode.SUCCESS
    data, _ = receiver.recvfrom(1024)
    frame = json.loads(data)
    assert frame["Msg"] == "Be happy for this moment"
    assert frame["CRC"] == xor_fold(b"Be happy for this moment")
    assert "Join_thr" not in frame


def test_transmit_shutdown_frame(receiver):
    """Test that the shutdown flag is carried."""
    port = receiver.getsockname()[1]
    
    assert transmit(port, "ipv4", "127.0.0.1", "Goodbye", True) == ErrorCode.SUCCESS
    data, _ = receiver.recvfrom(1024)
    assert json.loads(data)["Join_thr"] is True


def test_transmit_resolution_failure():
    """Test that an unresolvable host returns RESOLUTION_FAILED."""
    with patch("udp_node.transport.resolve", side_effect=ResolutionFailed("nope")):
        rv = transmit(3490, AddressFamily.IPV4, "no-such-host.invalid", "hi")
    
    assert rv == ErrorCode.RESOLUTION_FAILED


def test_transmit_socket_create_failure():
    """Test that failing to create any socket returns SOCKET_CREATE_FAILED."""
    with patch("udp_node.transport.socket.socket", side_effect=OSError("no sockets")):
        rv = transmit(3490, AddressFamily.IPV4, "127.0.0.1", "hi")
    
    assert rv == ErrorCode.SOCKET_CREATE_FAILED


def test_transmit_tries_next_candidate():
    """Test that a candidate whose socket fails is skipped."""
    candidates = [
        (socket.AF_INET6, socket.SOCK_DGRAM, 17, "", ("::1", 3490, 0, 0)),
        (socket.AF_INET, socket.SOCK_DGRAM, 17, "", ("127.0.0.1", 3490)),
    ]
    good_sock = MagicMock()
    good_sock.sendto.return_value = 10
    with patch("udp_node.transport.resolve", return_value=candidates), \
         patch("udp_node.transport.socket.socket", side_effect=[OSError("v6 off"), good_sock]):
        rv = transmit(3490, AddressFamily.IPV4, "localhost", "hi")
    
    assert rv == ErrorCode.SUCCESS
    assert good_sock.sendto.call_args[0][1] == ("127.0.0.1", 3490)
    good_sock.close.assert_called_once()


def test_transmit_refused_returns_send_failed():
    """Test that a refused send returns SEND_FAILED and still closes the socket."""
    sock = MagicMock()
    sock.sendto.side_effect = ConnectionRefusedError("refused")
    with patch("udp_node.transport.socket.socket", return_value=sock):
        rv = transmit(3490, AddressFamily.IPV4, "127.0.0.1", "hi")
    
    assert rv == ErrorCode.SEND_FAILED
    sock.close.assert_called_once()


def test_transmit_closes_socket_on_success():
    """Test that the per-call socket is always closed."""
    sock = MagicMock()
    sock.sendto.return_value = 5
    with patch("udp_node.transport.socket.socket", return_value=sock):
        assert transmit(3490, AddressFamily.IPV4, "127.0.0.1", "hi") == ErrorCode.SUCCESS
    
    sock.close.assert_called_once()


def test_transmit_uses_given_logger():
    """Test that failures are reported through the caller's logger."""
    log = MagicMock()
    with patch("udp_node.transport.resolve", side_effect=ResolutionFailed("nope")):
        transmit(3490, AddressFamily.IPV4, "x", "hi", log=log)
    
    log.error.assert_called_once()
