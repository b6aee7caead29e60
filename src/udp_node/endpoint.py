"""UDP endpoint: a bound socket, its receive loop and the datagram queue."""
import logging
import socket
import threading
from enum import Enum
from typing import Optional, Union
from .config import logger
from .datagram_queue import DatagramQueue
from .errors import (
    BindFailed, ErrorCode, SocketCreateFailed, UDPNodeError, error_message,
)
from .metrics import EndpointMetrics
from .protocol import Checksum, WireDatagram, xor_fold
from .receiver import ReceiveLoop
from .resolver import AddressFamily, loopback_host, resolve
from .transport import transmit

SHUTDOWN_MESSAGE = "Goodbye"


class EndpointState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPING = "stopping"


def bind_socket(port: int, family: AddressFamily, log: logging.Logger = logger) -> socket.socket:
    """
    Create a UDP socket bound to the wildcard address on port.

    Candidates are tried in order. A socket that fails to bind is closed
    before the next candidate is tried.

    Raises:
        ResolutionFailed, SocketCreateFailed or BindFailed, whichever
        happened last
    """
    candidates = resolve(None, port, family, passive=True)
    last_error: Optional[UDPNodeError] = None

    for af, socktype, proto, _, addr in candidates:
        try:
            sock = socket.socket(af, socktype, proto)
        except OSError as e:
            last_error = SocketCreateFailed(f"Socket creation failed for {addr}: {e}")
            continue
        try:
            sock.bind(addr)
        except OSError as e:
            sock.close()
            last_error = BindFailed(f"Bind to {addr} failed: {e}")
            continue
        return sock

    log.error(str(last_error))
    raise last_error


class DatagramEndpoint:
    """
    A UDP socket listening on a local port, with a background receive loop
    buffering valid frames for callers to drain.

    Construction binds the socket and raises if that is impossible; nothing
    is received until start() is called.

    Example:
        with DatagramEndpoint(3490, AddressFamily.IPV6, max_queue_size=5) as node:
            node.start()
            ...
            while (datagram := node.try_pop()) is not None:
                print(datagram.text)
    """

    def __init__(
        self,
        port: int,
        family: Union[AddressFamily, str, int] = AddressFamily.IPV4,
        max_message_size: int = 1024,
        max_queue_size: int = 100,
        debug: bool = False,
        checksum: Checksum = xor_fold,
    ):
        """
        Bind the listening socket.

        Args:
            port: Local port, 0 for an ephemeral one
            family: IP version to listen on
            max_message_size: Receive buffer size; frames must be shorter
            max_queue_size: Maximum number of buffered datagrams
            debug: Trace the receive loop at DEBUG level
            checksum: Checksum function used to validate frames

        Raises:
            ResolutionFailed, SocketCreateFailed, BindFailed
        """
        if max_message_size < 2:
            raise ValueError("max_message_size must be at least 2")
        self.family = AddressFamily.parse(family)
        self.max_message_size = max_message_size
        self.debug = debug
        self.checksum = checksum
        self.queue = DatagramQueue(max_queue_size)
        self.metrics = EndpointMetrics()
        self.log = self._child_logger(port)

        self._state = EndpointState.IDLE
        self._lifecycle_lock = threading.Lock()
        self._loop: Optional[ReceiveLoop] = None
        self._sock: Optional[socket.socket] = None

        self._requested_port = port
        self.port = port
        self._bind()

    # --- Lifecycle ---

    @property
    def state(self) -> EndpointState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == EndpointState.RUNNING

    @property
    def last_error(self) -> Optional[ErrorCode]:
        """Error that ended the most recent receive loop, if any."""
        return self._loop.error if self._loop else None

    def _child_logger(self, port: int) -> logging.Logger:
        log = logger.getChild(str(port))
        log.setLevel(logging.DEBUG if self.debug else logging.NOTSET)
        return log

    def _bind(self):
        # Rebind to the port we actually got so a restart keeps the address
        self._sock = bind_socket(self.port, self.family, self.log)
        self.port = self._sock.getsockname()[1]
        if self._requested_port == 0:
            self.log = self._child_logger(self.port)
        self.log.info(f"listening on port: {self.port} ({self.family.name})...")

    def start(self):
        """Launch the receive loop. Does nothing if it is already running."""
        with self._lifecycle_lock:
            if self._state != EndpointState.IDLE:
                return
            if self._sock is None:
                self._bind()
            self._loop = ReceiveLoop(
                self._sock,
                self.queue,
                max_message_size=self.max_message_size,
                checksum=self.checksum,
                metrics=self.metrics,
                debug=self.debug,
                log=self.log,
            )
            self._loop.start()
            self._state = EndpointState.RUNNING

    def stop(self):
        """
        Stop the receive loop, wait for it to exit and close the socket.

        The loop is blocked in recvfrom(), so after raising the stop flag a
        shutdown frame is sent to our own port to wake it up. Does nothing if
        the endpoint is idle.
        """
        with self._lifecycle_lock:
            if self._state != EndpointState.RUNNING:
                return
            self._state = EndpointState.STOPPING
            try:
                self._loop.request_stop()
                if self._loop.is_alive():
                    self._wake_loop()
                self._loop.join()
            finally:
                self._close_socket()
                self._state = EndpointState.IDLE
        self.log.debug("receive loop stopped")

    def _wake_loop(self):
        rv = transmit(
            self.port, self.family, loopback_host(self.family), SHUTDOWN_MESSAGE,
            shutdown_flag=True, checksum=self.checksum, log=self.log,
        )
        if rv != ErrorCode.SUCCESS:
            # No sentinel, so force recvfrom() to return instead
            self.log.warning(f"Shutdown frame not sent ({error_message(rv)}), shutting socket down")
            try:
                self._sock.shutdown(socket.SHUT_RDWR)
            except OSError as e:
                self.log.debug(f"socket shutdown: {e}")

    def _close_socket(self):
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def close(self):
        """Stop receiving and release the socket. Safe to call repeatedly."""
        self.stop()
        with self._lifecycle_lock:
            if self._sock is not None:
                self.log.info("closing listening socket...")
            self._close_socket()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    # --- Sending ---

    def send(self, dest_port: int, family, host: str, message: Union[str, bytes],
             shutdown_flag: bool = False) -> ErrorCode:
        """Send one framed message. See transport.transmit()."""
        rv = transmit(
            dest_port, family, host, message, shutdown_flag,
            checksum=self.checksum, log=self.log,
        )
        self.metrics.record_send(rv == ErrorCode.SUCCESS)
        return rv

    # --- Queue access ---

    def has_data(self) -> bool:
        return self.queue.has_data()

    def size(self) -> int:
        return self.queue.size()

    def pop(self) -> WireDatagram:
        """Oldest buffered datagram. Raises EmptyQueue if there is none."""
        return self.queue.pop()

    def try_pop(self) -> Optional[WireDatagram]:
        """Oldest buffered datagram, or None."""
        return self.queue.try_pop()

    @staticmethod
    def error_message(code) -> str:
        return error_message(code)

    def __repr__(self):
        return (
            f"DatagramEndpoint(port={self.port}, family={self.family.name}, "
            f"state={self._state.value}, queued={self.queue.size()})"
        )
