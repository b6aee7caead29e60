"""Background receive loop feeding a DatagramQueue."""
import logging
import socket
import threading
from typing import Optional
from .config import logger
from .datagram_queue import DatagramQueue
from .errors import ErrorCode, ParseError, error_message
from .metrics import EndpointMetrics
from .protocol import Checksum, decode, xor_fold


class ReceiveLoop:
    """
    Thread that blocks on recvfrom(), decodes frames and buffers the valid ones.

    The loop checks its stop flag once per iteration. Because recvfrom() cannot
    be cancelled, whoever calls request_stop() must also make the pending
    receive return, normally by sending the socket a frame with the shutdown
    flag set.
    """

    def __init__(
        self,
        sock: socket.socket,
        queue: DatagramQueue,
        max_message_size: int = 1024,
        checksum: Checksum = xor_fold,
        metrics: Optional[EndpointMetrics] = None,
        debug: bool = False,
        log: Optional[logging.Logger] = None,
    ):
        if max_message_size < 2:
            raise ValueError("max_message_size must be at least 2")
        self.sock = sock
        self.queue = queue
        self.max_message_size = max_message_size
        self.checksum = checksum
        self.metrics = metrics or EndpointMetrics()
        self.debug = debug
        self.log = log or logger
        self.error: Optional[ErrorCode] = None
        self._stop_requested = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested.is_set()

    def start(self):
        """Run the loop in a daemon thread."""
        self._thread = threading.Thread(
            target=self.run,
            name=f"udp-node-rx-{self._sockname()}",
            daemon=True,
        )
        self._thread.start()

    def request_stop(self):
        self._stop_requested.set()

    def join(self, timeout: Optional[float] = None):
        if self._thread is not None:
            self._thread.join(timeout)

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _sockname(self):
        try:
            return self.sock.getsockname()[1]
        except (OSError, IndexError, TypeError):
            return "?"

    def run(self):
        """Receive until a stop is requested or the socket fails."""
        bufsize = self.max_message_size - 1
        while not self._stop_requested.is_set():
            if self.debug:
                self.log.debug("rxloop: In loop")

            try:
                data, addr = self.sock.recvfrom(bufsize)
            except OSError as e:
                if self._stop_requested.is_set():
                    break
                self.error = ErrorCode.RECEIVE_FAILED
                self.log.error(f"rxloop: {error_message(self.error)}: {e}")
                break

            if not data:
                continue
            self.metrics.record_received()
            if self.debug:
                self._inspect(data, addr)
            try:
                self.handle(data, addr)
            except Exception as e:
                self.metrics.record_parse_drop()
                self.log.error(f"rxloop: Failed to process datagram from {addr[0]}: {e}")

        if self.debug:
            self.log.debug("rxloop: Exiting recv thread...")

    def handle(self, data: bytes, addr) -> bool:
        """
        Decode, validate and enqueue one datagram.

        Returns:
            True if the datagram was enqueued
        """
        try:
            datagram = decode(data, addr)
        except ParseError as e:
            self.metrics.record_parse_drop()
            self.log.warning(f"rxloop: {e}. Discarding datagram from {addr[0]}")
            return False

        if datagram.shutdown_flag:
            self.metrics.record_sentinel()
            self.log.debug(f"rxloop: Shutdown frame from {addr[0]}:{addr[1]}")
            return False

        if not datagram.is_valid(self.checksum):
            self.metrics.record_checksum_drop()
            self.log.warning("rxloop: Checksum invalid. Discarding...")
            return False

        if not self.queue.push(datagram):
            self.metrics.record_queue_full_drop()
            self.log.warning("rxloop: Receive queue is full. Discarding incoming datagram...")
            return False

        self.metrics.record_enqueued()
        return True

    def _inspect(self, data: bytes, addr):
        self.log.debug(f"Got datagram from: {addr[0]}:{addr[1]}")
        self.log.debug(f"Datagram is {len(data)} bytes long")
        self.log.debug(f"Datagram contents: {data!r}")
