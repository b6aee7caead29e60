"""Bounded, thread-safe FIFO of received datagrams."""
import threading
from collections import deque
from typing import List, Optional
from .errors import EmptyQueue
from .protocol import WireDatagram


class DatagramQueue:
    """FIFO buffer shared by the receive loop and any number of consumers."""

    def __init__(self, max_size: int = 100):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self._items = deque()
        self._lock = threading.Lock()

    def push(self, datagram: WireDatagram) -> bool:
        """Append datagram unless the queue is full. Returns False if dropped."""
        with self._lock:
            if len(self._items) >= self.max_size:
                return False
            self._items.append(datagram)
            return True

    def has_data(self) -> bool:
        with self._lock:
            return bool(self._items)

    def size(self) -> int:
        with self._lock:
            return len(self._items)

    __len__ = size

    def pop(self) -> WireDatagram:
        """
        Remove and return the oldest datagram.

        Raises:
            EmptyQueue: If nothing is buffered
        """
        with self._lock:
            if not self._items:
                raise EmptyQueue()
            return self._items.popleft()

    def try_pop(self) -> Optional[WireDatagram]:
        """Remove and return the oldest datagram, or None if the queue is empty."""
        with self._lock:
            if not self._items:
                return None
            return self._items.popleft()

    def drain(self) -> List[WireDatagram]:
        """Remove and return every buffered datagram, oldest first."""
        with self._lock:
            items = list(self._items)
            self._items.clear()
            return items

    def clear(self):
        with self._lock:
            self._items.clear()
