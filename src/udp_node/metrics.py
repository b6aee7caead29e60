"""Per-endpoint traffic counters."""
import threading
import time
from dataclasses import dataclass, field
from .config import logger


@dataclass
class EndpointMetrics:
    """Tracks what an endpoint received, dropped and sent."""

    received: int = 0
    enqueued: int = 0
    dropped_parse: int = 0
    dropped_checksum: int = 0
    dropped_queue_full: int = 0
    sentinels: int = 0
    sent: int = 0
    send_failures: int = 0
    start_time: float = field(default_factory=time.time)
    last_log_time: float = field(default_factory=time.time)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def _bump(self, name: str):
        with self._lock:
            setattr(self, name, getattr(self, name) + 1)

    def record_received(self):
        """Record a datagram read from the socket."""
        self._bump('received')

    def record_enqueued(self):
        self._bump('enqueued')

    def record_parse_drop(self):
        self._bump('dropped_parse')

    def record_checksum_drop(self):
        self._bump('dropped_checksum')

    def record_queue_full_drop(self):
        self._bump('dropped_queue_full')

    def record_sentinel(self):
        self._bump('sentinels')

    def record_send(self, success: bool):
        """Record the outcome of a send."""
        self._bump('sent' if success else 'send_failures')

    @property
    def dropped(self) -> int:
        """Total datagrams discarded for any reason."""
        with self._lock:
            return self.dropped_parse + self.dropped_checksum + self.dropped_queue_full

    def _counters(self) -> dict:
        return {
            'received': self.received,
            'enqueued': self.enqueued,
            'dropped_parse': self.dropped_parse,
            'dropped_checksum': self.dropped_checksum,
            'dropped_queue_full': self.dropped_queue_full,
            'sentinels': self.sentinels,
            'sent': self.sent,
            'send_failures': self.send_failures,
        }

    def snapshot(self) -> dict:
        """Current counters as a plain dict."""
        with self._lock:
            return self._counters()

    def reset(self) -> dict:
        """Return the current counters and zero them in one step."""
        with self._lock:
            stats = self._counters()
            stats['elapsed'] = time.time() - self.last_log_time
            for name in stats:
                if name != 'elapsed':
                    setattr(self, name, 0)
            self.last_log_time = time.time()
            return stats

    def get_datagrams_per_minute(self) -> float:
        """Received datagrams per minute since the last log."""
        elapsed_minutes = (time.time() - self.last_log_time) / 60.0
        if elapsed_minutes == 0:
            return 0.0
        return self.received / elapsed_minutes

    def log_stats(self):
        """Log the interval's counters, then reset them."""
        stats = self.reset()
        elapsed_minutes = stats['elapsed'] / 60.0
        dpm = stats['received'] / elapsed_minutes if elapsed_minutes > 0 else 0.0

        logger.info("=== Endpoint Metrics ===")
        logger.info(
            f"Datagrams/min: {dpm:.1f}, "
            f"Received: {stats['received']}, Enqueued: {stats['enqueued']}, "
            f"Dropped: {stats['dropped_parse']} unparsable / "
            f"{stats['dropped_checksum']} bad checksum / "
            f"{stats['dropped_queue_full']} queue full, "
            f"Sent: {stats['sent']} ({stats['send_failures']} failed)"
        )
