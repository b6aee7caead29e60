"""Wire format: JSON frames carrying a message, a timestamp and a checksum."""
import json
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Tuple, Union
from .errors import (
    ChecksumMismatch, ParseTimeFailed, ParseMessageFailed, ParseChecksumFailed,
)

# Frame field names
TIME_FIELD = "Time"
MESSAGE_FIELD = "Msg"
CHECKSUM_FIELD = "CRC"
SHUTDOWN_FIELD = "Join_thr"

UINT64_MAX = 2 ** 64 - 1

Checksum = Callable[[bytes], int]


def xor_fold(data: Iterable[int]) -> int:
    """
    XOR every byte of data together.

    Values are masked to unsigned 8 bits before folding so that a byte
    given as a signed value (-1) folds the same as its unsigned form (0xFF).
    """
    result = 0
    for value in data:
        result ^= value & 0xFF
    return result


def _to_bytes(message: Union[str, bytes]) -> bytes:
    if isinstance(message, str):
        return message.encode('utf-8', 'surrogateescape')
    return bytes(message)


@dataclass(frozen=True)
class WireDatagram:
    """A decoded frame plus the address it came from."""
    source_port: int
    source_address: str
    timestamp: int
    message: bytes
    checksum: int
    shutdown_flag: bool = False

    @property
    def text(self) -> str:
        """Message decoded as UTF-8, with invalid sequences replaced."""
        return self.message.decode('utf-8', 'replace')

    def is_valid(self, checksum: Checksum = xor_fold) -> bool:
        """True if the carried checksum matches the message."""
        return checksum(self.message) == self.checksum

    def verify(self, checksum: Checksum = xor_fold) -> "WireDatagram":
        """Return self, or raise ChecksumMismatch if the checksum is wrong."""
        if not self.is_valid(checksum):
            raise ChecksumMismatch(
                f"Checksum {self.checksum} does not match message ({checksum(self.message)})"
            )
        return self


def is_valid(datagram: WireDatagram, checksum: Checksum = xor_fold) -> bool:
    return datagram.is_valid(checksum)


def encode(message: Union[str, bytes], shutdown_flag: bool = False, *,
           checksum: Checksum = xor_fold, timestamp: Optional[int] = None) -> bytes:
    """
    Build a frame for message.

    Args:
        message: Text or raw bytes. Bytes that are not valid UTF-8 are carried
            as surrogate escapes and restored by decode()
        shutdown_flag: Mark the frame as a shutdown sentinel
        checksum: Checksum function applied to the message bytes
        timestamp: Seconds since the epoch, defaults to now

    Returns:
        The frame as compact JSON bytes
    """
    payload = _to_bytes(message)
    frame = {
        TIME_FIELD: int(time.time()) if timestamp is None else int(timestamp),
        MESSAGE_FIELD: payload.decode('utf-8', 'surrogateescape'),
        CHECKSUM_FIELD: checksum(payload),
    }
    if shutdown_flag:
        frame[SHUTDOWN_FIELD] = True
    return json.dumps(frame, separators=(',', ':')).encode('ascii')


def _is_uint(value, limit: Optional[int] = None) -> bool:
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return value >= 0 and (limit is None or value <= limit)


def decode(buffer: bytes, source: Tuple = ("", 0)) -> WireDatagram:
    """
    Parse a received frame.

    Time, Msg and CRC are required and are checked in that order. A buffer
    that is not a JSON object has none of them and fails on Time.

    Args:
        buffer: Raw datagram contents
        source: Sender address as returned by recvfrom()

    Returns:
        The decoded WireDatagram. Its checksum is not verified here

    Raises:
        ParseTimeFailed, ParseMessageFailed, ParseChecksumFailed
    """
    try:
        frame = json.loads(bytes(buffer).decode('utf-8', 'surrogateescape'))
    except (ValueError, RecursionError):
        frame = None
    if not isinstance(frame, dict):
        raise ParseTimeFailed("Frame is not a JSON object")

    timestamp = frame.get(TIME_FIELD)
    if not _is_uint(timestamp, UINT64_MAX):
        raise ParseTimeFailed()

    message = frame.get(MESSAGE_FIELD)
    if not isinstance(message, str):
        raise ParseMessageFailed()
    try:
        payload = message.encode('utf-8', 'surrogateescape')
    except UnicodeEncodeError as e:
        raise ParseMessageFailed(f"Message is not encodable: {e}") from e

    crc = frame.get(CHECKSUM_FIELD)
    if not _is_uint(crc):
        raise ParseChecksumFailed()

    return WireDatagram(
        source_port=int(source[1]),
        source_address=str(source[0]),
        timestamp=timestamp,
        message=payload,
        checksum=crc,
        shutdown_flag=frame.get(SHUTDOWN_FIELD) is True,
    )
