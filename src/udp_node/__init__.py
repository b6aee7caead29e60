"""Minimal UDP messaging endpoint with a buffered background receiver."""
from .datagram_queue import DatagramQueue
from .endpoint import DatagramEndpoint, EndpointState
from .errors import (
    ErrorCode, UDPNodeError, ResolutionFailed, SocketCreateFailed, BindFailed,
    ReceiveFailed, SendFailed, ParseError, ParseTimeFailed, ParseMessageFailed,
    ParseChecksumFailed, EmptyQueue, ChecksumMismatch, error_message, raise_for_code,
)
from .metrics import EndpointMetrics
from .protocol import WireDatagram, decode, encode, is_valid, xor_fold
from .receiver import ReceiveLoop
from .resolver import AddressFamily, resolve
from .transport import transmit

__version__ = "0.1.0"

__all__ = [
    'AddressFamily', 'BindFailed', 'ChecksumMismatch', 'DatagramEndpoint',
    'DatagramQueue', 'EmptyQueue', 'EndpointMetrics', 'EndpointState',
    'ErrorCode', 'ParseChecksumFailed', 'ParseError', 'ParseMessageFailed',
    'ParseTimeFailed', 'ReceiveFailed', 'ReceiveLoop', 'ResolutionFailed',
    'SendFailed', 'SocketCreateFailed', 'UDPNodeError', 'WireDatagram',
    'decode', 'encode', 'error_message', 'is_valid', 'raise_for_code', 'resolve',
    'transmit', 'xor_fold',
]
