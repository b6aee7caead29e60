"""Error codes and exceptions for udp-node."""
from enum import IntEnum


class ErrorCode(IntEnum):
    """Result codes shared by the endpoint, the codec and the transmitter."""
    SUCCESS = 0
    SOCKET_CREATE_FAILED = -1
    BIND_FAILED = -2
    RECEIVE_FAILED = -3
    SEND_FAILED = -4
    RESOLUTION_FAILED = -5
    PARSE_TIME_FAILED = -6
    PARSE_MESSAGE_FAILED = -7
    PARSE_CHECKSUM_FAILED = -8
    EMPTY_QUEUE = -9
    CHECKSUM_MISMATCH = -10


_MESSAGES = {
    ErrorCode.SUCCESS: "Success!",
    ErrorCode.SOCKET_CREATE_FAILED: "Socket creation failed",
    ErrorCode.BIND_FAILED: "Bind failed",
    ErrorCode.RECEIVE_FAILED: "Receiving from socket failed",
    ErrorCode.SEND_FAILED: "Sending to socket failed",
    ErrorCode.RESOLUTION_FAILED: "Address resolution failed",
    ErrorCode.PARSE_TIME_FAILED: "Parsing time from frame failed",
    ErrorCode.PARSE_MESSAGE_FAILED: "Parsing message from frame failed",
    ErrorCode.PARSE_CHECKSUM_FAILED: "Parsing checksum from frame failed",
    ErrorCode.EMPTY_QUEUE: "Receive queue is empty",
    ErrorCode.CHECKSUM_MISMATCH: "Checksum does not match message",
}


def error_message(code) -> str:
    """
    Return a human readable description of an error code.
    
    Args:
        code: An ErrorCode or its integer value
        
    Returns:
        The description, or "Invalid error code" for unknown values
    """
    try:
        return _MESSAGES[ErrorCode(code)]
    except (ValueError, KeyError):
        return "Invalid error code"


class UDPNodeError(Exception):
    """Base class for udp-node errors. Carries the matching ErrorCode."""
    code = None

    def __init__(self, message: str = None):
        super().__init__(message or error_message(self.code))


class ResolutionFailed(UDPNodeError):
    code = ErrorCode.RESOLUTION_FAILED


class SocketCreateFailed(UDPNodeError):
    code = ErrorCode.SOCKET_CREATE_FAILED


class BindFailed(UDPNodeError):
    code = ErrorCode.BIND_FAILED


class ReceiveFailed(UDPNodeError):
    code = ErrorCode.RECEIVE_FAILED


class SendFailed(UDPNodeError):
    code = ErrorCode.SEND_FAILED


class ParseError(UDPNodeError):
    """A received frame is missing a required field."""


class ParseTimeFailed(ParseError):
    code = ErrorCode.PARSE_TIME_FAILED


class ParseMessageFailed(ParseError):
    code = ErrorCode.PARSE_MESSAGE_FAILED


class ParseChecksumFailed(ParseError):
    code = ErrorCode.PARSE_CHECKSUM_FAILED


class EmptyQueue(UDPNodeError):
    code = ErrorCode.EMPTY_QUEUE


class ChecksumMismatch(UDPNodeError):
    code = ErrorCode.CHECKSUM_MISMATCH


_EXCEPTIONS = {cls.code: cls for cls in (
    ResolutionFailed, SocketCreateFailed, BindFailed, ReceiveFailed, SendFailed,
    ParseTimeFailed, ParseMessageFailed, ParseChecksumFailed, EmptyQueue,
    ChecksumMismatch,
)}


def raise_for_code(code):
    """
    Raise the exception matching code, or return quietly for SUCCESS.
    
    Lets callers of the code-returning send path opt into exceptions:
        raise_for_code(node.send(3490, AddressFamily.IPV6, "::1", "hello"))
    """
    code = ErrorCode(code)
    if code == ErrorCode.SUCCESS:
        return
    raise _EXCEPTIONS[code]()
