"""One-shot datagram transmitter."""
import logging
import socket
from typing import Optional, Union
from .config import logger
from .errors import ErrorCode, ResolutionFailed
from .protocol import Checksum, encode, xor_fold
from .resolver import resolve


def transmit(
    dest_port: int,
    family,
    host: str,
    message: Union[str, bytes],
    shutdown_flag: bool = False,
    *,
    checksum: Checksum = xor_fold,
    log: Optional[logging.Logger] = None,
) -> ErrorCode:
    """
    Send a single framed message to host:dest_port.

    A fresh socket is opened for every call and closed before returning.
    Candidate addresses are tried in order; the first one a socket can be
    created for is used. Nothing is retried.

    Args:
        dest_port: Destination port
        family: AddressFamily of the destination
        host: Destination hostname or IP literal
        message: Text or bytes to send
        shutdown_flag: Mark the frame as a shutdown sentinel
        checksum: Checksum function for the frame
        log: Logger to report through, defaults to the package logger

    Returns:
        ErrorCode.SUCCESS, RESOLUTION_FAILED, SOCKET_CREATE_FAILED or SEND_FAILED
    """
    log = log or logger

    try:
        candidates = resolve(host, dest_port, family)
    except ResolutionFailed as e:
        log.error(f"tx: {e}")
        return ErrorCode.RESOLUTION_FAILED

    frame = encode(message, shutdown_flag, checksum=checksum)

    sock = None
    sockaddr = None
    for af, socktype, proto, _, addr in candidates:
        try:
            sock = socket.socket(af, socktype, proto)
        except OSError as e:
            log.debug(f"tx: socket creation failed for {addr}: {e}")
            continue
        sockaddr = addr
        break

    if sock is None:
        log.error(f"tx: failed to create socket for {host}:{dest_port}")
        return ErrorCode.SOCKET_CREATE_FAILED

    try:
        numbytes = sock.sendto(frame, sockaddr)
    except OSError as e:
        log.error(f"tx: sending to {host}:{dest_port} failed: {e}")
        return ErrorCode.SEND_FAILED
    finally:
        sock.close()

    log.debug(f"tx: sent {numbytes} bytes to {host}:{dest_port}")
    return ErrorCode.SUCCESS
