"""Address resolution shared by bind and send."""
import socket
from enum import IntEnum
from typing import List, Optional
from .errors import ResolutionFailed


class AddressFamily(IntEnum):
    """IP version used for a socket."""
    IPV4 = socket.AF_INET
    IPV6 = socket.AF_INET6

    @classmethod
    def parse(cls, value) -> "AddressFamily":
        """Accept an AddressFamily, a socket constant or 'ipv4'/'ipv6'/'4'/'6'."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            return cls(value)
        name = str(value).strip().lower()
        if name in ('ipv4', 'inet', '4'):
            return cls.IPV4
        if name in ('ipv6', 'inet6', '6'):
            return cls.IPV6
        raise ValueError(f"Unknown address family: {value!r}")


def loopback_host(family: AddressFamily) -> str:
    """Loopback address for the given family."""
    return '::1' if AddressFamily.parse(family) == AddressFamily.IPV6 else '127.0.0.1'


def resolve(host: Optional[str], port: int, family, passive: bool = False) -> List[tuple]:
    """
    Resolve a host/port pair into candidate UDP addresses.

    Candidates are returned in the order getaddrinfo yields them; callers
    try each in turn and keep the first one that works.

    Args:
        host: Hostname or IP literal. None with passive=True means the wildcard address
        port: Port number
        family: AddressFamily (or anything AddressFamily.parse accepts)
        passive: Resolve an address suitable for bind()

    Returns:
        List of (family, type, proto, canonname, sockaddr) tuples

    Raises:
        ResolutionFailed: If resolution errors or yields nothing
    """
    family = AddressFamily.parse(family)
    flags = socket.AI_PASSIVE if passive else 0
    try:
        candidates = socket.getaddrinfo(host, port, family, socket.SOCK_DGRAM, 0, flags)
    except (socket.gaierror, UnicodeError) as e:
        raise ResolutionFailed(f"Could not resolve {host}:{port}: {e}") from e

    if not candidates:
        raise ResolutionFailed(f"No addresses found for {host}:{port}")
    return candidates
