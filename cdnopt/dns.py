"""Address resolution helper for the probing engine."""

import logging
import socket

logger = logging.getLogger(__name__)


def resolve_sockaddr(ip: str, port: int) -> tuple[int, tuple]:
    """Turn a literal IP and port into a connectable socket address.

    Wraps ``socket.getaddrinfo`` with ``AI_NUMERICHOST`` so that no DNS
    query is ever sent while probing; hostnames are rejected.

    Args:
        ip: IPv4 or IPv6 address literal.
        port: TCP port.

    Returns:
        ``(family, sockaddr)`` for the first stream result.  *sockaddr* is
        ``(ip, port)`` for AF_INET and ``(ip, port, flow, scope)`` for
        AF_INET6.

    Raises:
        socket.gaierror: If *ip* is not a literal address or resolution
            returns nothing.
    """
    results = socket.getaddrinfo(
        ip,
        port,
        family=socket.AF_UNSPEC,
        type=socket.SOCK_STREAM,
        flags=socket.AI_NUMERICHOST,
    )
    if not results:
        raise socket.gaierror(socket.EAI_NONAME, f"No address for {ip}")

    family, _type, _proto, _canonname, sockaddr = results[0]
    logger.debug("Resolved %s:%d → %s", ip, port, sockaddr)
    return family, sockaddr
