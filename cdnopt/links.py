"""Node link parsing and host rewriting.

A node link has the shape ``scheme://credential@host:port?key=value&...#label``
(vless, trojan and friends).  Parsing is done once; every rewrite produces
a fresh string from the immutable ``NodeLink``.
"""

import logging
from urllib.parse import parse_qsl, urlencode, urlsplit

from cdnopt.models import NodeLink

logger = logging.getLogger(__name__)


class LinkError(ValueError):
    """Raised when a node link is missing its scheme, host or port."""


def parse_node_link(text: str) -> NodeLink:
    """Parse a node link string into a ``NodeLink``.

    Args:
        text: The link, e.g. ``"vless://uuid@example.com:443?type=ws#HK"``.

    Returns:
        The parsed, immutable ``NodeLink``.

    Raises:
        LinkError: If the scheme, host or port is absent or malformed.
    """
    text = text.strip()
    try:
        parts = urlsplit(text)
    except ValueError as exc:
        raise LinkError(f"Malformed node link: {text!r}") from exc

    if not parts.scheme:
        raise LinkError(f"Missing scheme in node link: {text!r}")
    if not parts.hostname:
        raise LinkError(f"Invalid host in node link: {text!r}")

    try:
        port = parts.port
    except ValueError as exc:
        raise LinkError(f"Invalid port in node link: {text!r}") from exc
    if not port:
        raise LinkError(f"Invalid port in node link: {text!r}")

    # dict() keeps the last value for repeated keys.
    params = dict(parse_qsl(parts.query, keep_blank_values=True))

    link = NodeLink(
        scheme=parts.scheme,
        credential=_userinfo(parts.netloc),
        host=parts.hostname,
        port=port,
        params=tuple(params.items()),
        label=parts.fragment,
    )
    logger.debug(
        "Parsed %s link for %s:%d (%d param(s))",
        link.scheme,
        link.host,
        link.port,
        len(link.params),
    )
    return link


def generate_node_link(link: NodeLink, host: str) -> str:
    """Render *link* as a string with its host replaced by *host*.

    Parameters are percent-encoded in their stored order and the label is
    appended verbatim.  IPv6 addresses are bracketed so the result parses
    back to the same link.
    """
    netloc_host = f"[{host}]" if ":" in host else host
    userinfo = f"{link.credential}@" if link.credential else ""

    out = f"{link.scheme}://{userinfo}{netloc_host}:{link.port}"
    if link.params:
        out += "?" + urlencode(link.params)
    if link.label:
        out += "#" + link.label
    return out


def _userinfo(netloc: str) -> str:
    """Return the raw user-info part of *netloc* (``""`` when absent)."""
    userinfo, sep, _ = netloc.rpartition("@")
    return userinfo if sep else ""
