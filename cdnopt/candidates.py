"""Candidate address list: text lines to validated IP literals."""

import ipaddress
import logging
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)


class CandidateError(ValueError):
    """Raised in strict mode when the address list has invalid lines."""


def parse_candidates(lines: Iterable[str], *, strict: bool = False) -> list[str]:
    """Extract valid IP addresses from *lines*.

    Each line is stripped and kept only if it is an IPv4 or IPv6 literal.
    Blank lines are ignored; other invalid lines are dropped silently
    unless *strict* is set.  Duplicates keep their first position.

    Args:
        lines: Text lines, one candidate per line.
        strict: Raise instead of skipping invalid lines.

    Returns:
        Candidate addresses in input order, stripped of whitespace.

    Raises:
        CandidateError: If *strict* and at least one non-blank line is not
            an IP address.
    """
    seen: set[str] = set()
    out: list[str] = []
    rejected: list[int] = []

    for lineno, line in enumerate(lines, start=1):
        text = line.strip()
        if not text:
            continue
        try:
            ipaddress.ip_address(text)
        except ValueError:
            rejected.append(lineno)
            continue
        if text not in seen:
            seen.add(text)
            out.append(text)

    if rejected:
        if strict:
            shown = ", ".join(str(n) for n in rejected[:10])
            more = f" (+{len(rejected) - 10} more)" if len(rejected) > 10 else ""
            raise CandidateError(
                f"{len(rejected)} invalid address line(s): {shown}{more}"
            )
        logger.debug("Skipped %d invalid address line(s)", len(rejected))

    return out


def load_candidates(path: Path | str, *, strict: bool = False) -> list[str]:
    """Read a candidate list file and return its valid addresses.

    Raises:
        OSError: If the file cannot be read.
        CandidateError: See ``parse_candidates``.
    """
    p = Path(path).expanduser()
    logger.debug("Loading candidates from %s", p)
    text = p.read_text(encoding="utf-8")
    candidates = parse_candidates(text.splitlines(), strict=strict)
    logger.info("Loaded %d candidate address(es) from %s", len(candidates), p)
    return candidates
