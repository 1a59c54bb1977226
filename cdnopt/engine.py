"""Probing engine: concurrent TCP connect timing and latency ranking.

Every candidate gets exactly one bounded connection attempt.  Attempts run
on a fixed-size thread pool and report successes through a shared queue;
failures are simply absent from the result.
"""

import logging
import queue
import socket
import time
from collections.abc import Iterable
from concurrent.futures import Future, ThreadPoolExecutor

from cdnopt.dns import resolve_sockaddr
from cdnopt.models import ProbeOutcome

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 3.0
DEFAULT_MAX_WORKERS = 128


def measure_latency(ip: str, port: int, timeout: float) -> float | None:
    """Time a single TCP connection attempt to ``(ip, port)``.

    The socket is closed as soon as the handshake completes.

    Args:
        ip: Literal IPv4 or IPv6 address.
        port: TCP port.
        timeout: Connect timeout in seconds.

    Returns:
        Elapsed seconds until the connection was established, or ``None``
        if the attempt was refused, unreachable, timed out or the address
        could not be resolved.
    """
    start = time.monotonic()
    try:
        family, sockaddr = resolve_sockaddr(ip, port)
        with socket.socket(family, socket.SOCK_STREAM) as sock:
            sock.settimeout(timeout)
            sock.connect(sockaddr)
            elapsed = time.monotonic() - start
    except (OSError, ValueError) as exc:
        logger.debug("Probe %s:%d failed: %s", ip, port, exc)
        return None
    return elapsed


class ProbeEngine:
    """Probe many candidates against one port and rank them by latency.

    Attributes:
        port: TCP port every candidate is probed on.
        timeout: Per-attempt connect timeout in seconds.
        max_workers: Upper bound on concurrent connection attempts.

    Raises:
        ValueError: On a port outside ``1..65535``, a non-positive timeout
            or a worker limit below one.
    """

    def __init__(
        self,
        port: int,
        timeout: float = DEFAULT_TIMEOUT,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        if not 0 < port < 65536:
            raise ValueError(f"Port out of range: {port}")
        if timeout <= 0:
            raise ValueError(f"Timeout must be positive, got {timeout}")
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.port = port
        self.timeout = timeout
        self.max_workers = max_workers

    def run(self, addresses: Iterable[str]) -> list[ProbeOutcome]:
        """Probe every address once and return the reachable ones.

        All attempts are submitted before any result is read, and the pool
        is drained completely before ranking.

        Args:
            addresses: Candidate IP address literals.  Duplicates are
                probed once.

        Returns:
            Outcomes sorted by ascending latency.  The order of exactly
            equal latencies is unspecified.
        """
        candidates = list(dict.fromkeys(addresses))
        if not candidates:
            return []

        results: queue.SimpleQueue[ProbeOutcome] = queue.SimpleQueue()
        workers = min(self.max_workers, len(candidates))
        logger.info(
            "Probing %d candidate(s) on port %d (timeout %.3fs, %d worker(s))",
            len(candidates),
            self.port,
            self.timeout,
            workers,
        )

        futures: list[Future] = []
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="cdnopt-probe"
        ) as pool:
            for ip in candidates:
                futures.append(pool.submit(self._probe_one, ip, results))

        # Surface anything other than a connection failure.
        for future in futures:
            future.result()

        outcomes: list[ProbeOutcome] = []
        while not results.empty():
            outcomes.append(results.get_nowait())
        outcomes.sort(key=lambda outcome: outcome.latency)

        logger.info(
            "%d of %d candidate(s) reachable", len(outcomes), len(candidates)
        )
        return outcomes

    def _probe_one(self, ip: str, results: queue.SimpleQueue) -> None:
        latency = measure_latency(ip, self.port, self.timeout)
        if latency is not None:
            results.put(ProbeOutcome(ip=ip, latency=latency))


def probe(
    addresses: Iterable[str],
    port: int,
    timeout: float = DEFAULT_TIMEOUT,
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> list[ProbeOutcome]:
    """Convenience wrapper around ``ProbeEngine(...).run(addresses)``."""
    return ProbeEngine(port, timeout, max_workers).run(addresses)
