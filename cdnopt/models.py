"""Data models: NodeLink, ProbeOutcome, OptimizeRun dataclasses."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime


@dataclass(frozen=True)
class NodeLink:
    """A parsed node link (endpoint template).

    Instances are immutable; ``with_host()`` returns an address-substituted
    copy instead of mutating the original.

    Attributes:
        scheme: Protocol tag (e.g. "vless", "trojan").
        credential: User-info token (UUID or password), may be empty.
        host: Host or IP address the link points at.
        port: Service port, always in ``1..65535``.
        params: Query parameters as unique ``(key, value)`` pairs.
        label: Fragment text (node name), kept verbatim; may be empty.
    """

    scheme: str
    credential: str
    host: str
    port: int
    params: tuple[tuple[str, str], ...] = ()
    label: str = ""

    def params_dict(self) -> dict[str, str]:
        """Return the parameters as a fresh ``dict``."""
        return dict(self.params)

    def with_host(self, host: str) -> "NodeLink":
        """Return a copy of this link pointing at *host*."""
        return replace(self, host=host)


@dataclass(frozen=True)
class ProbeOutcome:
    """A candidate address that accepted a TCP connection.

    Attributes:
        ip: The candidate address exactly as it was probed.
        latency: Connect time in seconds.
    """

    ip: str
    latency: float

    @property
    def latency_ms(self) -> float:
        return self.latency * 1000.0


@dataclass
class OptimizeRun:
    """Summary of one optimisation pass, consumed by the renderers.

    Attributes:
        link: The parsed node link all outcomes are rewritten from.
        candidate_count: Number of valid candidates that were probed.
        outcomes: Ranked outcomes kept after top-N truncation.
        timeout: Per-attempt timeout in seconds.
        duration_seconds: Wall-clock duration of the probing phase.
        timestamp: When the run started (UTC).
    """

    link: NodeLink
    candidate_count: int
    outcomes: list[ProbeOutcome]
    timeout: float
    duration_seconds: float = 0.0
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(UTC),
    )
