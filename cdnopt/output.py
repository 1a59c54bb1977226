"""Output: rewritten link lines, the links file, and console renderers."""

import json
import logging
import sys
from io import StringIO
from pathlib import Path

from rich.console import Console
from rich.table import Table

from cdnopt.links import generate_node_link
from cdnopt.models import NodeLink, OptimizeRun, ProbeOutcome

logger = logging.getLogger(__name__)


def format_line(link: NodeLink, outcome: ProbeOutcome) -> str:
    """Return the rewritten link for *outcome* annotated with its latency."""
    return (
        f"{generate_node_link(link, outcome.ip)} "
        f"(Latency: {outcome.latency_ms:.2f}ms)"
    )


def write_links(run: OptimizeRun, path: Path | str) -> int:
    """Write one annotated link per outcome to *path*, fastest first.

    The file is always (re)created, so a run with no reachable candidates
    leaves an empty file behind.

    Returns:
        The number of lines written.

    Raises:
        OSError: If *path* cannot be written.
    """
    p = Path(path).expanduser()
    lines = [format_line(run.link, o) for o in run.outcomes]
    with p.open("w", encoding="utf-8") as fh:
        for line in lines:
            fh.write(line + "\n")
    logger.debug("Wrote %d link(s) to %s", len(lines), p)
    return len(lines)


def render(
    run: OptimizeRun,
    fmt: str,
    *,
    file: object | None = None,
    width: int | None = None,
) -> None:
    """Dispatch output to the appropriate formatter.

    Args:
        run: Finished optimisation run.
        fmt: Output format: ``"plain"``, ``"table"`` or ``"json"``.
        file: Writable file object for output (default: ``sys.stdout``).
        width: Explicit console width (default: auto-detect).

    Raises:
        ValueError: If *fmt* is not a known format.
    """
    if fmt == "plain":
        render_plain(run, file=file)
    elif fmt == "table":
        render_table(run, file=file, width=width)
    elif fmt == "json":
        render_json(run, file=file)
    else:
        raise ValueError(f"Unknown output format: {fmt!r}")


# ---------------------------------------------------------------------------
# Plain formatter
# ---------------------------------------------------------------------------


def render_plain(run: OptimizeRun, *, file: object | None = None) -> None:
    """Print the same lines that go into the links file."""
    out = file or sys.stdout
    for outcome in run.outcomes:
        out.write(format_line(run.link, outcome) + "\n")  # type: ignore[union-attr]


# ---------------------------------------------------------------------------
# Table (rich) formatter
# ---------------------------------------------------------------------------


def render_table(
    run: OptimizeRun,
    *,
    file: object | None = None,
    width: int | None = None,
) -> None:
    """Render the ranked candidates as a ``rich`` table plus a summary line."""
    out = file or sys.stdout
    console = Console(file=out, highlight=False, width=width)

    title = f"{run.link.scheme} :{run.link.port}"
    if run.link.label:
        title = f"{run.link.label} ({title})"
    table = Table(title=title)
    table.add_column("#", justify="right")
    table.add_column("IP")
    table.add_column("Latency (ms)", justify="right")
    table.add_column("Link", overflow="fold")

    for rank, outcome in enumerate(run.outcomes, start=1):
        table.add_row(
            str(rank),
            outcome.ip,
            f"{outcome.latency_ms:.2f}",
            generate_node_link(run.link, outcome.ip),
        )

    console.print(table)
    console.print(
        f"  {len(run.outcomes)} of {run.candidate_count} candidates kept, "
        f"probed in {run.duration_seconds:.2f}s"
    )


# ---------------------------------------------------------------------------
# JSON formatter
# ---------------------------------------------------------------------------


def render_json(run: OptimizeRun, *, file: object | None = None) -> None:
    """Render *run* as a JSON document to *file*."""
    out = file or sys.stdout
    json.dump(_run_to_dict(run), out, indent=2, default=str)
    out.write("\n")  # type: ignore[union-attr]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run_to_dict(run: OptimizeRun) -> dict:
    """Convert an ``OptimizeRun`` to a plain dict."""
    return {
        "scheme": run.link.scheme,
        "port": run.link.port,
        "label": run.link.label,
        "params": run.link.params_dict(),
        "timestamp": run.timestamp,
        "timeout_ms": round(run.timeout * 1000),
        "candidate_count": run.candidate_count,
        "duration_seconds": run.duration_seconds,
        "results": [
            {
                "ip": o.ip,
                "latency_ms": round(o.latency_ms, 3),
                "link": generate_node_link(run.link, o.ip),
            }
            for o in run.outcomes
        ],
    }


def render_to_string(run: OptimizeRun, fmt: str, *, width: int = 200) -> str:
    """Render to a string instead of stdout, useful for testing."""
    buf = StringIO()
    render(run, fmt, file=buf, width=width)
    return buf.getvalue()
