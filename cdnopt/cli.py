"""CLI entry point for the cdnopt tool."""

import logging
import sys
import time
from typing import NoReturn

import click

from cdnopt.candidates import CandidateError, load_candidates
from cdnopt.config import OUTPUT_FORMATS, ConfigError, OptimizerConfig, load_config
from cdnopt.engine import probe
from cdnopt.links import LinkError, parse_node_link
from cdnopt.models import OptimizeRun
from cdnopt.output import render, write_links

logger = logging.getLogger(__name__)


@click.command()
@click.argument("node_link")
@click.argument("ip_list_file")
@click.argument("timeout_ms", required=False, type=int)
@click.option(
    "--output",
    "-o",
    "output_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="File to write the optimized links to (default: optimized_nodes.txt).",
)
@click.option(
    "--top",
    "-t",
    "top_n",
    default=None,
    type=click.IntRange(min=1),
    help="Number of fastest candidates to keep (default: 10).",
)
@click.option(
    "--workers",
    "-w",
    "max_workers",
    default=None,
    type=click.IntRange(min=1),
    help="Maximum concurrent connection attempts (default: 128).",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    default=None,
    type=click.Choice(OUTPUT_FORMATS, case_sensitive=False),
    help="Console output format (default: plain).",
)
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Fail on address lines that are not IP addresses instead of skipping them.",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    default=None,
    type=click.Path(exists=False),
    help="Path to YAML config file (default: ~/.cdnopt/config.yaml).",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Debug logging.")
def main(
    node_link: str,
    ip_list_file: str,
    timeout_ms: int | None,
    output_path: str | None,
    top_n: int | None,
    max_workers: int | None,
    output_format: str | None,
    strict: bool,
    config_path: str | None,
    verbose: bool,
) -> None:
    """Rank the IPs in IP_LIST_FILE by TCP connect latency for NODE_LINK.

    TIMEOUT_MS is the per-candidate connect timeout in milliseconds.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    try:
        cfg = load_config(config_path)
    except (ConfigError, FileNotFoundError) as exc:
        _fail(exc)

    _apply_overrides(
        cfg,
        timeout_ms=timeout_ms,
        output_path=output_path,
        top_n=top_n,
        max_workers=max_workers,
        output_format=output_format,
    )
    logger.debug("Config: %s", cfg)

    if cfg.timeout_ms <= 0:
        _fail(f"Invalid timeout: {cfg.timeout_ms} ms (must be positive)")

    try:
        link = parse_node_link(node_link)
    except LinkError as exc:
        _fail(f"Cannot parse node link: {exc}")

    try:
        candidates = load_candidates(ip_list_file, strict=strict)
    except CandidateError as exc:
        _fail(f"Invalid IP list {ip_list_file}: {exc}")
    except OSError as exc:
        _fail(f"Cannot open IP list file: {exc}")

    try:
        t0 = time.monotonic()
        outcomes = probe(
            candidates, link.port, cfg.timeout, max_workers=cfg.max_workers
        )
        duration = time.monotonic() - t0
    except ValueError as exc:
        _fail(exc)

    run = OptimizeRun(
        link=link,
        candidate_count=len(candidates),
        outcomes=outcomes[: cfg.top_n],
        timeout=cfg.timeout,
        duration_seconds=duration,
    )

    try:
        count = write_links(run, cfg.output_path)
    except OSError as exc:
        _fail(f"Cannot create output file: {exc}")

    render(run, cfg.output_format)

    summary = f"Generated {count} optimized node links in {cfg.output_path}"
    if cfg.output_format == "json":
        # Keep stdout a valid JSON document.
        logger.info(summary)
    else:
        click.echo(summary)


def _apply_overrides(cfg: OptimizerConfig, **overrides: object) -> None:
    """Copy every non-``None`` command-line value onto *cfg*."""
    for name, value in overrides.items():
        if value is not None:
            setattr(cfg, name, value)


def _fail(message: object) -> NoReturn:
    """Report a fatal error and exit with status 1."""
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)
