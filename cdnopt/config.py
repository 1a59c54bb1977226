"""YAML configuration file loading."""

import logging
from dataclasses import dataclass
from pathlib import Path

import yaml

from cdnopt.engine import DEFAULT_MAX_WORKERS

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".cdnopt"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.yaml"
DEFAULT_OUTPUT_PATH = "optimized_nodes.txt"

OUTPUT_FORMATS = ("plain", "table", "json")


@dataclass
class OptimizerConfig:
    """Top-level configuration for the cdnopt tool.

    Every field has a default so the tool runs without a config file.
    Command-line arguments override whatever is loaded here.

    Attributes:
        timeout_ms: Per-candidate connect timeout in milliseconds.
        top_n: Number of fastest candidates written to the output.
        max_workers: Maximum number of concurrent connection attempts.
        output_path: File the rewritten links are written to.
        output_format: Console format: ``"plain"``, ``"table"`` or ``"json"``.
    """

    timeout_ms: int = 3000
    top_n: int = 10
    max_workers: int = DEFAULT_MAX_WORKERS
    output_path: str = DEFAULT_OUTPUT_PATH
    output_format: str = "plain"

    @property
    def timeout(self) -> float:
        """Timeout in seconds."""
        return self.timeout_ms / 1000.0


# Keys in the YAML file that map to OptimizerConfig fields.
_YAML_KEY_TO_FIELD: dict[str, str] = {
    "timeout_ms": "timeout_ms",
    "top_n": "top_n",
    "max_workers": "max_workers",
    "output_path": "output_path",
    "output_format": "output_format",
}

_POSITIVE_INT_FIELDS = ("timeout_ms", "top_n", "max_workers")


def load_config(path: Path | str | None = None) -> OptimizerConfig:
    """Load configuration from a YAML file.

    Args:
        path: Explicit path to a YAML config file.  If ``None``, the
            default location (``~/.cdnopt/config.yaml``) is tried.  If the
            default file doesn't exist, an ``OptimizerConfig`` with all
            defaults is returned silently.

    Returns:
        A populated ``OptimizerConfig`` instance.

    Raises:
        FileNotFoundError: If an explicit *path* was given but doesn't exist.
        ConfigError: If the file contains invalid YAML, has an unexpected
            top-level structure or holds out-of-range values.
    """
    resolved = _resolve_path(path)

    if resolved is None:
        logger.debug("No config file found; using defaults")
        return OptimizerConfig()

    logger.debug("Loading config from %s", resolved)
    text = resolved.read_text(encoding="utf-8")

    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {resolved}: {exc}") from exc

    if raw is None:
        # Empty file: treat as all-defaults.
        return OptimizerConfig()

    if not isinstance(raw, dict):
        raise ConfigError(
            f"Expected a YAML mapping at the top level in {resolved}, "
            f"got {type(raw).__name__}"
        )

    return _build_config(raw, source=resolved)


class ConfigError(Exception):
    """Raised when a configuration file is malformed or unreadable."""


# ------------------------------------------------------------------
# Internal helpers
# ------------------------------------------------------------------


def _resolve_path(path: Path | str | None) -> Path | None:
    """Return a concrete ``Path`` to read, or ``None`` if nothing to read.

    Raises:
        FileNotFoundError: If the caller supplied an explicit path that
            doesn't exist on disk.
    """
    if path is not None:
        p = Path(path).expanduser()
        if not p.is_file():
            raise FileNotFoundError(f"Config file not found: {p}")
        return p

    # Try the default location.
    default = DEFAULT_CONFIG_PATH.expanduser()
    if default.is_file():
        return default
    return None


def _build_config(raw: dict, source: Path) -> OptimizerConfig:
    """Map raw YAML dict to an ``OptimizerConfig``, ignoring unknown keys."""
    kwargs: dict[str, object] = {}

    for yaml_key, field_name in _YAML_KEY_TO_FIELD.items():
        if yaml_key in raw:
            kwargs[field_name] = raw[yaml_key]

    unknown = set(raw) - set(_YAML_KEY_TO_FIELD)
    if unknown:
        logger.warning(
            "Ignoring unknown config keys in %s: %s",
            source,
            ", ".join(sorted(unknown)),
        )

    for name in _POSITIVE_INT_FIELDS:
        value = kwargs.get(name)
        if value is None:
            continue
        # bool is an int subclass; reject it explicitly.
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ConfigError(
                f"{name} in {source} must be a positive integer, got {value!r}"
            )

    fmt = kwargs.get("output_format")
    if fmt is not None and fmt not in OUTPUT_FORMATS:
        raise ConfigError(
            f"output_format in {source} must be one of "
            f"{', '.join(OUTPUT_FORMATS)}, got {fmt!r}"
        )

    if "output_path" in kwargs:
        kwargs["output_path"] = str(kwargs["output_path"])

    return OptimizerConfig(**kwargs)
