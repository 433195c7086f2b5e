"""Configuration loading for whiterose."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .utils import env_bool, env_float

try:  # pragma: no cover - Python >=3.11
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - older interpreters use the backport
    import tomli as tomllib  # type: ignore[no-redef]

logger = logging.getLogger(__name__)

CONFIG_PATH = Path.home() / ".config" / "whiterose" / "config.toml"

DEFAULT_DONE_DELAY = 1.5


@dataclass(frozen=True)
class RuntimeConfig:
    """Computed runtime configuration values."""

    verbose: bool = False
    done_delay: float = DEFAULT_DONE_DELAY
    dry_run: bool = False


def _load_file_config() -> dict[str, object]:
    if not CONFIG_PATH.exists():
        return {}
    try:
        data = tomllib.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    section = data.get("whiterose")
    if not isinstance(section, dict):
        return {}
    return section


def _file_delay(value: object) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value >= 0:
        return float(value)
    return DEFAULT_DONE_DELAY


def load_config(
    *,
    cli_verbose: Optional[bool] = None,
    cli_done_delay: Optional[float] = None,
    cli_dry_run: Optional[bool] = None,
) -> RuntimeConfig:
    """Compose runtime configuration: CLI over environment over file over defaults."""

    file_config = _load_file_config()

    file_verbose = bool(file_config.get("verbose", False))
    env_verbose = env_bool("WHITEROSE_VERBOSE", file_verbose)
    verbose = cli_verbose if cli_verbose is not None else env_verbose

    file_delay = _file_delay(file_config.get("done_delay", DEFAULT_DONE_DELAY))
    env_delay = env_float("WHITEROSE_DONE_DELAY", file_delay)
    if env_delay < 0:
        env_delay = file_delay
    done_delay = cli_done_delay if cli_done_delay is not None else env_delay

    file_dry_run = bool(file_config.get("dry_run", False))
    env_dry_run = env_bool("WHITEROSE_DRY_RUN", file_dry_run)
    dry_run = cli_dry_run if cli_dry_run is not None else env_dry_run

    return RuntimeConfig(verbose=verbose, done_delay=done_delay, dry_run=dry_run)


__all__ = ["RuntimeConfig", "load_config", "CONFIG_PATH", "DEFAULT_DONE_DELAY"]
