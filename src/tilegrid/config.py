"""Configuration management for tilegrid.

Provides the Config dataclass, load_config() to resolve settings from CLI arguments,
environment variables and defaults, and configure_logging() to turn on the package's
loguru output.

Precedence: CLI flag > env var > default
- tile size: --tile-size / TILEGRID_TILE_SIZE / 256
- log level: --log-level / TILEGRID_LOG_LEVEL / WARNING
"""

import contextlib
import os
import sys
from dataclasses import dataclass

from loguru import logger

DEFAULT_TILE_SIZE = 256
DEFAULT_LOG_LEVEL = "WARNING"
LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


@dataclass(frozen=True)
class Config:
    """Settings shared by every projector built through get_mercator()."""

    tile_size: int = DEFAULT_TILE_SIZE
    log_level: str = DEFAULT_LOG_LEVEL


def _flag_value(args: list[str], flag: str) -> str | None:
    """Return the value following `flag` in `args`, or None if absent or dangling."""
    for i, arg in enumerate(args):
        if arg == flag and i + 1 < len(args):
            return args[i + 1]
    return None


def _parse_tile_size(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Invalid tile size: {value!r} (expected an integer)") from None


def load_config(args: list[str] | None = None) -> Config:
    """Load configuration from CLI args, environment, or defaults.

    Args:
        args: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Config instance. The tile size is only parsed here; GlobalMercator validates its range.
    """
    if args is None:
        args = sys.argv[1:]

    tile_size = _flag_value(args, "--tile-size") or os.environ.get("TILEGRID_TILE_SIZE")
    log_level = _flag_value(args, "--log-level") or os.environ.get("TILEGRID_LOG_LEVEL")

    return Config(
        tile_size=_parse_tile_size(tile_size) if tile_size else DEFAULT_TILE_SIZE,
        log_level=log_level.upper() if log_level else DEFAULT_LOG_LEVEL,
    )


CONFIG: Config | None = None


def get_config() -> Config:
    """Returns the global CONFIG instance, loading it on first use."""
    global CONFIG
    if CONFIG is None:
        CONFIG = load_config()
    return CONFIG


def configure_logging(cfg: Config | None = None, sink=None) -> int:
    """Enable tilegrid's log output at the configured level.

    Logs go to `sink` (any loguru sink, stderr by default). loguru's default
    DEBUG stderr handler is removed first so the configured level applies.
    Returns the loguru handler id, so callers can logger.remove() it again.
    """
    cfg = cfg or get_config()
    with contextlib.suppress(ValueError):  # default handler already removed
        logger.remove(0)
    logger.enable("tilegrid")
    handler_id = logger.add(sink or sys.stderr, level=cfg.log_level, format=LOG_FORMAT, filter="tilegrid")
    logger.debug(f"tilegrid logging enabled at {cfg.log_level} (tile size {cfg.tile_size})")
    return handler_id
