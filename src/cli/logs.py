from __future__ import annotations

import logging

from rich.logging import RichHandler

_LEVEL_ALIASES = {"WARN": "WARNING"}


def resolve_level(name: str, verbose: bool = False) -> int:
    if verbose:
        return logging.DEBUG
    key = (name or "INFO").strip().upper()
    key = _LEVEL_ALIASES.get(key, key)
    level = logging.getLevelName(key)
    return level if isinstance(level, int) else logging.INFO


def setup_logging(level_name: str = "INFO", verbose: bool = False) -> int:
    """Install a single rich handler on the root logger and set the minimum level."""
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    level = resolve_level(level_name, verbose)

    handler = RichHandler(
        rich_tracebacks=True,
        markup=False,
        show_time=True,
        show_path=verbose,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)
    return level
