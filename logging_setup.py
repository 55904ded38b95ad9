from __future__ import annotations

import logging
import os
from typing import Any, Optional


def _parse_level(s: Optional[str]) -> Optional[int]:
    if not s:
        return None
    v = str(s).strip().upper()
    if not v:
        return None
    mapping = {
        "CRITICAL": logging.CRITICAL,
        "ERROR": logging.ERROR,
        "WARNING": logging.WARNING,
        "WARN": logging.WARNING,
        "INFO": logging.INFO,
        "DEBUG": logging.DEBUG,
        "NOTSET": logging.NOTSET,
    }
    return mapping.get(v)


def resolve_level(args: Any = None, *, default: int = logging.INFO) -> int:
    """Pick the log level.

    Priority (highest first):
    - env AUTOCLICK_LOG_LEVEL
    - CLI flags: --quiet / --debug (if present on args)
    - default (normally the configured logging.level)
    """
    env_level = _parse_level(os.environ.get("AUTOCLICK_LOG_LEVEL"))

    quiet = bool(getattr(args, "quiet", False)) if args is not None else False
    debug = bool(getattr(args, "debug", False)) if args is not None else False

    level = int(default)
    if quiet:
        level = logging.WARNING
    if debug:
        level = logging.DEBUG
    if env_level is not None:
        level = int(env_level)
    return level


def setup_logging(args: Any = None, *, default_level: int = logging.INFO, name: str = "autoclick") -> bool:
    """Configure python logging once. Returns False if the root logger was already configured."""

    root = logging.getLogger()
    if root.handlers:
        return False

    level = resolve_level(args, default=default_level)

    fmt = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    datefmt = "%H:%M:%S"

    logging.basicConfig(level=level, format=fmt, datefmt=datefmt)

    logging.getLogger(name).debug("logging initialized (level=%s)", logging.getLevelName(level))
    return True
