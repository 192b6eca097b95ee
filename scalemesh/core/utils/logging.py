"""Logging utilities for ScaleMesh runtime components."""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional, Union


LOG_LEVEL_ENV = "SCALEMESH_LOG_LEVEL"
PACKAGE_LOGGER = "scalemesh"

_HANDLER_FLAG = "_scalemesh_stream_handler"


def resolve_log_level(level: Union[int, str, None] = None, default: int = logging.INFO) -> int:
    """
    Turn ``level`` (or ``$SCALEMESH_LOG_LEVEL`` when ``level`` is None) into a
    numeric logging level. Unknown names fall back to ``default``.
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV)
    if level is None or level == "":
        return default
    if isinstance(level, int):
        return level
    text = str(level).strip()
    if text.isdigit():
        return int(text)
    resolved = logging.getLevelName(text.upper())
    return resolved if isinstance(resolved, int) else default


def _runtime_format(actor_name: Optional[str]) -> str:
    owner = f"scalemesh[{actor_name}]" if actor_name else "scalemesh"
    return f"[%(levelname)s] {owner} %(name)s: %(message)s"


def configure_runtime_logging(
    level: Union[int, str, None] = None,
    *,
    actor_name: Optional[str] = None,
) -> logging.Logger:
    """
    Route ``scalemesh.*`` records of an actor process to stdout.

    The handler is attached to the package logger, not the root logger, so
    Ray's own handlers are left alone. Calling this again updates the level
    and actor tag of the existing handler instead of adding another one.
    """
    numeric_level = resolve_log_level(level)
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    formatter = logging.Formatter(_runtime_format(actor_name))

    handler = next((h for h in package_logger.handlers if getattr(h, _HANDLER_FLAG, False)), None)
    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
        setattr(handler, _HANDLER_FLAG, True)
        package_logger.addHandler(handler)
    handler.setFormatter(formatter)
    handler.setLevel(numeric_level)
    package_logger.setLevel(numeric_level)
    return package_logger


def install_stdout_logger(level: int = logging.INFO, *, include_timestamp: bool = True) -> None:
    """Attach a stream handler for demos / CLI scripts with optional timestamp."""
    fmt = "%(asctime)s %(levelname)s: %(message)s" if include_timestamp else "%(levelname)s: %(message)s"
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt="%H:%M:%S"))
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(level)


def demote_ray_logging(level: int = logging.ERROR) -> None:
    """Quieten Ray's own loggers in demos so that plan output stays readable."""
    for name in ("ray", "ray.ray_logger"):
        logging.getLogger(name).setLevel(level)
