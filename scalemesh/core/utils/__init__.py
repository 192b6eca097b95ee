"""Utility helpers for ScaleMesh."""

from .logging import configure_runtime_logging, demote_ray_logging, install_stdout_logger, resolve_log_level  # noqa: F401
from .render import describe_plan, describe_similar  # noqa: F401

__all__ = [
    "configure_runtime_logging",
    "demote_ray_logging",
    "describe_plan",
    "describe_similar",
    "install_stdout_logger",
    "resolve_log_level",
]
