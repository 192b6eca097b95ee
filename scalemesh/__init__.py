"""
ScaleMesh package skeleton.

This module exposes high-level entry points while keeping heavy dependencies
lazy-imported so packaging tools do not require Ray during metadata builds.
"""

from __future__ import annotations

from importlib import import_module
from importlib.metadata import PackageNotFoundError, version

__all__ = [
    "BalancingNodeGroupSetProcessor",
    "NodeGroup",
    "NodeTemplate",
    "RayBalancer",
    "ScaleUpInfo",
    "Taint",
    "new_default_processor",
    "__version__",
]


try:
    __version__ = version("scalemesh-core")
except PackageNotFoundError:
    from scalemesh._version import __version__


_LAZY_TARGETS = {
    "BalancingNodeGroupSetProcessor": ("scalemesh.core.nodegroupset", "BalancingNodeGroupSetProcessor"),
    "NodeGroup": ("scalemesh.core.entities", "NodeGroup"),
    "NodeTemplate": ("scalemesh.core.entities", "NodeTemplate"),
    "RayBalancer": ("scalemesh.core.controllers", "RayBalancer"),
    "ScaleUpInfo": ("scalemesh.core.entities", "ScaleUpInfo"),
    "Taint": ("scalemesh.core.entities", "Taint"),
    "new_default_processor": ("scalemesh.core.nodegroupset", "new_default_processor"),
}


def __getattr__(name: str):
    """Dynamically load public symbols to avoid importing optional deps early."""
    target = _LAZY_TARGETS.get(name)
    if target is None:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")

    module_name, attribute = target
    module = import_module(module_name)
    value = getattr(module, attribute)
    globals()[name] = value  # cache for subsequent lookups
    return value
