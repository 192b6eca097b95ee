"""
Actor implementations that host the balancing core in the cluster.
"""

from .config import ActorConfig  # noqa: F401
from .autoscaler import NodeGroupSetActor, build_processor  # noqa: F401

__all__ = [
    "ActorConfig",
    "NodeGroupSetActor",
    "build_processor",
]
