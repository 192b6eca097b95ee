"""
Core package bootstrap for the ScaleMesh balancing core.

Re-exports the processor entry points so callers can simply do::

    from scalemesh.core import new_default_processor
"""

from __future__ import annotations

from scalemesh.core.nodegroupset import (
    BalancingNodeGroupSetProcessor,
    NoOpNodeGroupSetProcessor,
    new_default_processor,
    partition_similar_node_groups,
)

__all__ = [
    "BalancingNodeGroupSetProcessor",
    "NoOpNodeGroupSetProcessor",
    "new_default_processor",
    "partition_similar_node_groups",
]
