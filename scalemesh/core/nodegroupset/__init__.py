"""
Similarity detection and scale-up balancing for node group sets.
"""

from __future__ import annotations

from .balancing import InvalidNodeGroupError, balance_scale_up_between_groups
from .comparator import (
    CallableComparator,
    DefaultNodeComparator,
    NodeInfoComparator,
    available_comparators,
    create_comparator,
    register_comparator,
    unregister_comparator,
)
from .processor import (
    BalancingNodeGroupSetProcessor,
    NodeGroupSetProcessor,
    NoOpNodeGroupSetProcessor,
    new_default_processor,
    partition_similar_node_groups,
)

__all__ = [
    "BalancingNodeGroupSetProcessor",
    "CallableComparator",
    "DefaultNodeComparator",
    "InvalidNodeGroupError",
    "NoOpNodeGroupSetProcessor",
    "NodeGroupSetProcessor",
    "NodeInfoComparator",
    "available_comparators",
    "balance_scale_up_between_groups",
    "create_comparator",
    "new_default_processor",
    "partition_similar_node_groups",
    "register_comparator",
    "unregister_comparator",
]
