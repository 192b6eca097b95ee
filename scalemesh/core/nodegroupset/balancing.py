"""
Distribute new nodes across similar node groups.

The allocation is water-filling: a common level is raised over all groups,
each group capped at its own ``max_size``, until the requested number of
nodes has been absorbed. This minimises the largest resulting group and keeps
the spread between groups that grew at most one node.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from scalemesh.core.entities.node_group import NodeGroup, ScaleUpInfo

logger = logging.getLogger(__name__)


class InvalidNodeGroupError(ValueError):
    """Raised when the balancer receives structurally invalid input."""


def _validate(groups: Sequence[NodeGroup], total_to_add: int) -> None:
    if isinstance(total_to_add, bool) or not isinstance(total_to_add, int):
        raise InvalidNodeGroupError(f"Number of nodes to add must be an integer, got {total_to_add!r}")
    for index, group in enumerate(groups):
        if group is None:
            raise InvalidNodeGroupError(f"Node group at position {index} is None")


def _absorbed_at_level(groups: Sequence[NodeGroup], level: int) -> int:
    """Nodes needed to lift every group to ``level`` (capped at its max)."""
    return sum(max(0, min(level, group.max_size) - group.target_size) for group in groups)


def _find_level(groups: Sequence[NodeGroup], total_to_add: int) -> int:
    """Smallest integer level whose absorbed amount reaches ``total_to_add``."""
    low = min(group.target_size for group in groups)
    high = max(group.max_size for group in groups)
    # Invariant: absorbed(low) < total_to_add <= absorbed(high)
    while high - low > 1:
        middle = (low + high) // 2
        if _absorbed_at_level(groups, middle) >= total_to_add:
            high = middle
        else:
            low = middle
    return high


def balance_scale_up_between_groups(groups: Iterable[NodeGroup], total_to_add: int) -> List[ScaleUpInfo]:
    """
    Split ``total_to_add`` new nodes between ``groups``.

    Groups already at or above their ``max_size`` are ignored. When the
    request exceeds the remaining capacity every group is raised to its
    maximum and the surplus is dropped. The returned plan lists only groups
    that grow, in input order.

    When a remainder unit can go to several groups at the same level, which
    one receives it is not part of the contract.

    Raises:
        InvalidNodeGroupError: if a group is ``None`` or ``total_to_add`` is
            not an integer.
    """
    groups = list(groups)
    _validate(groups, total_to_add)

    candidates = [group for group in groups if not group.is_saturated()]
    if not candidates or total_to_add <= 0:
        logger.debug(
            "Nothing to balance: %d/%d groups with room, total_to_add=%s",
            len(candidates),
            len(groups),
            total_to_add,
        )
        return []

    capacity = sum(group.remaining_capacity for group in candidates)
    if total_to_add >= capacity:
        if total_to_add > capacity:
            logger.info(
                "Requested %d nodes but only %d fit in %d groups, capping every group at its max",
                total_to_add,
                capacity,
                len(candidates),
            )
        new_sizes = [group.max_size for group in candidates]
    else:
        level = _find_level(candidates, total_to_add)
        base = level - 1
        new_sizes = [max(group.target_size, min(base, group.max_size)) for group in candidates]
        remainder = total_to_add - _absorbed_at_level(candidates, base)
        for index, group in enumerate(candidates):
            if remainder == 0:
                break
            if new_sizes[index] == base and base < group.max_size:
                new_sizes[index] += 1
                remainder -= 1
        logger.debug("Water level %d reached for %d nodes across %d groups", level, total_to_add, len(candidates))

    plan = [
        ScaleUpInfo(group=group, current_size=group.target_size, new_size=size, max_size=group.max_size)
        for group, size in zip(candidates, new_sizes)
        if size > group.target_size
    ]
    logger.debug("Balanced scale-up plan: %s", plan)
    return plan
