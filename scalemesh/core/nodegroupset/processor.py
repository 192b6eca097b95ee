"""
Node group set processors.

A processor answers two questions for the surrounding autoscaler: which node
groups are interchangeable with a given template, and how a scale-up should
be spread over a set of interchangeable groups.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from scalemesh.core.entities.node_group import NodeGroup, ScaleUpInfo
from scalemesh.core.entities.node_template import NodeTemplate
from scalemesh.core.nodegroupset.balancing import InvalidNodeGroupError, balance_scale_up_between_groups
from scalemesh.core.nodegroupset.comparator import ComparatorSpec, NodeInfoComparator, create_comparator

logger = logging.getLogger(__name__)

Candidate = Tuple[NodeGroup, Optional[NodeTemplate]]


class NodeGroupSetProcessor(ABC):
    """Base class for node group set processors."""

    @abstractmethod
    def find_similar_node_groups(
        self,
        reference: NodeTemplate,
        candidates: Sequence[Candidate],
    ) -> List[NodeGroup]:
        """Return the candidate groups interchangeable with ``reference``."""

    @abstractmethod
    def balance_scale_up_between_groups(
        self,
        groups: Iterable[NodeGroup],
        total_to_add: int,
    ) -> List[ScaleUpInfo]:
        """Split ``total_to_add`` new nodes between ``groups``."""

    def clean_up(self) -> None:
        """Release resources held by the processor (none by default)."""


class BalancingNodeGroupSetProcessor(NodeGroupSetProcessor):
    """
    Processor that matches groups with a comparator and balances scale-ups
    with water-filling.

    The comparator may be swapped for any :class:`NodeInfoComparator` or
    plain ``(a, b) -> bool`` predicate; traversal order and inclusion rules
    stay the same.
    """

    def __init__(self, comparator: ComparatorSpec = "default") -> None:
        self.comparator: NodeInfoComparator = create_comparator(comparator)

    def _is_similar(self, reference: NodeTemplate, template: NodeTemplate) -> bool:
        try:
            return bool(self.comparator.similar(reference, template))
        except Exception:
            logger.warning(
                "Comparator %r failed for %s vs %s, treating as dissimilar",
                self.comparator,
                reference.name,
                template.name,
                exc_info=True,
            )
            return False

    def find_similar_node_groups(
        self,
        reference: NodeTemplate,
        candidates: Sequence[Candidate],
    ) -> List[NodeGroup]:
        similar: List[NodeGroup] = []
        for group, template in candidates:
            if template is None:
                logger.debug("Skipping node group %s without a template", getattr(group, "id", group))
                continue
            if self._is_similar(reference, template):
                similar.append(group)
        logger.debug(
            "Found %d/%d node groups similar to %s: %s",
            len(similar),
            len(candidates),
            reference.name,
            [getattr(group, "id", group) for group in similar],
        )
        return similar

    def balance_scale_up_between_groups(
        self,
        groups: Iterable[NodeGroup],
        total_to_add: int,
    ) -> List[ScaleUpInfo]:
        return balance_scale_up_between_groups(groups, total_to_add)


class NoOpNodeGroupSetProcessor(NodeGroupSetProcessor):
    """Processor with balancing disabled: nothing is similar and the first group takes the whole scale-up."""

    def find_similar_node_groups(
        self,
        reference: NodeTemplate,
        candidates: Sequence[Candidate],
    ) -> List[NodeGroup]:
        return []

    def balance_scale_up_between_groups(
        self,
        groups: Iterable[NodeGroup],
        total_to_add: int,
    ) -> List[ScaleUpInfo]:
        groups = list(groups)
        if not groups:
            return []
        first = groups[0]
        if first is None:
            raise InvalidNodeGroupError("Node group at position 0 is None")
        return balance_scale_up_between_groups([first], total_to_add)


def new_default_processor(
    ignored_labels: Optional[Iterable[str]] = None,
    difference_ratios: Optional[Mapping[str, float]] = None,
    *,
    comparator: str = "default",
) -> BalancingNodeGroupSetProcessor:
    """Build a balancing processor around a registered comparator."""
    return BalancingNodeGroupSetProcessor(
        create_comparator(comparator, ignored_labels=ignored_labels, difference_ratios=difference_ratios)
    )


def partition_similar_node_groups(
    processor: NodeGroupSetProcessor,
    candidates: Sequence[Candidate],
) -> List[List[NodeGroup]]:
    """
    Greedily split ``candidates`` into classes of similar groups.

    Each unassigned candidate, in input order, becomes the reference of a new
    class that absorbs every still-unassigned candidate similar to it. Every
    group lands in exactly one class; groups without a template form their
    own singleton class.
    """
    remaining = list(candidates)
    classes: List[List[NodeGroup]] = []
    while remaining:
        group, template = remaining[0]
        if template is None:
            classes.append([group])
            remaining = remaining[1:]
            continue
        members = processor.find_similar_node_groups(template, remaining[1:])
        member_ids = {id(member) for member in members}
        classes.append([group] + members)
        remaining = [item for item in remaining[1:] if id(item[0]) not in member_ids]
    logger.debug("Partitioned %d node groups into %d classes", len(candidates), len(classes))
    return classes
