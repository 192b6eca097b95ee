"""
Node group set actor.

Hosts a balancing processor inside a Ray actor so that autoscaler components
running elsewhere in the cluster can ask for similar groups and scale-up
plans. The processor itself is stateless; the actor only keeps it around.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import ray

from .config import ActorConfig
from scalemesh.core.config import BalancingConfig, create_processor_from_config
from scalemesh.core.entities.node_group import NodeGroup
from scalemesh.core.entities.node_template import NodeTemplate
from scalemesh.core.nodegroupset.processor import NodeGroupSetProcessor, NoOpNodeGroupSetProcessor
from scalemesh.core.utils import configure_runtime_logging

logger = logging.getLogger(__name__)

GroupLike = Union[NodeGroup, Mapping[str, Any], None]
TemplateLike = Union[NodeTemplate, Mapping[str, Any], None]


def build_processor(config: ActorConfig) -> NodeGroupSetProcessor:
    """Create the processor described by ``config``."""
    if not config.balancing_enabled:
        return NoOpNodeGroupSetProcessor()
    if config.use_file_config:
        return create_processor_from_config()
    return create_processor_from_config(
        BalancingConfig(
            comparator=config.comparator,
            ignored_labels=list(config.ignored_labels),
            difference_ratios=config.difference_ratios,
        )
    )


def _to_group(value: GroupLike) -> Optional[NodeGroup]:
    if value is None or isinstance(value, NodeGroup):
        return value
    return NodeGroup.from_dict(value)


def _to_template(value: TemplateLike) -> Optional[NodeTemplate]:
    if value is None or isinstance(value, NodeTemplate):
        return value
    return NodeTemplate.from_dict(value)


@ray.remote
class NodeGroupSetActor:
    """Ray actor exposing similarity detection and scale-up balancing."""

    def __init__(self, config: ActorConfig):
        configure_runtime_logging(actor_name=config.name)
        self.config = config
        self.processor = build_processor(config)
        logger.info("NodeGroupSetActor[%s] initialised with %s", config.name, type(self.processor).__name__)

    def describe(self) -> dict:
        return {
            "success": True,
            "name": self.config.name,
            "processor": type(self.processor).__name__,
            "comparator": repr(getattr(self.processor, "comparator", None)),
        }

    def _similar(
        self,
        reference: TemplateLike,
        candidates: Iterable[Tuple[GroupLike, TemplateLike]],
    ) -> List[NodeGroup]:
        template = _to_template(reference)
        if template is None:
            raise ValueError("Reference template must be provided")
        pairs = [(_to_group(group), _to_template(tmpl)) for group, tmpl in candidates]
        return self.processor.find_similar_node_groups(template, pairs)

    def find_similar_node_groups(
        self,
        reference: TemplateLike,
        candidates: Sequence[Tuple[GroupLike, TemplateLike]],
    ) -> dict:
        try:
            similar = self._similar(reference, candidates)
        except (TypeError, ValueError) as exc:
            logger.warning("find_similar_node_groups rejected input: %s", exc)
            return {"success": False, "error": str(exc)}
        return {"success": True, "groups": [group.id for group in similar]}

    def balance_scale_up(self, groups: Sequence[GroupLike], total_to_add: int) -> dict:
        try:
            plan = self.processor.balance_scale_up_between_groups(
                [_to_group(group) for group in groups], total_to_add
            )
        except (TypeError, ValueError) as exc:
            logger.warning("balance_scale_up rejected input: %s", exc)
            return {"success": False, "error": str(exc)}
        granted = sum(info.delta for info in plan)
        logger.info(
            "NodeGroupSetActor[%s] planned +%d of %s nodes over %d groups",
            self.config.name,
            granted,
            total_to_add,
            len(plan),
        )
        return {
            "success": True,
            "requested": total_to_add,
            "granted": granted,
            "plan": [info.to_dict() for info in plan],
        }

    def plan_scale_up(
        self,
        reference_group: GroupLike,
        reference: TemplateLike,
        candidates: Sequence[Tuple[GroupLike, TemplateLike]],
        total_to_add: int,
    ) -> dict:
        """Balance ``total_to_add`` over the reference group and every group similar to it."""
        try:
            group = _to_group(reference_group)
            if group is None:
                raise ValueError("Reference group must be provided")
            similar = [
                other for other in self._similar(reference, candidates) if other.id != group.id
            ]
        except (TypeError, ValueError) as exc:
            logger.warning("plan_scale_up rejected input: %s", exc)
            return {"success": False, "error": str(exc)}
        result = self.balance_scale_up([group] + similar, total_to_add)
        if result.get("success"):
            result["groups"] = [group.id] + [other.id for other in similar]
        return result
