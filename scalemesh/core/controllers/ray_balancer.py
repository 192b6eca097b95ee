"""
Client-facing RayBalancer façade.

The façade proxies all operations to the underlying node group set actor
while exposing a synchronous API to library consumers.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

import ray

from scalemesh.core.actors.management.autoscaler import NodeGroupSetActor
from scalemesh.core.actors.management.config import ActorConfig


class RayBalancer:
    """Thin wrapper around the NodeGroupSetActor."""

    def __init__(
        self,
        name: str = "scalemesh-balancer",
        *,
        comparator: str = "default",
        ignored_labels: Iterable[str] | None = None,
        difference_ratios: Mapping[str, float] | None = None,
        balancing_enabled: bool = True,
        use_file_config: bool = False,
        namespace: str | None = None,
        detached: bool = False,
        max_restarts: int = -1,
    ):
        """
        Create a new node group set actor.

        Args:
            name: Logical name for the actor.
            comparator: Registered comparator name.
            ignored_labels: Extra label keys ignored when comparing templates.
            difference_ratios: Resource -> tolerated relative difference.
                ``None`` keeps the built-in ratios.
            balancing_enabled: ``False`` selects the no-op processor.
            use_file_config: Build the processor from the YAML configuration.
            namespace: Ray namespace to place the actor in.
            detached: Whether to create the actor as a named detached actor.
            max_restarts: Passed to Ray for detached actors.
        """
        self.name = name
        actor_config = ActorConfig(
            name=name,
            comparator=comparator,
            ignored_labels=list(ignored_labels or []),
            difference_ratios=dict(difference_ratios) if difference_ratios is not None else None,
            balancing_enabled=balancing_enabled,
            use_file_config=use_file_config,
        )
        actor_options: dict[str, Any] = {}
        if namespace is not None:
            actor_options["namespace"] = namespace
        if detached:
            actor_options.update(
                {
                    "name": name,
                    "lifetime": "detached",
                    "max_restarts": max_restarts,
                }
            )
        self._actor = NodeGroupSetActor.options(**actor_options).remote(actor_config)
        self._owns_actor = True

    @classmethod
    def attach(cls, name: str = "scalemesh-balancer", *, namespace: str | None = None) -> "RayBalancer":
        """
        Attach to an existing (typically detached) actor.
        """
        handle = ray.get_actor(name, namespace=namespace)
        instance = cls.__new__(cls)
        instance.name = name
        instance._actor = handle
        instance._owns_actor = False
        return instance

    def _ensure_actor(self) -> ray.actor.ActorHandle:
        if self._actor is None:
            raise RuntimeError("RayBalancer has been shut down")
        return self._actor

    def describe(self) -> Any:
        actor = self._ensure_actor()
        return ray.get(actor.describe.remote())

    def find_similar(self, reference: Any, candidates: Sequence[tuple[Any, Any]]) -> Any:
        actor = self._ensure_actor()
        return ray.get(actor.find_similar_node_groups.remote(reference, list(candidates)))

    def balance(self, groups: Sequence[Any], total_to_add: int) -> Any:
        actor = self._ensure_actor()
        return ray.get(actor.balance_scale_up.remote(list(groups), total_to_add))

    def plan_scale_up(
        self,
        reference_group: Any,
        reference: Any,
        candidates: Sequence[tuple[Any, Any]],
        total_to_add: int,
    ) -> Any:
        actor = self._ensure_actor()
        return ray.get(
            actor.plan_scale_up.remote(reference_group, reference, list(candidates), total_to_add)
        )

    def shutdown(self) -> None:
        if self._actor is not None and self._owns_actor:
            ray.kill(self._actor, no_restart=True)
        self._actor = None
