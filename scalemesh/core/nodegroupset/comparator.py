"""
Node template comparators for similarity detection.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, FrozenSet, Iterable, Mapping, Optional, Type, Union

from scalemesh.config.policy import (
    CloudProviderName,
    build_ignored_labels,
    normalize_difference_ratios,
)
from scalemesh.core.entities.node_template import NodeTemplate

logger = logging.getLogger(__name__)

ComparatorFunc = Callable[[NodeTemplate, NodeTemplate], bool]
ComparatorResolver = Callable[[Optional[Iterable[str]], Optional[Mapping[str, float]]], "NodeInfoComparator"]
ComparatorSpec = Union[
    str,
    "NodeInfoComparator",
    Type["NodeInfoComparator"],
    ComparatorFunc,
]


class NodeInfoComparator(ABC):
    """Decides whether two node templates are interchangeable for scale-up."""

    @abstractmethod
    def similar(self, first: NodeTemplate, second: NodeTemplate) -> bool:
        """Return True when ``first`` and ``second`` can substitute for each other."""

    def __call__(self, first: NodeTemplate, second: NodeTemplate) -> bool:
        return self.similar(first, second)


def relative_difference(first: float, second: float) -> float:
    """``|a - b| / max(a, b, 1)``; symmetric in its arguments."""
    return abs(first - second) / max(first, second, 1.0)


class DefaultNodeComparator(NodeInfoComparator):
    """
    Structural comparator: labels, taints and resource capacity.

    Ignored label keys are dropped before the label maps are compared; taints
    are compared as sets; each resource listed in ``difference_ratios`` may
    differ by at most that relative amount. Resources absent from the ratio
    mapping are not compared, and neither is a resource both templates lack;
    a resource present on only one side makes the pair dissimilar.
    """

    def __init__(
        self,
        ignored_labels: Optional[Iterable[str]] = None,
        difference_ratios: Optional[Mapping[str, float]] = None,
        *,
        provider: str | CloudProviderName | None = None,
    ) -> None:
        self.ignored_labels: FrozenSet[str] = build_ignored_labels(ignored_labels, provider=provider)
        # Sorted so that the comparison order does not depend on mapping order.
        self.difference_ratios: Dict[str, float] = dict(
            sorted(normalize_difference_ratios(difference_ratios).items())
        )

    def similar(self, first: NodeTemplate, second: NodeTemplate) -> bool:
        return (
            self._labels_match(first, second)
            and self._taints_match(first, second)
            and self._resources_match(first, second)
        )

    def _labels_match(self, first: NodeTemplate, second: NodeTemplate) -> bool:
        if first.labels_without(self.ignored_labels) != second.labels_without(self.ignored_labels):
            logger.debug("Templates %s and %s differ in labels", first.name, second.name)
            return False
        return True

    @staticmethod
    def _taints_match(first: NodeTemplate, second: NodeTemplate) -> bool:
        if first.taint_set() != second.taint_set():
            logger.debug("Templates %s and %s differ in taints", first.name, second.name)
            return False
        return True

    def _resources_match(self, first: NodeTemplate, second: NodeTemplate) -> bool:
        for resource, max_ratio in self.difference_ratios.items():
            left = first.resource(resource)
            right = second.resource(resource)
            if left is None and right is None:
                continue
            if left is None or right is None:
                logger.debug(
                    "Resource %s missing on %s, treating as dissimilar",
                    resource,
                    first.name if left is None else second.name,
                )
                return False
            ratio = relative_difference(left, right)
            if ratio > max_ratio:
                logger.debug(
                    "Templates %s and %s differ in %s: ratio=%.4f > %.4f",
                    first.name,
                    second.name,
                    resource,
                    ratio,
                    max_ratio,
                )
                return False
        return True

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(ignored_labels={len(self.ignored_labels)}, "
            f"difference_ratios={self.difference_ratios})"
        )


class CallableComparator(NodeInfoComparator):
    """Adapter turning a plain ``(a, b) -> bool`` predicate into a comparator."""

    def __init__(self, func: ComparatorFunc) -> None:
        if not callable(func):
            raise TypeError("CallableComparator requires a callable predicate")
        self._func = func

    def similar(self, first: NodeTemplate, second: NodeTemplate) -> bool:
        return bool(self._func(first, second))

    def __repr__(self) -> str:
        name = getattr(self._func, "__qualname__", repr(self._func))
        return f"CallableComparator({name})"


def _coerce_comparator_instance(candidate: object) -> NodeInfoComparator:
    if isinstance(candidate, NodeInfoComparator):
        return candidate
    raise TypeError("Factory did not return a NodeInfoComparator instance.")


_COMPARATOR_REGISTRY: dict[str, ComparatorResolver] = {}


def register_comparator(
    name: str,
    factory: ComparatorResolver,
    *,
    replace: bool = False,
) -> None:
    """
    Register a comparator factory under ``name``.

    Args:
        name: comparator name, normalised to lower case.
        factory: called with ``(ignored_labels, difference_ratios)``.
        replace: allow overwriting an existing registration.
    """
    key = name.strip().lower()
    if not key:
        raise ValueError("Comparator name must be a non-empty string.")
    if key in _COMPARATOR_REGISTRY and not replace:
        raise ValueError(f"Comparator '{key}' already registered.")
    _COMPARATOR_REGISTRY[key] = factory


def unregister_comparator(name: str) -> None:
    """Drop a registration; unknown names are ignored."""
    key = name.strip().lower()
    _COMPARATOR_REGISTRY.pop(key, None)


def available_comparators() -> tuple[str, ...]:
    return tuple(sorted(_COMPARATOR_REGISTRY))


def _resolve_registered_comparator(
    name: str,
    ignored_labels: Optional[Iterable[str]],
    difference_ratios: Optional[Mapping[str, float]],
) -> NodeInfoComparator:
    key = name.strip().lower()
    try:
        factory = _COMPARATOR_REGISTRY[key]
    except KeyError as exc:
        raise ValueError(
            f"Unknown comparator '{name}'. "
            f"Available comparators: {', '.join(sorted(_COMPARATOR_REGISTRY)) or '<none>'}"
        ) from exc
    return _coerce_comparator_instance(factory(ignored_labels, difference_ratios))


def create_comparator(
    comparator: ComparatorSpec = "default",
    *,
    ignored_labels: Optional[Iterable[str]] = None,
    difference_ratios: Optional[Mapping[str, float]] = None,
) -> NodeInfoComparator:
    """
    Build or validate a comparator.

    Args:
        comparator: one of
          * a registered name ("default", "aws", "azure", "gce", ...)
          * a :class:`NodeInfoComparator` subclass, instantiated with
            ``ignored_labels`` and ``difference_ratios`` when it is a
            :class:`DefaultNodeComparator`, without arguments otherwise
          * an existing :class:`NodeInfoComparator` instance (returned as is)
          * a plain predicate ``(a, b) -> bool``
        ignored_labels: extra label keys to ignore (registered names and
            default comparator subclasses only).
        difference_ratios: resource ratios (registered names and default
            comparator subclasses only).
    """
    if isinstance(comparator, NodeInfoComparator):
        return comparator

    if isinstance(comparator, str):
        return _resolve_registered_comparator(comparator, ignored_labels, difference_ratios)

    if isinstance(comparator, type) and issubclass(comparator, NodeInfoComparator):
        if issubclass(comparator, DefaultNodeComparator):
            return comparator(ignored_labels, difference_ratios)
        return comparator()

    if callable(comparator):
        return CallableComparator(comparator)

    raise TypeError(
        "Comparator must be provided as a name, NodeInfoComparator subclass, "
        "NodeInfoComparator instance or a predicate callable."
    )


def _provider_factory(provider: CloudProviderName) -> ComparatorResolver:
    def _factory(
        ignored_labels: Optional[Iterable[str]],
        difference_ratios: Optional[Mapping[str, float]],
    ) -> NodeInfoComparator:
        return DefaultNodeComparator(ignored_labels, difference_ratios, provider=provider)

    return _factory


register_comparator("default", lambda labels, ratios: DefaultNodeComparator(labels, ratios))
for _provider in CloudProviderName:
    register_comparator(_provider.value, _provider_factory(_provider))


__all__ = [
    "CallableComparator",
    "ComparatorFunc",
    "DefaultNodeComparator",
    "NodeInfoComparator",
    "available_comparators",
    "create_comparator",
    "register_comparator",
    "relative_difference",
    "unregister_comparator",
]
