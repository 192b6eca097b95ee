"""
Node template entity definitions.

A template is the representative node of a node group: its labels, taints
and resource capacity. Templates are built by the caller and treated as
read-only snapshots here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple


@dataclass(frozen=True)
class Taint:
    """A node taint; two taints are equal when key, value and effect match."""

    key: str
    value: str = ""
    effect: str = "NoSchedule"

    def to_dict(self) -> Dict[str, str]:
        return {"key": self.key, "value": self.value, "effect": self.effect}

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "Taint":
        key = str(values.get("key", "")).strip()
        if not key:
            raise ValueError("Taint requires a non-empty 'key'")
        return cls(
            key=key,
            value=str(values.get("value") or ""),
            effect=str(values.get("effect") or "NoSchedule"),
        )


def parse_resources(values: Optional[Mapping[str, Any]]) -> Dict[str, float]:
    """
    Coerce a resource mapping into ``{name: float}``.

    Args:
        values: resource name -> quantity (numbers or numeric strings)

    Returns:
        A new dict with float quantities.

    Raises:
        ValueError: if a quantity is negative or cannot be converted.
    """
    resources: Dict[str, float] = {}
    if not values:
        return resources
    try:
        for key, raw in values.items():
            name = str(key).strip()
            if not name:
                raise ValueError("resource name must be non-empty")
            quantity = float(raw)
            if quantity < 0:
                raise ValueError(f"resource '{name}' must be non-negative, got {quantity}")
            resources[name] = quantity
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid resource specification: {e}") from e
    return resources


@dataclass
class NodeTemplate:
    """Representative node descriptor for a node group."""

    name: str
    labels: Dict[str, str] = field(default_factory=dict)
    taints: Tuple[Taint, ...] = ()
    capacity: Dict[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.labels = {str(k): str(v) for k, v in (self.labels or {}).items()}
        self.taints = tuple(
            taint if isinstance(taint, Taint) else Taint.from_dict(taint) for taint in (self.taints or ())
        )
        self.capacity = parse_resources(self.capacity)

    def resource(self, name: str) -> Optional[float]:
        """Return the capacity of ``name`` or ``None`` when the template lacks it."""
        return self.capacity.get(name)

    def labels_without(self, ignored: Iterable[str]) -> Dict[str, str]:
        skip = ignored if isinstance(ignored, (set, frozenset)) else frozenset(ignored)
        return {key: value for key, value in self.labels.items() if key not in skip}

    def taint_set(self) -> FrozenSet[Taint]:
        return frozenset(self.taints)

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "labels": dict(self.labels),
            "taints": [taint.to_dict() for taint in self.taints],
            "capacity": dict(self.capacity),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "NodeTemplate":
        return cls(
            name=str(payload.get("name") or ""),
            labels=dict(payload.get("labels") or {}),
            taints=tuple(Taint.from_dict(item) for item in payload.get("taints") or ()),
            capacity=dict(payload.get("capacity") or {}),
        )
