"""
Node group entity definitions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping


def _coerce_size(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")
    return value


@dataclass
class NodeGroup:
    """
    Snapshot of a cloud-provider node group.

    ``target_size`` is the size last requested from the provider. It may
    exceed ``max_size`` when the bounds were lowered externally.
    """

    id: str
    min_size: int
    max_size: int
    target_size: int

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id.strip():
            raise ValueError("NodeGroup requires a non-empty id")
        self.min_size = _coerce_size("min_size", self.min_size)
        self.max_size = _coerce_size("max_size", self.max_size)
        self.target_size = _coerce_size("target_size", self.target_size)
        if self.min_size > self.max_size:
            raise ValueError(
                f"NodeGroup '{self.id}' has min_size={self.min_size} greater than max_size={self.max_size}"
            )

    @property
    def remaining_capacity(self) -> int:
        """Nodes that can still be added before reaching ``max_size``."""
        return max(0, self.max_size - self.target_size)

    def is_saturated(self) -> bool:
        return self.target_size >= self.max_size

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "min_size": self.min_size,
            "max_size": self.max_size,
            "target_size": self.target_size,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "NodeGroup":
        return cls(
            id=str(payload.get("id") or ""),
            min_size=int(payload.get("min_size", 0) or 0),
            max_size=int(payload.get("max_size", 0) or 0),
            target_size=int(payload.get("target_size", 0) or 0),
        )


@dataclass
class ScaleUpInfo:
    """One entry of a scale-up plan: grow ``group`` from ``current_size`` to ``new_size``."""

    group: NodeGroup
    current_size: int
    new_size: int
    max_size: int

    @property
    def delta(self) -> int:
        return self.new_size - self.current_size

    def to_dict(self) -> Dict[str, object]:
        return {
            "group": self.group.id,
            "current_size": self.current_size,
            "new_size": self.new_size,
            "max_size": self.max_size,
            "delta": self.delta,
        }

    def __repr__(self) -> str:
        return f"ScaleUpInfo({self.group.id}: {self.current_size}->{self.new_size}, max={self.max_size})"
