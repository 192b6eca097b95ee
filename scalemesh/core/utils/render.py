"""Rendering helpers for friendly CLI/demo output."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Sequence, Union

from scalemesh.core.entities.node_group import NodeGroup, ScaleUpInfo

PlanEntry = Union[ScaleUpInfo, Mapping[str, Any]]


def _entry_dict(entry: PlanEntry) -> Dict[str, Any]:
    if isinstance(entry, ScaleUpInfo):
        return entry.to_dict()
    return dict(entry)


def describe_plan(plan: Iterable[PlanEntry], title: str, *, requested: int | None = None) -> None:
    entries = [_entry_dict(entry) for entry in plan]
    print(title)
    if not entries:
        print("  - no node group changes\n")
        return
    granted = sum(int(entry.get("delta", 0)) for entry in entries)
    if requested is not None:
        print(f"  - requested: {requested}, granted: {granted}")
    else:
        print(f"  - granted: {granted}")
    for entry in entries:
        print(
            f"    • {entry.get('group')}: {entry.get('current_size')} -> {entry.get('new_size')}"
            f" (max={entry.get('max_size')}, +{entry.get('delta')})"
        )
    print()


def describe_similar(title: str, reference: str, groups: Sequence[Union[NodeGroup, str]]) -> None:
    print(title)
    names = [group.id if isinstance(group, NodeGroup) else str(group) for group in groups]
    if not names:
        print(f"  - nothing similar to {reference}\n")
        return
    print(f"  - similar to {reference}: {len(names)}")
    for name in names:
        print(f"    • {name}")
    print()
