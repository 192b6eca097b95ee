"""
Integration tests for the RayBalancer façade and NodeGroupSetActor.
"""

from __future__ import annotations

import uuid

import pytest

from scalemesh.core.entities import NodeGroup


def _template(name: str, cpu: float = 1000.0, memory: float = 1000.0) -> dict:
    return {
        "name": name,
        "labels": {"kubernetes.io/hostname": name, "pool": "workers"},
        "capacity": {"cpu": cpu, "memory": memory},
    }


def test_describe(balancer):
    info = balancer.describe()
    assert info["success"] is True
    assert info["processor"] == "BalancingNodeGroupSetProcessor"


def test_balance_returns_plan(balancer):
    groups = [
        NodeGroup("ng1", 1, 10, 1),
        NodeGroup("ng2", 1, 10, 3),
        {"id": "ng3", "min_size": 1, "max_size": 10, "target_size": 5},
    ]
    result = balancer.balance(groups, 4)

    assert result["success"] is True
    assert result["requested"] == 4
    assert result["granted"] == 4
    assert {entry["group"]: entry["new_size"] for entry in result["plan"]} == {"ng1": 4, "ng2": 4}


def test_balance_over_request_is_capped(balancer):
    result = balancer.balance([NodeGroup("ng1", 1, 3, 1), NodeGroup("ng2", 1, 1, 1)], 50)
    assert result["success"] is True
    assert result["granted"] == 2
    assert result["plan"] == [
        {"group": "ng1", "current_size": 1, "new_size": 3, "max_size": 3, "delta": 2}
    ]


def test_balance_rejects_missing_group(balancer):
    result = balancer.balance([NodeGroup("ng1", 1, 3, 1), None], 1)
    assert result["success"] is False
    assert "None" in result["error"]


def test_find_similar(balancer):
    candidates = [
        ({"id": "ng1", "min_size": 0, "max_size": 5, "target_size": 1}, _template("n1")),
        ({"id": "ng2", "min_size": 0, "max_size": 5, "target_size": 1}, _template("n2")),
        ({"id": "ng3", "min_size": 0, "max_size": 5, "target_size": 1}, _template("n3", cpu=2000.0)),
        ({"id": "ng4", "min_size": 0, "max_size": 5, "target_size": 1}, None),
    ]
    result = balancer.find_similar(_template("n1"), candidates)
    assert result == {"success": True, "groups": ["ng1", "ng2"]}


def test_plan_scale_up_spreads_over_similar_groups(balancer):
    reference_group = NodeGroup("ng1", 0, 10, 2)
    candidates = [
        (reference_group, _template("n1")),
        (NodeGroup("ng2", 0, 10, 0), _template("n2")),
        (NodeGroup("ng3", 0, 10, 0), _template("n3", cpu=2000.0)),
    ]
    result = balancer.plan_scale_up(reference_group, _template("n1"), candidates, 4)

    assert result["success"] is True
    assert result["groups"] == ["ng1", "ng2"]
    assert {entry["group"]: entry["new_size"] for entry in result["plan"]} == {"ng1": 3, "ng2": 3}


def test_plan_scale_up_requires_reference(balancer):
    result = balancer.plan_scale_up(None, _template("n1"), [], 1)
    assert result["success"] is False


def test_disabled_balancing_uses_first_group(ray_runtime):
    from scalemesh.core.controllers import RayBalancer

    balancer = RayBalancer(name=f"test-noop-{uuid.uuid4().hex[:8]}", balancing_enabled=False)
    try:
        assert balancer.describe()["processor"] == "NoOpNodeGroupSetProcessor"
        result = balancer.balance([NodeGroup("ng1", 0, 10, 0), NodeGroup("ng2", 0, 10, 0)], 4)
        assert [entry["group"] for entry in result["plan"]] == ["ng1"]
        assert balancer.find_similar(_template("n1"), [(NodeGroup("ng2", 0, 1, 0), _template("n2"))])["groups"] == []
    finally:
        balancer.shutdown()


def test_shutdown_blocks_further_calls(ray_runtime):
    from scalemesh.core.controllers import RayBalancer

    balancer = RayBalancer(name=f"test-shutdown-{uuid.uuid4().hex[:8]}")
    balancer.shutdown()
    with pytest.raises(RuntimeError):
        balancer.balance([], 1)
