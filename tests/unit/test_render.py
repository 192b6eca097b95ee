from __future__ import annotations

from scalemesh.core.entities import NodeGroup, ScaleUpInfo
from scalemesh.core.utils import describe_plan, describe_similar


def test_describe_plan_lists_entries(capsys):
    group = NodeGroup("ng1", 1, 10, 1)
    describe_plan([ScaleUpInfo(group, 1, 4, 10)], "Plan", requested=5)
    out = capsys.readouterr().out
    assert "requested: 5, granted: 3" in out
    assert "ng1: 1 -> 4" in out


def test_describe_plan_accepts_dicts_and_empty(capsys):
    describe_plan([{"group": "ng2", "current_size": 2, "new_size": 3, "max_size": 3, "delta": 1}], "Plan")
    describe_plan([], "Empty")
    out = capsys.readouterr().out
    assert "granted: 1" in out
    assert "no node group changes" in out


def test_describe_similar(capsys):
    describe_similar("Similar", "n1", [NodeGroup("ng1", 0, 1, 0), "ng2"])
    describe_similar("None", "n3", [])
    out = capsys.readouterr().out
    assert "similar to n1: 2" in out
    assert "• ng2" in out
    assert "nothing similar to n3" in out
