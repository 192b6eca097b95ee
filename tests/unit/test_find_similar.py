"""
Similarity detection between node group templates.
"""

from __future__ import annotations

import pytest

from scalemesh.core.entities import NodeGroup, NodeTemplate, Taint
from scalemesh.core.nodegroupset import (
    BalancingNodeGroupSetProcessor,
    DefaultNodeComparator,
    NoOpNodeGroupSetProcessor,
    create_comparator,
    new_default_processor,
    partition_similar_node_groups,
)


def _ids(groups):
    return [group.id for group in groups]


def _basic_similar_node_groups_test(processor, candidates):
    (ng1, t1), (ng2, t2), (ng3, t3) = candidates

    assert _ids(processor.find_similar_node_groups(t1, candidates)) == ["ng1", "ng2"]
    assert _ids(processor.find_similar_node_groups(t2, candidates)) == ["ng1", "ng2"]
    assert _ids(processor.find_similar_node_groups(t3, candidates)) == ["ng3"]


def test_find_similar_node_groups(basic_node_groups):
    processor = new_default_processor([], None)
    _basic_similar_node_groups_test(processor, basic_node_groups)


def test_find_similar_node_groups_custom_labels(basic_node_groups):
    basic_node_groups[0][1].labels["example.com/ready"] = "true"
    basic_node_groups[1][1].labels["example.com/ready"] = "false"

    processor = new_default_processor(["example.com/ready"], None)
    _basic_similar_node_groups_test(processor, basic_node_groups)

    strict = new_default_processor([], None)
    assert _ids(strict.find_similar_node_groups(basic_node_groups[0][1], basic_node_groups)) == ["ng1"]


def test_find_similar_node_groups_custom_comparator(basic_node_groups):
    def comparator(first: NodeTemplate, second: NodeTemplate) -> bool:
        return {first.name, second.name} == {"n1", "n2"}

    processor = BalancingNodeGroupSetProcessor(comparator)
    (ng1, t1), (ng2, t2), (ng3, t3) = basic_node_groups

    # not reflexive, so the reference's own group is left out
    assert _ids(processor.find_similar_node_groups(t1, basic_node_groups)) == ["ng2"]
    assert _ids(processor.find_similar_node_groups(t2, basic_node_groups)) == ["ng1"]
    assert processor.find_similar_node_groups(t3, basic_node_groups) == []


def test_candidates_without_template_are_skipped(basic_node_groups, make_template):
    processor = new_default_processor()
    candidates = basic_node_groups + [(NodeGroup("ng4", 0, 3, 0), None)]
    assert _ids(processor.find_similar_node_groups(make_template("n9"), candidates)) == ["ng1", "ng2"]


def test_failing_comparator_degrades_to_not_similar(basic_node_groups):
    def comparator(first, second):
        if second.name == "n2":
            raise KeyError("boom")
        return True

    processor = BalancingNodeGroupSetProcessor(comparator)
    assert _ids(processor.find_similar_node_groups(basic_node_groups[0][1], basic_node_groups)) == ["ng1", "ng3"]


def test_default_comparator_is_reflexive(make_template):
    comparator = DefaultNodeComparator()
    template = make_template("n1", cpu=4.0, memory=8192.0, zone="a")
    template.taints = (Taint("dedicated", "gpu", "NoSchedule"),)
    assert comparator.similar(template, template)


def test_taints_compared_as_sets():
    comparator = DefaultNodeComparator()
    first = NodeTemplate(
        name="a",
        taints=(Taint("a", "1"), Taint("b", "2", "NoExecute")),
        capacity={"cpu": 2, "memory": 100},
    )
    second = NodeTemplate(
        name="b",
        taints=(Taint("b", "2", "NoExecute"), Taint("a", "1")),
        capacity={"cpu": 2, "memory": 100},
    )
    third = NodeTemplate(name="c", taints=(Taint("a", "1"),), capacity={"cpu": 2, "memory": 100})

    assert comparator.similar(first, second)
    assert not comparator.similar(first, third)


def test_label_values_must_match(make_template):
    comparator = DefaultNodeComparator()
    assert not comparator.similar(make_template("n1", pool="a"), make_template("n2", pool="b"))
    assert not comparator.similar(make_template("n1", pool="a"), make_template("n2"))


def test_memory_ratio_tolerance(make_template):
    comparator = DefaultNodeComparator(difference_ratios={"memory": 0.015})
    base = make_template("n1", memory=1000.0)
    assert comparator.similar(base, make_template("n2", memory=1015.0))
    assert not comparator.similar(base, make_template("n3", memory=1016.0))
    # symmetric
    assert comparator.similar(make_template("n2", memory=1015.0), base)


def test_unconfigured_resources_are_not_compared(make_template):
    comparator = DefaultNodeComparator(difference_ratios={})
    assert comparator.similar(make_template("n1", cpu=1.0), make_template("n2", cpu=64.0))


def test_resource_on_one_side_only_is_not_similar():
    comparator = DefaultNodeComparator(difference_ratios={"gpu": 0.0})
    with_gpu = NodeTemplate(name="a", capacity={"gpu": 1})
    without_gpu = NodeTemplate(name="b", capacity={})
    assert not comparator.similar(with_gpu, without_gpu)
    assert not comparator.similar(without_gpu, with_gpu)


def test_resource_absent_on_both_sides_is_skipped():
    comparator = DefaultNodeComparator(difference_ratios={"gpu": 0.0, "cpu": 0.0})
    first = NodeTemplate(name="a", capacity={"cpu": 4})
    second = NodeTemplate(name="b", capacity={"cpu": 4})
    assert comparator.similar(first, second)


@pytest.mark.parametrize("capacity", [{}, {"cpu": 4}, {"memory": 512}])
def test_template_with_partial_capacity_matches_itself(capacity):
    template = NodeTemplate(name="n1", labels={"a": "b"}, capacity=capacity)
    processor = new_default_processor()

    assert processor.comparator.similar(template, template)
    group = NodeGroup("ng1", 0, 5, 1)
    assert processor.find_similar_node_groups(template, [(group, template)]) == [group]


def test_similar_candidate_without_group_id_does_not_fail(make_template):
    template = make_template("n1")
    processor = new_default_processor()

    similar = processor.find_similar_node_groups(template, [(None, template), (NodeGroup("ng1", 0, 5, 1), template)])

    assert similar[0] is None
    assert similar[1].id == "ng1"


def test_small_quantities_use_floor_of_one(make_template):
    comparator = DefaultNodeComparator(difference_ratios={"cpu": 0.5})
    # |0.2 - 0.6| / max(0.2, 0.6, 1) = 0.4
    assert comparator.similar(make_template("n1", cpu=0.2), make_template("n2", cpu=0.6))


def test_provider_comparator_ignores_provider_labels(make_template):
    first = make_template("n1", **{"eks.amazonaws.com/nodegroup": "a"})
    second = make_template("n2", **{"eks.amazonaws.com/nodegroup": "b"})

    assert create_comparator("aws").similar(first, second)
    assert not create_comparator("default").similar(first, second)
    assert not create_comparator("gce").similar(first, second)


def test_noop_processor_finds_nothing(basic_node_groups):
    processor = NoOpNodeGroupSetProcessor()
    assert processor.find_similar_node_groups(basic_node_groups[0][1], basic_node_groups) == []


def test_partition_similar_node_groups(basic_node_groups, make_template):
    candidates = basic_node_groups + [
        (NodeGroup("ng4", 0, 5, 0), make_template("n4", cpu=2000.0, memory=2000.0)),
        (NodeGroup("ng5", 0, 5, 0), None),
    ]

    classes = partition_similar_node_groups(new_default_processor(), candidates)

    assert [_ids(group_class) for group_class in classes] == [["ng1", "ng2"], ["ng3", "ng4"], ["ng5"]]


def test_partition_with_noop_processor_gives_singletons(basic_node_groups):
    classes = partition_similar_node_groups(NoOpNodeGroupSetProcessor(), basic_node_groups)
    assert [_ids(group_class) for group_class in classes] == [["ng1"], ["ng2"], ["ng3"]]


@pytest.mark.parametrize("ratio", [-0.1, float("nan"), "abc"])
def test_invalid_ratios_rejected(ratio):
    with pytest.raises(ValueError):
        DefaultNodeComparator(difference_ratios={"cpu": ratio})
