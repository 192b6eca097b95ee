#!/usr/bin/env python3
"""
节点组均衡扩容演示

展示：
1. 按模板查找相似节点组
2. 将新增节点按 water-filling 分配到相似节点组
3. 超出容量时按各组 max_size 封顶
4. 通过 RayBalancer 在 Ray actor 中执行同样的计算
"""

import logging

import ray

from scalemesh.core import new_default_processor, partition_similar_node_groups
from scalemesh.core.controllers import RayBalancer
from scalemesh.core.entities import NodeGroup, NodeTemplate, Taint
from scalemesh.core.utils import demote_ray_logging, describe_plan, describe_similar, install_stdout_logger


def _template(name, cpu=4.0, memory=16384.0, **labels):
    merged = {"kubernetes.io/hostname": name, "pool": "workers"}
    merged.update(labels)
    return NodeTemplate(name=name, labels=merged, capacity={"cpu": cpu, "memory": memory})


def build_inventory():
    gpu_template = _template("gpu-a", cpu=8.0, memory=65536.0, pool="gpu")
    gpu_template.taints = (Taint("nvidia.com/gpu", "present", "NoSchedule"),)
    return [
        (NodeGroup("workers-a", 1, 10, 1), _template("workers-a", **{"topology.kubernetes.io/zone": "a"})),
        (NodeGroup("workers-b", 1, 10, 3), _template("workers-b", **{"topology.kubernetes.io/zone": "b"})),
        (NodeGroup("workers-c", 1, 7, 5), _template("workers-c", memory=16200.0)),
        (NodeGroup("gpu-a", 0, 4, 0), gpu_template),
    ]


def demo_local_balancing():
    """演示本地（进程内）相似节点组查找与均衡"""
    print("\n" + "=" * 60)
    print("示例 1: 进程内均衡")
    print("=" * 60)

    processor = new_default_processor()
    inventory = build_inventory()

    _, reference = inventory[0]
    similar = processor.find_similar_node_groups(reference, inventory)
    describe_similar("\n1. 相似节点组", reference.name, similar)

    for total in (4, 9, 900):
        plan = processor.balance_scale_up_between_groups(similar, total)
        describe_plan(plan, f"2. 新增 {total} 个节点", requested=total)

    classes = partition_similar_node_groups(processor, inventory)
    print("3. 相似分组:")
    for index, group_class in enumerate(classes, start=1):
        print(f"    • #{index}: {[group.id for group in group_class]}")


def demo_ray_balancing():
    """演示通过 Ray actor 计算扩容计划"""
    print("\n" + "=" * 60)
    print("示例 2: RayBalancer")
    print("=" * 60)

    balancer = RayBalancer("balance-demo")
    try:
        inventory = build_inventory()
        reference_group, reference = inventory[0]
        result = balancer.plan_scale_up(reference_group, reference, inventory, 6)
        if result.get("success"):
            describe_plan(result["plan"], f"参与节点组: {result['groups']}", requested=result["requested"])
        else:
            print(f"计划失败: {result.get('error')}")
    finally:
        balancer.shutdown()


def main():
    install_stdout_logger(logging.INFO, include_timestamp=False)
    demote_ray_logging()

    demo_local_balancing()

    if not ray.is_initialized():
        ray.init(ignore_reinit_error=True, local_mode=True)
    try:
        demo_ray_balancing()
    finally:
        ray.shutdown()


if __name__ == "__main__":
    main()
