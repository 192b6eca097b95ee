"""
Shared pytest fixtures.
"""

from __future__ import annotations

import logging
import uuid

import pytest

from scalemesh.core.entities import NodeGroup, NodeTemplate

logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s", force=True)
logging.getLogger("scalemesh").setLevel(logging.DEBUG)


def build_template(name: str, cpu: float = 1000.0, memory: float = 1000.0, **extra_labels: str) -> NodeTemplate:
    """Template with the per-node labels a real node would carry."""
    labels = {"kubernetes.io/hostname": name}
    labels.update(extra_labels)
    return NodeTemplate(name=name, labels=labels, capacity={"cpu": cpu, "memory": memory})


@pytest.fixture
def make_template():
    return build_template


@pytest.fixture
def basic_node_groups():
    """Three groups: ng1 and ng2 identical apart from hostname, ng3 twice as large."""
    ng1 = NodeGroup("ng1", 1, 10, 1)
    ng2 = NodeGroup("ng2", 1, 10, 1)
    ng3 = NodeGroup("ng3", 1, 10, 1)
    t1 = build_template("n1")
    t2 = build_template("n2")
    t3 = build_template("n3", cpu=2000.0, memory=2000.0)
    return [(ng1, t1), (ng2, t2), (ng3, t3)]


@pytest.fixture
def ray_runtime():
    """Spin up a local Ray runtime for tests and mirror worker logs to the driver."""
    ray = pytest.importorskip("ray")
    try:
        ray.init(
            ignore_reinit_error=True,
            local_mode=True,
            logging_level=logging.INFO,
        )
    except PermissionError as exc:
        pytest.skip(f"Ray init requires system permissions not available in this environment: {exc}")
    except Exception as exc:  # pragma: no cover - restricted sandboxes
        if "Operation not permitted" in str(exc):
            pytest.skip(f"Ray init skipped due to restricted environment: {exc}")
        raise
    # local_mode runs actors in-process; restore the package logger afterwards
    # so handlers bound to this test's captured stdout don't leak.
    package_logger = logging.getLogger("scalemesh")
    saved_handlers = list(package_logger.handlers)
    saved_level = package_logger.level
    try:
        yield
    finally:
        ray.shutdown()
        package_logger.handlers[:] = saved_handlers
        package_logger.setLevel(saved_level)


@pytest.fixture
def balancer(ray_runtime):
    """Provide an isolated RayBalancer instance per test."""
    from scalemesh.core.controllers import RayBalancer

    name = f"test-balancer-{uuid.uuid4().hex[:8]}"
    instance = RayBalancer(name=name)
    try:
        yield instance
    finally:
        instance.shutdown()
