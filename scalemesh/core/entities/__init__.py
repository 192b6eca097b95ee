"""
Domain entities used throughout the ScaleMesh balancing core.
"""

from .node_group import NodeGroup, ScaleUpInfo  # noqa: F401
from .node_template import NodeTemplate, Taint, parse_resources  # noqa: F401

__all__ = [
    "NodeGroup",
    "NodeTemplate",
    "ScaleUpInfo",
    "Taint",
    "parse_resources",
]
