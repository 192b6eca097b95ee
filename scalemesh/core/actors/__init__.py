"""
Ray actor implementations that back the ScaleMesh control plane.

Sub-packages:
    - management: Actors that expose node group balancing.
"""

from . import management  # noqa: F401

__all__ = [
    "management",
]
