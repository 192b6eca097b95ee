"""
Public facing controller facades for ScaleMesh.
"""

from .ray_balancer import RayBalancer  # noqa: F401

__all__ = ["RayBalancer"]
