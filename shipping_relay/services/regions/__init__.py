"""
Region services: storefront domain to credentials resolution.
"""

from .registry import RegionRegistry, build_region_registry

__all__ = ["RegionRegistry", "build_region_registry"]
