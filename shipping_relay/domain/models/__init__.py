"""
Domain models for business entities.

These models represent core business concepts and contain
business logic and invariants.
"""

from .region import Region
from .shipping_line import EditMode, EditRequest, EditResult, ShippingLine, TargetShippingLine

__all__ = ["Region", "ShippingLine", "TargetShippingLine", "EditMode", "EditRequest", "EditResult"]
