"""
Pydantic schemas of the API v1 (request/response documentation).
"""

from .flow_schemas import (
    EditShippingLinesBody,
    EditShippingLinesResponse,
    ErrorResponse,
    HealthResponse,
)

__all__ = ["EditShippingLinesBody", "EditShippingLinesResponse", "ErrorResponse", "HealthResponse"]
