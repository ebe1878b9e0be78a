"""
Validator services for inbound Flow requests.
"""

from .request_validator import (
    RequestValidator,
    canonicalize_order_ref,
    check_secret,
    parse_dry_run,
    require_title,
    resolve_region,
    validate_domain,
)

__all__ = [
    "RequestValidator",
    "validate_domain",
    "resolve_region",
    "check_secret",
    "canonicalize_order_ref",
    "require_title",
    "parse_dry_run",
]
