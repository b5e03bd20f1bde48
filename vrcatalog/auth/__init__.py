"""
Authentication and authorization for the VR Asset Catalog.
"""

from vrcatalog.auth.jwt import Caller, validate_token, extract_caller, fetch_jwks
from vrcatalog.auth.permissions import (
    ListScope,
    access_level_rank,
    is_at_least,
    can_view,
    can_mutate,
    check_asset_visible,
    check_asset_mutable,
    candidate_access_levels,
)
from vrcatalog.auth.dependencies import (
    get_current_caller,
    get_optional_caller,
    CurrentCaller,
    OptionalCaller,
)

__all__ = [
    # Identity
    "Caller",
    "validate_token",
    "extract_caller",
    "fetch_jwks",
    # Access control
    "ListScope",
    "access_level_rank",
    "is_at_least",
    "can_view",
    "can_mutate",
    "check_asset_visible",
    "check_asset_mutable",
    "candidate_access_levels",
    # Dependencies
    "get_current_caller",
    "get_optional_caller",
    "CurrentCaller",
    "OptionalCaller",
]
