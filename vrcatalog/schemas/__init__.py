"""
Pydantic schemas for request/response validation.
"""

from vrcatalog.schemas.account import AccountPatch, AccountResponse, AccountUpdateRequest
from vrcatalog.schemas.asset import (
    AssetCreate,
    AssetDataUpdateRequest,
    AssetListResponse,
    AssetPatch,
    AssetResponse,
    AssetUpdateRequest,
    CameraParams,
    FormatRequest,
    FormatResponse,
    RemixInfo,
)
from vrcatalog.schemas.element import ElementResponse
from vrcatalog.schemas.error import ErrorResponse

__all__ = [
    # Account schemas
    "AccountPatch",
    "AccountResponse",
    "AccountUpdateRequest",
    # Asset schemas
    "AssetCreate",
    "AssetDataUpdateRequest",
    "AssetListResponse",
    "AssetPatch",
    "AssetResponse",
    "AssetUpdateRequest",
    "CameraParams",
    "FormatRequest",
    "FormatResponse",
    "RemixInfo",
    # Element schemas
    "ElementResponse",
    # Error schemas
    "ErrorResponse",
]
