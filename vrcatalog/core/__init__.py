"""Core utilities and exceptions for the VR Asset Catalog."""

from vrcatalog.core.exceptions import (
    CatalogAPIException,
    InvalidArgumentException,
    FailedPreconditionException,
    UnauthorizedException,
    PermissionDeniedException,
    NotFoundException,
    AssetNotFoundException,
    AccountNotFoundException,
    AbortedException,
    PayloadTooLargeException,
    InternalException,
)

__all__ = [
    "CatalogAPIException",
    "InvalidArgumentException",
    "FailedPreconditionException",
    "UnauthorizedException",
    "PermissionDeniedException",
    "NotFoundException",
    "AssetNotFoundException",
    "AccountNotFoundException",
    "AbortedException",
    "PayloadTooLargeException",
    "InternalException",
]
