"""
Custom exceptions for the VR Asset Catalog.

Every error the catalog surfaces to callers is one of these. The global
handler in ``vrcatalog.main`` renders them as ``{"error", "message", "details"}``.
"""

from typing import Any


class CatalogAPIException(Exception):
    """Base exception for all catalog errors."""

    def __init__(
        self,
        error: str,
        message: str,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        self.error = error
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to response dictionary."""
        response = {
            "error": self.error,
            "message": self.message,
        }
        if self.details:
            response["details"] = self.details
        return response


class InvalidArgumentException(CatalogAPIException):
    """400 - Malformed filter, order, mask, page token or format graph."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            error="invalid_argument",
            message=message,
            status_code=400,
            details=details,
        )


class FailedPreconditionException(CatalogAPIException):
    """400 - Request would break an invariant (last format, immutable field)."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            error="failed_precondition",
            message=message,
            status_code=400,
            details=details,
        )


class UnauthorizedException(CatalogAPIException):
    """401 - Missing or invalid identity token."""

    def __init__(self, message: str = "Valid token required"):
        super().__init__(
            error="unauthenticated",
            message=message,
            status_code=401,
        )


class PermissionDeniedException(CatalogAPIException):
    """403 - Resource is visible but the caller may not change it."""

    def __init__(self, message: str = "Permission denied", details: dict[str, Any] | None = None):
        super().__init__(
            error="permission_denied",
            message=message,
            status_code=403,
            details=details,
        )


class NotFoundException(CatalogAPIException):
    """404 - Resource does not exist or is hidden from the caller."""

    def __init__(self, kind: str, resource_id: str):
        super().__init__(
            error="not_found",
            message=f"{kind} with ID '{resource_id}' not found",
            status_code=404,
        )


class AssetNotFoundException(NotFoundException):
    """404 - Asset not found (also raised for assets the caller cannot view)."""

    def __init__(self, asset_id: str):
        super().__init__("Asset", asset_id)


class AccountNotFoundException(NotFoundException):
    """404 - Account not found."""

    def __init__(self, account_id: str):
        super().__init__("Account", account_id)


class AbortedException(CatalogAPIException):
    """409 - The record changed underneath a read-modify-write."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            error="aborted",
            message=message,
            status_code=409,
            details=details,
        )


class PayloadTooLargeException(CatalogAPIException):
    """413 - Element upload exceeds limit."""

    def __init__(self, max_size: int):
        max_size_mb = max_size / (1024 * 1024)
        super().__init__(
            error="payload_too_large",
            message=f"Maximum upload size exceeded ({max_size_mb:.0f}MB limit)",
            status_code=413,
        )


class InternalException(CatalogAPIException):
    """500 - Store or storage backend failure."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            error="internal",
            message=message,
            status_code=500,
            details=details,
        )
