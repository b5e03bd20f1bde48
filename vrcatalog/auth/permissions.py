"""
Asset visibility and mutability checks.

Three access levels, ordered PRIVATE < UNLISTED < PUBLIC. Single-asset reads
use ``can_view``; listings first narrow the candidate set per endpoint with
``candidate_access_levels`` and then still apply ``can_view`` to every item.
"""

import enum
from typing import Protocol

from vrcatalog.core.exceptions import AssetNotFoundException, PermissionDeniedException
from vrcatalog.models.asset import AccessLevel


class OwnedAsset(Protocol):
    id: str
    owner_id: str
    access_level: AccessLevel


class ListScope(str, enum.Enum):
    """Which listing endpoint a candidate set is built for."""
    GLOBAL = "global"    # ListAssets
    ACCOUNT = "account"  # ListAssetsByAccount


ACCESS_LEVEL_RANK: dict[AccessLevel, int] = {
    AccessLevel.PRIVATE: 0,
    AccessLevel.UNLISTED: 1,
    AccessLevel.PUBLIC: 2,
}

ALL_ACCESS_LEVELS = frozenset(AccessLevel)
PUBLIC_ONLY = frozenset({AccessLevel.PUBLIC})


def access_level_rank(level: AccessLevel) -> int:
    """Position of a level in the PRIVATE < UNLISTED < PUBLIC order."""
    return ACCESS_LEVEL_RANK[level]


def is_at_least(level: AccessLevel, minimum: AccessLevel) -> bool:
    """True if ``level`` is at least as open as ``minimum``."""
    return access_level_rank(level) >= access_level_rank(minimum)


def is_owner(asset: OwnedAsset, caller_id: str | None) -> bool:
    return caller_id is not None and asset.owner_id == caller_id


def can_view(asset: OwnedAsset, caller_id: str | None) -> bool:
    """
    Check if a caller may see an asset.

    Args:
        asset: Asset to check
        caller_id: Authenticated account ID, or None for anonymous callers

    Returns:
        True for PUBLIC and UNLISTED assets, and for any asset the caller owns
    """
    if is_owner(asset, caller_id):
        return True

    match asset.access_level:
        case AccessLevel.PUBLIC | AccessLevel.UNLISTED:
            return True
        case AccessLevel.PRIVATE:
            return False
        case _:
            return False


def can_mutate(asset: OwnedAsset, caller_id: str | None) -> bool:
    """Only the authenticated owner may change or delete an asset."""
    return is_owner(asset, caller_id)


def check_asset_visible(asset: OwnedAsset, caller_id: str | None) -> None:
    """
    Raise NotFound when the caller cannot see the asset.

    The error is the same one raised for an ID that does not exist, so a
    PRIVATE asset's existence is never revealed.
    """
    if not can_view(asset, caller_id):
        raise AssetNotFoundException(asset.id)


def check_asset_mutable(asset: OwnedAsset, caller_id: str | None) -> None:
    """
    Raise unless the caller may mutate the asset.

    Raises:
        AssetNotFoundException: If the caller cannot even see the asset
        PermissionDeniedException: If the asset is visible but not owned
    """
    check_asset_visible(asset, caller_id)
    if not can_mutate(asset, caller_id):
        raise PermissionDeniedException(
            message="Only the asset owner can modify or delete this asset",
            details={"asset_id": asset.id},
        )


def candidate_access_levels(
    scope: ListScope,
    caller_id: str | None,
    target_account_id: str | None = None,
) -> frozenset[AccessLevel]:
    """
    Access levels a listing endpoint may consider at all.

    ListAssets only ever lists PUBLIC assets. ListAssetsByAccount lists every
    asset of the target account when the caller is that account, otherwise
    only its PUBLIC assets.
    """
    match scope:
        case ListScope.GLOBAL:
            return PUBLIC_ONLY
        case ListScope.ACCOUNT:
            if caller_id is not None and caller_id == target_account_id:
                return ALL_ACCESS_LEVELS
            return PUBLIC_ONLY
        case _:
            raise ValueError(f"Unknown list scope: {scope}")
