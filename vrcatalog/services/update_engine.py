"""
Field-mask updates for assets and accounts.

A mask names which fields of a patch to copy onto the stored record. Only the
fields in the per-entity tables below can be written this way; everything is
checked before the first field is touched, and masked values are copied as
given, so an empty string or empty tag list clears the field.

Every apply function returns the names of the fields that actually changed.
Applying the same patch twice changes nothing the second time.
"""

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from vrcatalog.core.exceptions import FailedPreconditionException, InvalidArgumentException

WILDCARD = "*"

Setter = Callable[[Any, Any], bool]


def _assign(target: Any, attribute: str, value: Any) -> bool:
    if getattr(target, attribute) == value:
        return False
    setattr(target, attribute, value)
    return True


def _set_display_name(target: Any, patch: Any) -> bool:
    return _assign(target, "display_name", patch.display_name)


def _set_description(target: Any, patch: Any) -> bool:
    return _assign(target, "description", patch.description)


def _set_tags(target: Any, patch: Any) -> bool:
    return _assign(target, "tags", list(dict.fromkeys(patch.tags)))


# Mask path -> field it writes
ASSET_MASK_PATHS: dict[str, str] = {
    "name": "display_name",
    "display_name": "display_name",
    "description": "description",
    "tag": "tags",
    "tags": "tags",
}
ASSET_SETTERS: dict[str, Setter] = {
    "display_name": _set_display_name,
    "description": _set_description,
    "tags": _set_tags,
}
ASSET_IDENTITY_FIELDS = frozenset({"asset_id", "id", "owner_id", "account_id", "create_time"})

ACCOUNT_MASK_PATHS: dict[str, str] = {
    "description": "description",
}
ACCOUNT_SETTERS: dict[str, Setter] = {
    "description": _set_description,
}
ACCOUNT_IDENTITY_FIELDS = frozenset({"account_id", "id", "create_time"})


def resolve_mask(
    paths: Iterable[str],
    mask_paths: Mapping[str, str],
    identity_fields: frozenset[str],
    entity: str,
) -> list[str]:
    """
    Turn mask paths into the distinct fields they write.

    Raises:
        FailedPreconditionException: If a path names an identity field
        InvalidArgumentException: If a path is outside the allow-list
    """
    fields: dict[str, None] = {}
    for raw_path in paths:
        path = raw_path.strip()
        if path == WILDCARD:
            fields.update(dict.fromkeys(mask_paths.values()))
        elif path in mask_paths:
            fields[mask_paths[path]] = None
        elif path in identity_fields:
            raise FailedPreconditionException(
                f"Field '{path}' of {entity} is immutable",
                details={"field": path},
            )
        else:
            raise InvalidArgumentException(
                f"Field '{path}' of {entity} cannot be updated",
                details={"field": path, "allowed": sorted(mask_paths) + [WILDCARD]},
            )
    return list(fields)


def apply_asset_mask(
    asset: Any,
    patch: Any,
    mask: Iterable[str],
    new_thumbnail_id: str | None = None,
) -> set[str]:
    """
    Apply a masked metadata patch to an asset.

    Args:
        asset: Stored asset to update in place
        patch: Object carrying ``display_name``, ``description`` and ``tags``
        mask: Mask paths; ``*`` selects every updatable field
        new_thumbnail_id: Already validated thumbnail element that replaces
            the thumbnail list, or None to keep it

    Returns:
        Names of the fields that changed
    """
    fields = resolve_mask(mask, ASSET_MASK_PATHS, ASSET_IDENTITY_FIELDS, "asset")
    if not fields and new_thumbnail_id is None:
        raise InvalidArgumentException(
            "update_mask must name at least one field",
            details={"allowed": sorted(ASSET_MASK_PATHS) + [WILDCARD]},
        )

    changed = {field for field in fields if ASSET_SETTERS[field](asset, patch)}
    if new_thumbnail_id is not None and _assign(asset, "thumbnail_ids", [new_thumbnail_id]):
        changed.add("thumbnail_ids")
    return changed


def apply_account_mask(account: Any, patch: Any, mask: Iterable[str]) -> set[str]:
    """Apply a masked patch to an account. Returns the changed field names."""
    fields = resolve_mask(mask, ACCOUNT_MASK_PATHS, ACCOUNT_IDENTITY_FIELDS, "account")
    if not fields:
        raise InvalidArgumentException(
            "update_mask must name at least one field",
            details={"allowed": sorted(ACCOUNT_MASK_PATHS) + [WILDCARD]},
        )
    return {field for field in fields if ACCOUNT_SETTERS[field](account, patch)}


def apply_format_replacement(
    asset: Any,
    formats: list[dict[str, Any]],
    thumbnail_ids: list[str] | None = None,
) -> set[str]:
    """
    Swap in a validated format list, and thumbnails when given.
    Returns the changed field names.
    """
    changed = set()
    if _assign(asset, "formats", formats):
        changed.add("formats")
    if thumbnail_ids is not None and _assign(asset, "thumbnail_ids", thumbnail_ids):
        changed.add("thumbnail_ids")
    return changed
