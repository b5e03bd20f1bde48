"""
Pydantic schemas for asset request/response validation.
Field names are camelCase on the wire; snake_case is accepted on input too.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vrcatalog.models.asset import AccessLevel, AssetLicense
from vrcatalog.schemas.account import AccountResponse
from vrcatalog.schemas.field_mask import parse_field_mask

MAX_TAGS = 20


def validate_tag_list(tags: list[str]) -> list[str]:
    """Validate each tag is 1-50 characters."""
    for tag in tags:
        if not 1 <= len(tag) <= 50:
            raise ValueError(f"Each tag must be 1-50 characters, got: '{tag}'")
    return tags


# ===================
# Request Schemas
# ===================

class FormatRequest(BaseModel):
    """One encoding of an asset: a root element plus its dependencies."""

    root_id: str = Field(
        default="",
        alias="rootId",
        description="Element containing the root of the asset hierarchy",
    )
    resource_ids: list[str] = Field(
        default=[],
        alias="resourceIds",
        description="Elements the root depends on (materials, textures, ...)",
    )
    format_complexity: dict[str, Any] | None = Field(
        default=None,
        alias="formatComplexity",
        description='Self-reported stats, e.g. {"triangleCount": 1200, "lodHint": 1}',
    )
    format_scale: dict[str, Any] | None = Field(
        default=None,
        alias="formatScale",
        description="Real-world scale of the format, if any",
    )

    model_config = ConfigDict(populate_by_name=True)


class RemixInfo(BaseModel):
    """Assets this asset was remixed from."""

    source_asset_ids: list[str] = Field(
        default=[],
        alias="sourceAssetIds",
        max_length=50,
    )

    model_config = ConfigDict(populate_by_name=True)


class CameraParams(BaseModel):
    """Default camera for rendering the asset (right-handed coordinates)."""

    matrix: list[float] | None = Field(
        default=None,
        description="Column-major 4x4 camera transform",
    )
    field_of_view: float | None = Field(
        default=None,
        alias="fieldOfView",
        gt=0,
        lt=180,
        description="Vertical field of view in degrees",
    )

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("matrix")
    @classmethod
    def validate_matrix(cls, v: list[float] | None) -> list[float] | None:
        if v is not None and len(v) != 16:
            raise ValueError("matrix must have exactly 16 elements")
        return v


class AssetCreate(BaseModel):
    """Schema for creating a new asset (POST /assets)."""

    display_name: str = Field(
        ...,
        alias="displayName",
        min_length=1,
        max_length=255,
        description="Human-readable asset name",
    )
    description: str = Field(default="", max_length=5000)
    tags: list[str] = Field(
        default=[],
        max_length=MAX_TAGS,
        description="Classification and discovery tags (0-20 tags)",
    )
    access_level: AccessLevel = Field(
        default=AccessLevel.PRIVATE,
        alias="accessLevel",
        description="Visibility, PRIVATE unless given",
    )
    license: AssetLicense = Field(default=AssetLicense.UNKNOWN)
    formats: list[FormatRequest] = Field(
        default=[],
        description="Formats of the asset; the first is canonical",
    )
    thumbnail_ids: list[str] = Field(default=[], alias="thumbnailIds")
    remix_info: RemixInfo | None = Field(default=None, alias="remixInfo")
    camera_params: CameraParams | None = Field(default=None, alias="cameraParams")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str]) -> list[str]:
        return validate_tag_list(v)


class AssetPatch(BaseModel):
    """
    Asset fields carried by an update.
    Only the fields named in the update mask are applied; the rest is ignored.
    """

    asset_id: str | None = Field(default=None, alias="assetId")
    display_name: str = Field(default="", alias="displayName", max_length=255)
    description: str = Field(default="", max_length=5000)
    tags: list[str] = Field(default=[], max_length=MAX_TAGS)

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str]) -> list[str]:
        return validate_tag_list(v)


class AssetUpdateRequest(BaseModel):
    """Schema for PATCH /assets/{id}."""

    asset: AssetPatch = Field(default_factory=AssetPatch)
    update_mask: list[str] = Field(
        default=[],
        alias="updateMask",
        description="Fields to update: name, description, tags, or *",
    )
    new_thumbnail_id: str | None = Field(default=None, alias="newThumbnailId")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("update_mask", mode="before")
    @classmethod
    def split_mask(cls, v: Any) -> Any:
        return parse_field_mask(v)


class AssetDataUpdateRequest(BaseModel):
    """Schema for PATCH /assets/{id}:updateData (full format replacement)."""

    formats: list[FormatRequest] = Field(default=[])
    thumbnail_ids: list[str] = Field(
        default=[],
        alias="thumbnailIds",
        description="Replacement thumbnails; empty keeps the current ones",
    )

    model_config = ConfigDict(populate_by_name=True)


# ===================
# Response Schemas
# ===================

class FormatResponse(BaseModel):
    root_id: str = Field(alias="rootId")
    resource_ids: list[str] = Field(alias="resourceIds")
    format_type: str = Field(alias="formatType")
    format_complexity: dict[str, Any] | None = Field(default=None, alias="formatComplexity")
    format_scale: dict[str, Any] | None = Field(default=None, alias="formatScale")

    model_config = ConfigDict(populate_by_name=True)


class AssetResponse(BaseModel):
    """Standard JSON response for a single asset."""

    asset_id: str = Field(alias="assetId")
    owner_id: str = Field(alias="ownerId")
    display_name: str = Field(alias="displayName")
    description: str
    tags: list[str]
    access_level: AccessLevel = Field(alias="accessLevel")
    license: AssetLicense
    formats: list[FormatResponse]
    thumbnail_ids: list[str] = Field(alias="thumbnailIds")
    remix_info: RemixInfo | None = Field(default=None, alias="remixInfo")
    camera_params: CameraParams | None = Field(default=None, alias="cameraParams")
    create_time: datetime = Field(alias="createTime")
    update_time: datetime = Field(alias="updateTime")

    model_config = ConfigDict(populate_by_name=True)


class AssetListResponse(BaseModel):
    """One page of assets plus the public profiles of their owners."""

    assets: list[AssetResponse]
    next_page_token: str = Field(default="", alias="nextPageToken")
    total_items: int = Field(alias="totalItems")
    accounts: dict[str, AccountResponse] = Field(default={})

    model_config = ConfigDict(populate_by_name=True)
