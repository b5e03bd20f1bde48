"""
Asset and AssetLike SQLAlchemy models.

Formats, tags and thumbnails are stored as JSON columns on the asset row so a
metadata update or a format replacement is a single-row write guarded by the
``version`` counter.
"""

import enum
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import (
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    JSON,
)
from sqlalchemy.orm import Mapped, mapped_column

from vrcatalog.db.base import Base, UTCDateTime


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AccessLevel(str, enum.Enum):
    """Asset visibility tiers, from most restrictive to most open."""
    PRIVATE = "PRIVATE"    # Only the owner can see it
    UNLISTED = "UNLISTED"  # Anyone with the ID, never listed globally
    PUBLIC = "PUBLIC"      # Anyone, listed


class AssetLicense(str, enum.Enum):
    """License an asset is published under."""
    UNKNOWN = "UNKNOWN"
    CREATIVE_COMMONS_BY = "CREATIVE_COMMONS_BY"
    CREATIVE_COMMONS_BY_ND = "CREATIVE_COMMONS_BY_ND"
    ALL_RIGHTS_RESERVED = "ALL_RIGHTS_RESERVED"


class Asset(Base):
    """
    Catalog asset.

    ``formats`` holds an ordered list of format objects::

        {"root_id": "...", "resource_ids": [...], "format_type": "GLTF2",
         "format_complexity": {...} | None, "format_scale": {...} | None}

    The first entry is the canonical format.
    """
    __tablename__ = "assets"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
        comment="Server-assigned asset identifier",
    )
    owner_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("accounts.id"),
        nullable=False,
        index=True,
        comment="Owning account, immutable after creation",
    )
    display_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="",
        comment="Human-readable asset name",
    )
    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        comment="Human-readable description",
    )
    tags: Mapped[list] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Owner-supplied tags, unique, insertion ordered",
    )
    admin_tags: Mapped[list] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Curator tags, not writable through the public API",
    )
    access_level: Mapped[AccessLevel] = mapped_column(
        Enum(AccessLevel),
        nullable=False,
        default=AccessLevel.PRIVATE,
        index=True,
        comment="Visibility tier",
    )
    license: Mapped[AssetLicense] = mapped_column(
        Enum(AssetLicense),
        nullable=False,
        default=AssetLicense.UNKNOWN,
        comment="Publication license",
    )
    formats: Mapped[list] = mapped_column(
        JSON,
        nullable=False,
        comment="Ordered format list, first is canonical",
    )
    thumbnail_ids: Mapped[list] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Ordered thumbnail element IDs",
    )
    remix_info: Mapped[dict | None] = mapped_column(
        JSON,
        nullable=True,
        default=None,
        comment='Remix lineage: {"source_asset_ids": [...]}',
    )
    camera_params: Mapped[dict | None] = mapped_column(
        JSON,
        nullable=True,
        default=None,
        comment='Rendering defaults: {"matrix": [16 floats], "field_of_view": ...}',
    )
    create_time: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=utcnow,
        index=True,
        comment="Creation timestamp, immutable",
    )
    update_time: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=utcnow,
        comment="Last modification timestamp",
    )
    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Optimistic concurrency counter",
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def format_type(self) -> str | None:
        """Element type of the canonical format's root."""
        if not self.formats:
            return None
        return self.formats[0].get("format_type")

    @property
    def remix_sources(self) -> list[str]:
        return list((self.remix_info or {}).get("source_asset_ids", []))

    def __repr__(self) -> str:
        return f"<Asset(id={self.id}, display_name={self.display_name}, access_level={self.access_level})>"


class AssetLike(Base):
    """An account's like of an asset. Backs the ``liked`` list filter."""
    __tablename__ = "asset_likes"

    account_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        primary_key=True,
    )
    asset_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("assets.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    create_time: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=utcnow,
    )

    def __repr__(self) -> str:
        return f"<AssetLike(account_id={self.account_id}, asset_id={self.asset_id})>"

