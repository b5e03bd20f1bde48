"""Create catalog schema

Adds:
- accounts (identity-provider subjects, optimistic version counter)
- elements (uploaded content elements)
- assets (formats/tags/thumbnails as JSON, optimistic version counter)
- asset_likes (backs the liked list filter)

Revision ID: 001
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ACCESS_LEVELS = ("PRIVATE", "UNLISTED", "PUBLIC")
LICENSES = ("UNKNOWN", "CREATIVE_COMMONS_BY", "CREATIVE_COMMONS_BY_ND", "ALL_RIGHTS_RESERVED")
ELEMENT_TYPES = (
    "TILT", "BLOCKS", "OBJ", "MTL", "FBX", "GLTF", "GLTF2", "GLB", "USDZ",
    "PNG", "JPEG", "GIF", "WEBP", "BIN",
)


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.String(255), primary_key=True, comment="Identity provider subject"),
        sa.Column("display_name", sa.String(255), nullable=False, comment="Name from the identity provider"),
        sa.Column("description", sa.Text(), nullable=False, comment="Self-service profile description"),
        sa.Column("create_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("update_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
    )

    op.create_table(
        "elements",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("owner_id", sa.String(255), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("element_type", sa.Enum(*ELEMENT_TYPES, name="elementtype"), nullable=False),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("file_path", sa.String(500), nullable=False, comment="Storage reference path"),
        sa.Column("file_size", sa.BigInteger(), nullable=False),
        sa.Column("checksum", sa.String(64), nullable=False, comment="SHA-256 hash of file"),
        sa.Column("create_time", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_elements_owner_id", "elements", ["owner_id"])

    op.create_table(
        "assets",
        sa.Column("id", sa.String(36), primary_key=True, comment="Server-assigned asset identifier"),
        sa.Column("owner_id", sa.String(255), sa.ForeignKey("accounts.id"), nullable=False, comment="Owning account, immutable after creation"),
        sa.Column("display_name", sa.String(255), nullable=False, comment="Human-readable asset name"),
        sa.Column("description", sa.Text(), nullable=False, comment="Human-readable description"),
        sa.Column("tags", sa.JSON(), nullable=False, comment="Owner-supplied tags, unique, insertion ordered"),
        sa.Column("admin_tags", sa.JSON(), nullable=False, comment="Curator tags, not writable through the public API"),
        sa.Column("access_level", sa.Enum(*ACCESS_LEVELS, name="accesslevel"), nullable=False, comment="Visibility tier"),
        sa.Column("license", sa.Enum(*LICENSES, name="assetlicense"), nullable=False, comment="Publication license"),
        sa.Column("formats", sa.JSON(), nullable=False, comment="Ordered format list, first is canonical"),
        sa.Column("thumbnail_ids", sa.JSON(), nullable=False, comment="Ordered thumbnail element IDs"),
        sa.Column("remix_info", sa.JSON(), nullable=True, comment='Remix lineage: {"source_asset_ids": [...]}'),
        sa.Column("camera_params", sa.JSON(), nullable=True, comment="Rendering defaults"),
        sa.Column("create_time", sa.DateTime(timezone=True), nullable=False, comment="Creation timestamp, immutable"),
        sa.Column("update_time", sa.DateTime(timezone=True), nullable=False, comment="Last modification timestamp"),
        sa.Column("version", sa.Integer(), nullable=False, comment="Optimistic concurrency counter"),
    )
    op.create_index("ix_assets_owner_id", "assets", ["owner_id"])
    op.create_index("ix_assets_access_level", "assets", ["access_level"])
    op.create_index("ix_assets_create_time", "assets", ["create_time"])

    op.create_table(
        "asset_likes",
        sa.Column("account_id", sa.String(255), sa.ForeignKey("accounts.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("asset_id", sa.String(36), sa.ForeignKey("assets.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("create_time", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_asset_likes_asset_id", "asset_likes", ["asset_id"])


def downgrade() -> None:
    op.drop_index("ix_asset_likes_asset_id", table_name="asset_likes")
    op.drop_table("asset_likes")

    op.drop_index("ix_assets_create_time", table_name="assets")
    op.drop_index("ix_assets_access_level", table_name="assets")
    op.drop_index("ix_assets_owner_id", table_name="assets")
    op.drop_table("assets")

    op.drop_index("ix_elements_owner_id", table_name="elements")
    op.drop_table("elements")

    op.drop_table("accounts")

    sa.Enum(name="assetlicense").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="accesslevel").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="elementtype").drop(op.get_bind(), checkfirst=True)
