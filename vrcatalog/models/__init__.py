"""
SQLAlchemy ORM models for the VR Asset Catalog.
"""

from vrcatalog.models.asset import Asset, AssetLike, AccessLevel, AssetLicense
from vrcatalog.models.account import Account
from vrcatalog.models.element import ContentElement, ElementType, IMAGE_ELEMENT_TYPES

__all__ = [
    "Asset",
    "AssetLike",
    "AccessLevel",
    "AssetLicense",
    "Account",
    "ContentElement",
    "ElementType",
    "IMAGE_ELEMENT_TYPES",
]
