"""
ContentElement SQLAlchemy model.

A content element is an uploaded blob (geometry, material, texture, image).
Assets only ever refer to elements by ID.
"""

import enum
from datetime import datetime
from uuid import uuid4

from sqlalchemy import BigInteger, Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from vrcatalog.db.base import Base, UTCDateTime
from vrcatalog.models.asset import utcnow


class ElementType(str, enum.Enum):
    """Content element encodings."""
    TILT = "TILT"
    BLOCKS = "BLOCKS"
    OBJ = "OBJ"
    MTL = "MTL"
    FBX = "FBX"
    GLTF = "GLTF"
    GLTF2 = "GLTF2"
    GLB = "GLB"
    USDZ = "USDZ"
    PNG = "PNG"
    JPEG = "JPEG"
    GIF = "GIF"
    WEBP = "WEBP"
    BIN = "BIN"


# Element types a thumbnail may point at (browser-viewable images)
IMAGE_ELEMENT_TYPES = frozenset({
    ElementType.PNG,
    ElementType.JPEG,
    ElementType.GIF,
    ElementType.WEBP,
})

EXTENSION_ELEMENT_TYPES = {
    "tilt": ElementType.TILT,
    "blocks": ElementType.BLOCKS,
    "obj": ElementType.OBJ,
    "mtl": ElementType.MTL,
    "fbx": ElementType.FBX,
    "gltf": ElementType.GLTF2,
    "glb": ElementType.GLB,
    "usdz": ElementType.USDZ,
    "png": ElementType.PNG,
    "jpg": ElementType.JPEG,
    "jpeg": ElementType.JPEG,
    "gif": ElementType.GIF,
    "webp": ElementType.WEBP,
    "bin": ElementType.BIN,
}


def element_type_for_filename(filename: str) -> ElementType | None:
    """Guess the element type from a file extension."""
    _, dot, extension = filename.rpartition(".")
    if not dot:
        return None
    return EXTENSION_ELEMENT_TYPES.get(extension.lower())


class ContentElement(Base):
    """Uploaded content element owned by one account."""
    __tablename__ = "elements"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    owner_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("accounts.id"),
        nullable=False,
        index=True,
    )
    element_type: Mapped[ElementType] = mapped_column(
        Enum(ElementType),
        nullable=False,
    )
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_path: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        comment="Storage reference path",
    )
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    checksum: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="SHA-256 hash of file",
    )
    create_time: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=utcnow,
    )

    def __repr__(self) -> str:
        return f"<ContentElement(id={self.id}, element_type={self.element_type})>"
