"""
Element service - registers uploaded content elements and resolves element
IDs referenced by asset formats and thumbnails.
"""

import hashlib
import logging
from collections.abc import Iterable
from pathlib import PurePath
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vrcatalog.core.exceptions import InvalidArgumentException
from vrcatalog.models.element import ContentElement, ElementType, element_type_for_filename
from vrcatalog.storage.base import StorageBackend, get_mime_type

logger = logging.getLogger(__name__)


class ElementService:
    """Service class for content element operations."""

    def __init__(self, db: AsyncSession, storage: StorageBackend | None = None):
        self.db = db
        self.storage = storage

    async def resolve_elements(self, element_ids: Iterable[str], owner_id: str) -> dict[str, ContentElement]:
        """
        Load the elements among ``element_ids`` that ``owner_id`` owns.

        IDs that are missing or owned by someone else are simply absent from
        the result; callers decide how to report them.
        """
        ids = set(element_ids)
        if not ids:
            return {}

        query = select(ContentElement).where(
            ContentElement.id.in_(ids),
            ContentElement.owner_id == owner_id,
        )
        result = await self.db.execute(query)
        return {element.id: element for element in result.scalars()}

    async def create(
        self,
        owner_id: str,
        file_name: str,
        data: bytes,
        element_type: ElementType | None = None,
    ) -> ContentElement:
        """
        Store an uploaded element and record it.

        Args:
            owner_id: Uploading account (must already exist)
            file_name: Client file name; its extension picks the type if
                ``element_type`` is not given
            data: File content
            element_type: Explicit element type

        Returns:
            Created ContentElement model
        """
        if self.storage is None:
            raise RuntimeError("ElementService needs a storage backend to create elements")

        name = PurePath(file_name).name
        if not name:
            raise InvalidArgumentException("A file name is required", details={"field": "file"})

        if element_type is None:
            element_type = element_type_for_filename(name)
            if element_type is None:
                raise InvalidArgumentException(
                    f"Cannot infer the element type of '{name}'",
                    details={"field": "elementType", "supported": [t.value for t in ElementType]},
                )

        element_id = str(uuid4())
        file_path = f"elements/{owner_id}/{element_id}/{name}"
        await self.storage.upload_bytes(data, file_path, get_mime_type(element_type))

        element = ContentElement(
            id=element_id,
            owner_id=owner_id,
            element_type=element_type,
            file_name=name,
            file_path=file_path,
            file_size=len(data),
            checksum=compute_checksum(data),
        )
        self.db.add(element)

        try:
            await self.db.flush()
        except SQLAlchemyError:
            logger.exception(f"Failed to register element {element_id}, removing stored file")
            await self.storage.delete(file_path)
            raise

        logger.info(f"Element created: {element_id} ({element_type.value}, {len(data)} bytes) by {owner_id}")
        return element


def compute_checksum(data: bytes) -> str:
    """Compute SHA-256 checksum of data."""
    return hashlib.sha256(data).hexdigest()
