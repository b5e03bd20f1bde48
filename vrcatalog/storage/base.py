"""
Abstract storage backend interface for content element blobs.
"""

from abc import ABC, abstractmethod

from vrcatalog.models.element import ElementType


class StorageBackend(ABC):
    """
    Abstract base class for element storage.

    The catalog stores element bytes here and keeps only the returned path
    on the element record.
    """

    @abstractmethod
    async def upload_bytes(self, data: bytes, path: str, content_type: str) -> str:
        """
        Store raw bytes.

        Args:
            data: Raw file bytes
            path: Destination path (e.g. "elements/{owner}/{id}/scene.gltf")
            content_type: MIME type of the content

        Returns:
            The storage path where the file was saved

        Raises:
            InternalException: If the write fails
        """

    @abstractmethod
    async def delete(self, path: str) -> bool:
        """
        Delete a stored file.

        Returns:
            True if deleted, False if the file didn't exist
        """


ELEMENT_MIME_TYPES = {
    ElementType.OBJ: "model/obj",
    ElementType.MTL: "model/mtl",
    ElementType.GLTF: "model/gltf+json",
    ElementType.GLTF2: "model/gltf+json",
    ElementType.GLB: "model/gltf-binary",
    ElementType.USDZ: "model/vnd.usdz+zip",
    ElementType.PNG: "image/png",
    ElementType.JPEG: "image/jpeg",
    ElementType.GIF: "image/gif",
    ElementType.WEBP: "image/webp",
}


def get_mime_type(element_type: ElementType) -> str:
    """Get the MIME type for an element type."""
    return ELEMENT_MIME_TYPES.get(element_type, "application/octet-stream")
