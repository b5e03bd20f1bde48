"""
Storage abstraction layer for content element blobs.
"""

from vrcatalog.storage.base import StorageBackend, get_mime_type, ELEMENT_MIME_TYPES
from vrcatalog.storage.local import LocalStorageBackend
from vrcatalog.storage.factory import get_storage_backend, get_storage

__all__ = [
    "StorageBackend",
    "LocalStorageBackend",
    "get_storage_backend",
    "get_storage",
    "get_mime_type",
    "ELEMENT_MIME_TYPES",
]
