"""
Storage backend factory.
Provides configuration-driven backend selection.
"""

from functools import lru_cache

from vrcatalog.config import get_settings
from vrcatalog.storage.base import StorageBackend
from vrcatalog.storage.local import LocalStorageBackend

settings = get_settings()


@lru_cache
def get_storage_backend() -> StorageBackend:
    """
    Get the configured storage backend (one instance per process).

    Raises:
        ValueError: If an unknown storage backend is configured
    """
    backend = settings.STORAGE_BACKEND.lower()

    if backend == "local":
        return LocalStorageBackend()
    raise ValueError(f"Unknown storage backend: {backend}")


def get_storage() -> StorageBackend:
    """
    Dependency function for FastAPI.

    Usage:
        @router.post("/elements")
        async def upload(storage: StorageBackend = Depends(get_storage)):
            ...
    """
    return get_storage_backend()
