"""
Local filesystem storage backend.
Stores element files under LOCAL_STORAGE_PATH.
"""

from pathlib import Path

import aiofiles
import aiofiles.os

from vrcatalog.config import get_settings
from vrcatalog.core.exceptions import InternalException
from vrcatalog.storage.base import StorageBackend

settings = get_settings()


class LocalStorageBackend(StorageBackend):
    """Local filesystem storage for development and single-node deployments."""

    def __init__(self, base_path: str | None = None):
        self.base_path = Path(base_path or settings.LOCAL_STORAGE_PATH)
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _get_full_path(self, path: str) -> Path:
        full_path = (self.base_path / path).resolve()
        if not full_path.is_relative_to(self.base_path.resolve()):
            raise InternalException(
                "Storage path escapes the storage root",
                details={"path": path},
            )
        return full_path

    async def upload_bytes(self, data: bytes, path: str, content_type: str) -> str:
        full_path = self._get_full_path(path)

        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(full_path, "wb") as f:
                await f.write(data)
        except OSError as e:
            raise InternalException(
                f"Failed to store element: {e}",
                details={"path": path},
            )

        return path

    async def delete(self, path: str) -> bool:
        full_path = self._get_full_path(path)

        if not full_path.exists():
            return False

        try:
            await aiofiles.os.remove(full_path)
        except OSError as e:
            raise InternalException(
                f"Failed to delete element: {e}",
                details={"path": path},
            )

        # Remove now-empty parent directories up to the root
        parent = full_path.parent
        while parent != self.base_path.resolve():
            try:
                parent.rmdir()
            except OSError:
                break
            parent = parent.parent

        return True
