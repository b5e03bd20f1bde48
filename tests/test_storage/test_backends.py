"""
Tests for storage backends.
"""

import pytest

from vrcatalog.core.exceptions import InternalException
from vrcatalog.models.element import ElementType
from vrcatalog.storage.base import get_mime_type
from vrcatalog.storage.local import LocalStorageBackend


class TestLocalStorageBackend:
    """Tests for local filesystem storage."""

    @pytest.fixture
    def storage(self, tmp_path) -> LocalStorageBackend:
        """Create a local storage backend for testing."""
        return LocalStorageBackend(base_path=str(tmp_path / "blobs"))

    @pytest.mark.asyncio
    async def test_upload_bytes(self, storage: LocalStorageBackend):
        """Test uploading bytes."""
        content = b"test file content"
        path = "elements/owner/el-1/scene.glb"

        result = await storage.upload_bytes(content, path, "model/gltf-binary")

        assert result == path
        assert (storage.base_path / path).read_bytes() == content

    @pytest.mark.asyncio
    async def test_delete(self, storage: LocalStorageBackend):
        """Test deleting a stored file prunes its empty directories."""
        path = "elements/owner/el-1/scene.glb"
        await storage.upload_bytes(b"glTF", path, "model/gltf-binary")

        assert await storage.delete(path) is True
        assert not (storage.base_path / "elements").exists()
        assert storage.base_path.exists()

    @pytest.mark.asyncio
    async def test_delete_missing(self, storage: LocalStorageBackend):
        assert await storage.delete("elements/nothing/here.obj") is False

    @pytest.mark.asyncio
    async def test_path_cannot_escape_root(self, storage: LocalStorageBackend):
        with pytest.raises(InternalException):
            await storage.upload_bytes(b"x", "../outside.bin", "application/octet-stream")


class TestMimeTypes:
    def test_known_types(self):
        assert get_mime_type(ElementType.GLB) == "model/gltf-binary"
        assert get_mime_type(ElementType.PNG) == "image/png"

    def test_unknown_defaults_to_octet_stream(self):
        assert get_mime_type(ElementType.TILT) == "application/octet-stream"
