"""
Tests for element upload endpoint.
"""

import io

import pytest
from httpx import AsyncClient

from vrcatalog.api.v1 import elements as elements_api


@pytest.mark.asyncio
async def test_upload_infers_type(client: AsyncClient, test_storage):
    content = b'{"asset": {"version": "2.0"}}'

    response = await client.post(
        "/v1/elements",
        files={"file": ("scene.gltf", io.BytesIO(content), "model/gltf+json")},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["elementType"] == "GLTF2"
    assert data["fileName"] == "scene.gltf"
    assert data["fileSize"] == len(content)
    assert len(data["checksum"]) == 64
    assert (test_storage.base_path / "elements" / "account-alice" / data["elementId"] / "scene.gltf").exists()


@pytest.mark.asyncio
async def test_upload_with_explicit_type(client: AsyncClient):
    response = await client.post(
        "/v1/elements",
        files={"file": ("sketch.data", io.BytesIO(b"..."), "application/octet-stream")},
        data={"elementType": "TILT"},
    )

    assert response.status_code == 201
    assert response.json()["elementType"] == "TILT"


@pytest.mark.asyncio
async def test_upload_unknown_extension(client: AsyncClient):
    response = await client.post(
        "/v1/elements",
        files={"file": ("notes.txt", io.BytesIO(b"hello"), "text/plain")},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_argument"


@pytest.mark.asyncio
async def test_upload_too_large(client: AsyncClient, monkeypatch):
    monkeypatch.setattr(elements_api.settings, "MAX_ELEMENT_UPLOAD_SIZE", 4)

    response = await client.post(
        "/v1/elements",
        files={"file": ("scene.glb", io.BytesIO(b"0123456789"), "model/gltf-binary")},
    )

    assert response.status_code == 413
    assert response.json()["error"] == "payload_too_large"


@pytest.mark.asyncio
async def test_upload_requires_authentication(client: AsyncClient, identity):
    identity.use(None)

    response = await client.post(
        "/v1/elements",
        files={"file": ("scene.glb", io.BytesIO(b"glTF"), "model/gltf-binary")},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_other_accounts_element_cannot_be_referenced(client: AsyncClient, upload_element, identity):
    element_id = await upload_element("scene.glb", b"glTF")
    identity.use("account-bob")

    response = await client.post(
        "/v1/assets",
        json={"displayName": "Borrowed", "formats": [{"rootId": element_id}]},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_argument"
