"""
Tests for asset endpoints.
"""

import pytest
from httpx import AsyncClient

OWNER_ID = "account-alice"
OTHER_ID = "account-bob"


@pytest.mark.asyncio
async def test_list_assets_empty(client: AsyncClient):
    """Test listing assets when the catalog is empty."""
    response = await client.get("/v1/assets")

    assert response.status_code == 200
    data = response.json()
    assert data["assets"] == []
    assert data["totalItems"] == 0
    assert data["nextPageToken"] == ""
    assert data["accounts"] == {}


@pytest.mark.asyncio
async def test_create_asset(client: AsyncClient, upload_element):
    """Test creating a new asset from uploaded elements."""
    root_id = await upload_element("model.obj", b"v 0 0 0\n")
    material_id = await upload_element("model.mtl", b"newmtl red\n")
    thumbnail_id = await upload_element("thumb.png", b"\x89PNG")

    response = await client.post(
        "/v1/assets",
        json={
            "displayName": "Red cube",
            "description": "A cube",
            "tags": ["shapes", "shapes", "red"],
            "formats": [{
                "rootId": root_id,
                "resourceIds": [material_id],
                "formatComplexity": {"triangleCount": 12},
            }],
            "thumbnailIds": [thumbnail_id],
            "cameraParams": {"fieldOfView": 60},
        },
    )

    assert response.status_code == 201
    data = response.json()
    assert data["ownerId"] == OWNER_ID
    assert data["accessLevel"] == "PRIVATE"
    assert data["license"] == "UNKNOWN"
    assert data["tags"] == ["shapes", "red"]
    assert data["formats"] == [{
        "rootId": root_id,
        "resourceIds": [material_id],
        "formatType": "OBJ",
        "formatComplexity": {"triangleCount": 12},
        "formatScale": None,
    }]
    assert data["thumbnailIds"] == [thumbnail_id]
    assert data["cameraParams"]["fieldOfView"] == 60
    assert data["createTime"] == data["updateTime"]


@pytest.mark.asyncio
async def test_create_asset_requires_authentication(client: AsyncClient, identity):
    identity.use(None)
    response = await client.post("/v1/assets", json={"displayName": "x", "formats": [{"rootId": "a"}]})

    assert response.status_code == 401
    assert response.json()["error"] == "unauthenticated"


@pytest.mark.asyncio
async def test_create_asset_with_unknown_element(client: AsyncClient):
    response = await client.post(
        "/v1/assets",
        json={"displayName": "Broken", "formats": [{"rootId": "no-such-element"}]},
    )

    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "invalid_argument"
    assert data["details"]["field"] == "formats[0].root_id"


@pytest.mark.asyncio
async def test_create_asset_without_formats(client: AsyncClient):
    response = await client.post("/v1/assets", json={"displayName": "Empty"})

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_argument"


@pytest.mark.asyncio
async def test_malformed_body_is_invalid_argument(client: AsyncClient):
    response = await client.post("/v1/assets", json={"displayName": "", "accessLevel": "SECRET"})

    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "invalid_argument"
    assert data["details"]["errors"]


@pytest.mark.asyncio
async def test_get_asset(client: AsyncClient, create_asset):
    created = await create_asset()

    response = await client.get(f"/v1/assets/{created['assetId']}")

    assert response.status_code == 200
    assert response.json() == created


@pytest.mark.asyncio
async def test_get_asset_not_found(client: AsyncClient):
    response = await client.get("/v1/assets/non-existent-id")

    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


@pytest.mark.asyncio
async def test_private_asset_is_indistinguishable_from_missing(client: AsyncClient, create_asset, identity):
    private = await create_asset()
    identity.use(OTHER_ID)

    hidden = await client.get(f"/v1/assets/{private['assetId']}")
    missing = await client.get("/v1/assets/00000000-0000-0000-0000-000000000000")

    assert hidden.status_code == missing.status_code == 404
    assert hidden.json() == {
        "error": "not_found",
        "message": f"Asset with ID '{private['assetId']}' not found",
    }
    assert missing.json() == {
        "error": "not_found",
        "message": "Asset with ID '00000000-0000-0000-0000-000000000000' not found",
    }
    assert hidden.headers.keys() == missing.headers.keys()


@pytest.mark.asyncio
async def test_private_asset_never_listed(client: AsyncClient, create_asset, identity):
    await create_asset(accessLevel="PRIVATE")
    await create_asset(accessLevel="UNLISTED")
    identity.use(OTHER_ID)

    listed = await client.get("/v1/assets")
    by_account = await client.get(f"/v1/accounts/{OWNER_ID}/assets")

    assert listed.json()["totalItems"] == 0
    assert by_account.json()["totalItems"] == 0


@pytest.mark.asyncio
async def test_unlisted_asset_visible_but_not_mutable(client: AsyncClient, create_asset, identity):
    unlisted = await create_asset(accessLevel="UNLISTED")
    identity.use(OTHER_ID)

    get_response = await client.get(f"/v1/assets/{unlisted['assetId']}")
    patch_response = await client.patch(
        f"/v1/assets/{unlisted['assetId']}",
        json={"asset": {"displayName": "Mine now"}, "updateMask": ["name"]},
    )
    delete_response = await client.delete(f"/v1/assets/{unlisted['assetId']}")

    assert get_response.status_code == 200
    assert patch_response.status_code == 403
    assert patch_response.json()["error"] == "permission_denied"
    assert delete_response.status_code == 403


@pytest.mark.asyncio
async def test_description_only_mask(client: AsyncClient, create_asset):
    created = await create_asset(displayName="Original", tags=["keep"])

    response = await client.patch(
        f"/v1/assets/{created['assetId']}",
        json={
            "asset": {"displayName": "Ignored", "description": "New words", "tags": []},
            "updateMask": ["description"],
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["description"] == "New words"
    assert data["displayName"] == "Original"
    assert data["tags"] == ["keep"]


@pytest.mark.asyncio
async def test_update_mask_accepts_comma_string(client: AsyncClient, create_asset):
    created = await create_asset()

    response = await client.patch(
        f"/v1/assets/{created['assetId']}",
        json={"asset": {"displayName": "Both", "tags": ["a"]}, "updateMask": "name, tags"},
    )

    assert response.status_code == 200
    assert response.json()["displayName"] == "Both"
    assert response.json()["tags"] == ["a"]


@pytest.mark.asyncio
async def test_repeated_update_is_idempotent(client: AsyncClient, create_asset):
    created = await create_asset()
    body = {"asset": {"description": "Same"}, "updateMask": ["description"]}

    first = await client.patch(f"/v1/assets/{created['assetId']}", json=body)
    second = await client.patch(f"/v1/assets/{created['assetId']}", json=body)

    assert first.json() == second.json()


@pytest.mark.asyncio
@pytest.mark.parametrize("mask,error", [
    (["owner_id"], "failed_precondition"),
    (["create_time"], "failed_precondition"),
    (["access_level"], "invalid_argument"),
    (["formats"], "invalid_argument"),
    ([], "invalid_argument"),
])
async def test_update_mask_rejections(client: AsyncClient, create_asset, mask, error):
    created = await create_asset()

    response = await client.patch(
        f"/v1/assets/{created['assetId']}",
        json={"asset": {"displayName": "x"}, "updateMask": mask},
    )

    assert response.status_code == 400
    assert response.json()["error"] == error


@pytest.mark.asyncio
async def test_new_thumbnail(client: AsyncClient, create_asset, upload_element):
    created = await create_asset()
    thumbnail_id = await upload_element("new.jpg", b"\xff\xd8\xff")

    response = await client.patch(
        f"/v1/assets/{created['assetId']}",
        json={"newThumbnailId": thumbnail_id},
    )

    assert response.status_code == 200
    assert response.json()["thumbnailIds"] == [thumbnail_id]


@pytest.mark.asyncio
async def test_update_data_replaces_formats(client: AsyncClient, create_asset, upload_element):
    created = await create_asset()
    glb_id = await upload_element("scene.glb", b"glTF")

    response = await client.patch(
        f"/v1/assets/{created['assetId']}:updateData",
        json={"formats": [{"rootId": glb_id}]},
    )

    assert response.status_code == 200
    data = response.json()
    assert [fmt["formatType"] for fmt in data["formats"]] == ["GLB"]
    assert data["thumbnailIds"] == created["thumbnailIds"]


@pytest.mark.asyncio
async def test_update_data_round_trip_is_a_no_op(client: AsyncClient, create_asset):
    created = await create_asset()

    response = await client.patch(
        f"/v1/assets/{created['assetId']}:updateData",
        json={"formats": created["formats"]},
    )

    assert response.status_code == 200
    assert response.json() == created


@pytest.mark.asyncio
async def test_update_data_needs_a_format(client: AsyncClient, create_asset):
    created = await create_asset()

    response = await client.patch(f"/v1/assets/{created['assetId']}:updateData", json={"formats": []})

    assert response.status_code == 400
    assert response.json()["error"] == "failed_precondition"


@pytest.mark.asyncio
async def test_delete_asset(client: AsyncClient, create_asset):
    created = await create_asset()

    response = await client.delete(f"/v1/assets/{created['assetId']}")
    assert response.status_code == 204

    response = await client.get(f"/v1/assets/{created['assetId']}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_anonymous_mutation_of_private_asset_is_not_found(client: AsyncClient, create_asset, identity):
    private = await create_asset()
    missing_id = "00000000-0000-0000-0000-000000000000"
    identity.use(None)

    for asset_id in (private["assetId"], missing_id):
        patch = await client.patch(
            f"/v1/assets/{asset_id}",
            json={"asset": {"displayName": "Hijacked"}, "updateMask": ["name"]},
        )
        update_data = await client.patch(
            f"/v1/assets/{asset_id}:updateData",
            json={"formats": [{"rootId": private["formats"][0]["rootId"]}]},
        )
        delete = await client.delete(f"/v1/assets/{asset_id}")

        for response in (patch, update_data, delete):
            assert response.status_code == 404
            assert response.json() == {
                "error": "not_found",
                "message": f"Asset with ID '{asset_id}' not found",
            }


@pytest.mark.asyncio
async def test_anonymous_mutation_of_visible_asset_requires_authentication(
    client: AsyncClient, create_asset, identity
):
    public = await create_asset(accessLevel="PUBLIC")
    identity.use(None)

    response = await client.delete(f"/v1/assets/{public['assetId']}")

    assert response.status_code == 401
    assert response.json()["error"] == "unauthenticated"


@pytest.mark.asyncio
async def test_like_and_unlike(client: AsyncClient, create_asset, identity):
    created = await create_asset(accessLevel="PUBLIC")
    identity.use(OTHER_ID)

    assert (await client.put(f"/v1/assets/{created['assetId']}/like")).status_code == 204
    liked = await client.get("/v1/assets", params={"filter": "liked:true"})
    assert [a["assetId"] for a in liked.json()["assets"]] == [created["assetId"]]

    assert (await client.delete(f"/v1/assets/{created['assetId']}/like")).status_code == 204
    liked = await client.get("/v1/assets", params={"filter": "liked:true"})
    assert liked.json()["assets"] == []


@pytest.mark.asyncio
async def test_category_filter(client: AsyncClient, create_asset):
    cat = await create_asset(accessLevel="PUBLIC", tags=["animals"])
    await create_asset(accessLevel="PUBLIC", tags=["vehicles"])
    dog = await create_asset(accessLevel="PUBLIC", tags=["animals", "pets"])

    response = await client.get("/v1/assets", params={"filter": "category:animals"})

    assert response.status_code == 200
    data = response.json()
    assert [a["assetId"] for a in data["assets"]] == [dog["assetId"], cat["assetId"]]
    assert data["totalItems"] == 2
    assert data["accounts"][OWNER_ID]["displayName"] == "Alice"


@pytest.mark.asyncio
@pytest.mark.parametrize("params", [
    {"filter": "colour:red"},
    {"filter": "license:MIT"},
    {"order_by": "display_name"},
    {"page_token": "garbage"},
])
async def test_invalid_listing_parameters(client: AsyncClient, params):
    response = await client.get("/v1/assets", params=params)

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_argument"


@pytest.mark.asyncio
async def test_pagination(client: AsyncClient, create_asset):
    for i in range(5):
        await create_asset(accessLevel="PUBLIC", displayName=f"Asset {i}")

    everything = (await client.get("/v1/assets")).json()
    assert everything["totalItems"] == 5

    collected, token = [], ""
    while True:
        params = {"page_size": 2}
        if token:
            params["page_token"] = token
        page = (await client.get("/v1/assets", params=params)).json()
        assert page["totalItems"] == 5
        assert len(page["assets"]) <= 2
        collected.extend(a["assetId"] for a in page["assets"])
        token = page["nextPageToken"]
        if not token:
            break

    assert collected == [a["assetId"] for a in everything["assets"]]


@pytest.mark.asyncio
async def test_non_positive_page_size_uses_default(client: AsyncClient, create_asset):
    await create_asset(accessLevel="PUBLIC")

    response = await client.get("/v1/assets", params={"page_size": 0})

    assert response.status_code == 200
    assert response.json()["totalItems"] == 1
    assert len(response.json()["assets"]) == 1
