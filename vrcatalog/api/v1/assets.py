"""
Asset endpoints.

``PATCH /assets/{asset_id}:updateData`` is declared before
``PATCH /assets/{asset_id}``; the plain route would otherwise capture it.
"""

from fastapi import APIRouter, Query

from vrcatalog.api.v1.serializers import asset_to_response, page_to_response
from vrcatalog.auth.dependencies import CurrentCaller, OptionalCaller
from vrcatalog.dependencies import DbSession
from vrcatalog.schemas.asset import (
    AssetCreate,
    AssetDataUpdateRequest,
    AssetListResponse,
    AssetResponse,
    AssetUpdateRequest,
)
from vrcatalog.schemas.error import ErrorResponse
from vrcatalog.services.catalog_service import CatalogService

router = APIRouter()

FILTER_DESCRIPTION = (
    "Comma-separated key:value terms, all of which must match. Keys: account_id, "
    "admin_tag, category, format_type, license, liked. Backslash escapes ',' ':' and '\\'."
)
ORDER_BY_DESCRIPTION = "Comma-separated fields with optional asc/desc. Default: create_time desc"


@router.get("", response_model=AssetListResponse)
async def list_assets(
    db: DbSession,
    caller: OptionalCaller,
    filter_str: str | None = Query(default=None, alias="filter", description=FILTER_DESCRIPTION),
    order_by: str | None = Query(default=None, description=ORDER_BY_DESCRIPTION),
    page_size: int | None = Query(default=None, description="Defaults to 100 when unset or not positive"),
    page_token: str | None = Query(default=None, description="nextPageToken of the previous page"),
):
    """
    List PUBLIC assets of all accounts.

    UNLISTED and PRIVATE assets never appear here, whoever is asking.
    """
    page, accounts = await CatalogService(db).list_assets(
        caller,
        filter_str=filter_str,
        order_by=order_by,
        page_size=page_size,
        page_token=page_token,
    )
    return page_to_response(page, accounts)


@router.get(
    "/{asset_id}",
    response_model=AssetResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_asset(asset_id: str, db: DbSession, caller: OptionalCaller):
    """
    Get a single asset.

    PRIVATE assets of other accounts are reported exactly like missing ones.
    """
    asset = await CatalogService(db).get_asset(asset_id, caller)
    return asset_to_response(asset)


@router.post(
    "",
    response_model=AssetResponse,
    status_code=201,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
async def create_asset(data: AssetCreate, db: DbSession, caller: CurrentCaller):
    """
    Create an asset owned by the caller.

    Every format root, resource and thumbnail must be an element the caller
    uploaded. The access level defaults to PRIVATE.
    """
    asset = await CatalogService(db).create_asset(data, caller)
    return asset_to_response(asset)


@router.patch(
    "/{asset_id}:updateData",
    response_model=AssetResponse,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_asset_data(
    asset_id: str,
    data: AssetDataUpdateRequest,
    db: DbSession,
    caller: OptionalCaller,
):
    """
    Replace the asset's formats.

    The whole format list is swapped in one write. Thumbnails are replaced only
    when ``thumbnailIds`` is non-empty.
    """
    asset = await CatalogService(db).update_asset_data(asset_id, data, caller)
    return asset_to_response(asset)


@router.patch(
    "/{asset_id}",
    response_model=AssetResponse,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def update_asset(
    asset_id: str,
    data: AssetUpdateRequest,
    db: DbSession,
    caller: OptionalCaller,
):
    """
    Update asset metadata.

    Only the fields named in ``updateMask`` (name, description, tags, or *) are
    written. ``newThumbnailId`` replaces the thumbnails with a single image.
    """
    asset = await CatalogService(db).update_asset(asset_id, data, caller)
    return asset_to_response(asset)


@router.delete(
    "/{asset_id}",
    status_code=204,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_asset(asset_id: str, db: DbSession, caller: OptionalCaller):
    """
    Delete an asset.
    This operation cannot be undone.
    """
    await CatalogService(db).delete_asset(asset_id, caller)
    return None


@router.put("/{asset_id}/like", status_code=204, responses={404: {"model": ErrorResponse}})
async def like_asset(asset_id: str, db: DbSession, caller: CurrentCaller):
    """Like an asset. Liked assets can be listed with the ``liked:true`` filter."""
    await CatalogService(db).like_asset(asset_id, caller)
    return None


@router.delete("/{asset_id}/like", status_code=204, responses={404: {"model": ErrorResponse}})
async def unlike_asset(asset_id: str, db: DbSession, caller: CurrentCaller):
    await CatalogService(db).unlike_asset(asset_id, caller)
    return None
