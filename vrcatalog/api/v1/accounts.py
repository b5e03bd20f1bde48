"""
Account endpoints. ``me`` may be used in place of the caller's account ID.
"""

from fastapi import APIRouter, Query

from vrcatalog.api.v1.serializers import account_to_response, page_to_response
from vrcatalog.auth.dependencies import CurrentCaller, OptionalCaller
from vrcatalog.dependencies import DbSession
from vrcatalog.schemas.account import AccountResponse, AccountUpdateRequest
from vrcatalog.schemas.asset import AssetListResponse
from vrcatalog.schemas.error import ErrorResponse
from vrcatalog.services.catalog_service import CatalogService

router = APIRouter()


@router.get(
    "/{account_id}",
    response_model=AccountResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_account(account_id: str, db: DbSession, caller: OptionalCaller):
    """Get an account's public profile."""
    account = await CatalogService(db).get_account(account_id, caller)
    return account_to_response(account)


@router.patch(
    "/{account_id}",
    response_model=AccountResponse,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_account(
    account_id: str,
    data: AccountUpdateRequest,
    db: DbSession,
    caller: CurrentCaller,
):
    """Update the caller's own account. Only ``description`` is writable."""
    account = await CatalogService(db).update_account(account_id, data, caller)
    return account_to_response(account)


@router.get(
    "/{account_id}/assets",
    response_model=AssetListResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def list_account_assets(
    account_id: str,
    db: DbSession,
    caller: OptionalCaller,
    filter_str: str | None = Query(default=None, alias="filter"),
    order_by: str | None = Query(default=None),
    page_size: int | None = Query(default=None, description="Defaults to 100, at most 1000"),
    page_token: str | None = Query(default=None),
):
    """
    List one account's assets.

    The account itself sees all of its assets; everyone else sees only the
    PUBLIC ones.
    """
    page, accounts = await CatalogService(db).list_assets_by_account(
        account_id,
        caller,
        filter_str=filter_str,
        order_by=order_by,
        page_size=page_size,
        page_token=page_token,
    )
    return page_to_response(page, accounts)
