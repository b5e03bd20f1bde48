"""
Conversion of ORM records to response schemas.
"""

from vrcatalog.models.account import Account
from vrcatalog.models.asset import Asset
from vrcatalog.models.element import ContentElement
from vrcatalog.schemas.account import AccountResponse
from vrcatalog.schemas.asset import (
    AssetListResponse,
    AssetResponse,
    CameraParams,
    FormatResponse,
    RemixInfo,
)
from vrcatalog.schemas.element import ElementResponse
from vrcatalog.services.query_engine import QueryPage


def account_to_response(account: Account) -> AccountResponse:
    return AccountResponse(
        account_id=account.id,
        display_name=account.display_name,
        description=account.description,
        create_time=account.create_time,
    )


def asset_to_response(asset: Asset) -> AssetResponse:
    """Convert an Asset model to its response schema."""
    return AssetResponse(
        asset_id=asset.id,
        owner_id=asset.owner_id,
        display_name=asset.display_name,
        description=asset.description,
        tags=list(asset.tags or []),
        access_level=asset.access_level,
        license=asset.license,
        formats=[FormatResponse(**fmt) for fmt in asset.formats],
        thumbnail_ids=list(asset.thumbnail_ids or []),
        remix_info=RemixInfo(**asset.remix_info) if asset.remix_info else None,
        camera_params=CameraParams(**asset.camera_params) if asset.camera_params else None,
        create_time=asset.create_time,
        update_time=asset.update_time,
    )


def page_to_response(page: QueryPage, accounts: dict[str, Account]) -> AssetListResponse:
    return AssetListResponse(
        assets=[asset_to_response(asset) for asset in page.items],
        next_page_token=page.next_page_token,
        total_items=page.total_items,
        accounts={owner_id: account_to_response(account) for owner_id, account in accounts.items()},
    )


def element_to_response(element: ContentElement) -> ElementResponse:
    return ElementResponse(
        element_id=element.id,
        owner_id=element.owner_id,
        element_type=element.element_type,
        file_name=element.file_name,
        file_size=element.file_size,
        checksum=element.checksum,
        create_time=element.create_time,
    )
