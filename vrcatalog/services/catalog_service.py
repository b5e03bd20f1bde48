"""
Catalog service - Business logic for asset and account operations.

Loads records, runs the permission, query and update engines over them and
persists the result. Every write goes through ``_flush`` so a concurrent
modification of the same row (detected by the ``version`` column) surfaces as
an AbortedException.
"""

import logging
from collections.abc import Sequence
from uuid import uuid4

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from vrcatalog.auth.jwt import Caller
from vrcatalog.auth.permissions import (
    ListScope,
    can_view,
    candidate_access_levels,
    check_asset_mutable,
    check_asset_visible,
)
from vrcatalog.config import get_settings
from vrcatalog.core.exceptions import (
    AbortedException,
    AccountNotFoundException,
    AssetNotFoundException,
    InvalidArgumentException,
    PermissionDeniedException,
    UnauthorizedException,
)
from vrcatalog.models.account import Account
from vrcatalog.models.asset import Asset, AssetLike, utcnow
from vrcatalog.schemas.account import AccountUpdateRequest
from vrcatalog.schemas.asset import AssetCreate, AssetDataUpdateRequest, AssetUpdateRequest
from vrcatalog.services.element_service import ElementService
from vrcatalog.services.format_graph import (
    referenced_element_ids,
    validate_formats,
    validate_thumbnails,
)
from vrcatalog.services.query_engine import (
    AssetQuery,
    QueryContext,
    QueryPage,
    build_query,
    collect_owner_accounts,
    owner_ids,
    run_query,
)
from vrcatalog.services.update_engine import (
    apply_account_mask,
    apply_asset_mask,
    apply_format_replacement,
)

logger = logging.getLogger(__name__)
settings = get_settings()

ME = "me"

# Filter keys that map to a plain column and can narrow the candidate query
SQL_FILTER_COLUMNS = {
    "account_id": Asset.owner_id,
    "license": Asset.license,
}


class CatalogService:
    """Service class for catalog operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.elements = ElementService(db)

    async def _flush(self) -> None:
        try:
            await self.db.flush()
        except StaleDataError as e:
            logger.info(f"Concurrent modification rejected: {e}")
            raise AbortedException(
                "The record was modified by another request; reload it and retry"
            )

    # ===================
    # Accounts
    # ===================

    async def ensure_account(self, caller: Caller) -> Account:
        """Get the caller's account, provisioning it on first use."""
        account = await self.db.get(Account, caller.account_id)
        if account is not None:
            return account
        return await self._provision_account(caller)

    async def _provision_account(self, caller: Caller) -> Account:
        """
        Insert the caller's account inside a savepoint.

        When a concurrent request inserted it first, the savepoint is rolled
        back and that row is returned instead.
        """
        now = utcnow()
        account = Account(
            id=caller.account_id,
            display_name=caller.display_name or caller.account_id,
            description="",
            create_time=now,
            update_time=now,
        )

        try:
            async with self.db.begin_nested():
                self.db.add(account)
        except IntegrityError:
            existing = await self.db.get(Account, caller.account_id)
            if existing is None:
                raise
            logger.info(f"Account {existing.id} was provisioned by a concurrent request")
            return existing

        logger.info(f"Account provisioned: {account.id}")
        return account

    def _resolve_account_id(self, account_id: str, caller: Caller | None) -> str:
        if account_id != ME:
            return account_id
        if caller is None:
            raise UnauthorizedException("Authentication is required to use 'me'")
        return caller.account_id

    async def get_account(self, account_id: str, caller: Caller | None) -> Account:
        """
        Get an account by ID. ``me`` is the caller's own account.

        Raises:
            UnauthorizedException: If ``me`` is used anonymously
            AccountNotFoundException: If the account does not exist
        """
        target_id = self._resolve_account_id(account_id, caller)
        if caller is not None and target_id == caller.account_id:
            return await self.ensure_account(caller)

        account = await self.db.get(Account, target_id)
        if account is None:
            raise AccountNotFoundException(target_id)
        return account

    async def update_account(
        self,
        account_id: str,
        request: AccountUpdateRequest,
        caller: Caller,
    ) -> Account:
        """
        Apply a masked update to the caller's own account.

        Raises:
            AccountNotFoundException: If another, nonexistent account is named
            PermissionDeniedException: If another account is named
            InvalidArgumentException: If the body names a different account or
                the mask is invalid
        """
        target_id = self._resolve_account_id(account_id, caller)
        if target_id != caller.account_id:
            if await self.db.get(Account, target_id) is None:
                raise AccountNotFoundException(target_id)
            raise PermissionDeniedException(
                message="Accounts can only be modified by their owner",
                details={"account_id": target_id},
            )

        patch = request.account
        if patch.account_id and patch.account_id not in (target_id, ME):
            raise InvalidArgumentException(
                "account.accountId does not match the account in the path",
                details={"path": target_id, "body": patch.account_id},
            )

        account = await self.ensure_account(caller)
        changed = apply_account_mask(account, patch, request.update_mask)
        if changed:
            account.update_time = utcnow()
            await self._flush()
            logger.info(f"Account updated: {account.id} ({', '.join(sorted(changed))})")

        return account

    # ===================
    # Assets
    # ===================

    async def _load_asset(self, asset_id: str) -> Asset:
        asset = await self.db.get(Asset, asset_id)
        if asset is None:
            raise AssetNotFoundException(asset_id)
        return asset

    async def get_asset(self, asset_id: str, caller: Caller | None) -> Asset:
        """
        Get an asset the caller may view.

        Raises:
            AssetNotFoundException: If the asset does not exist or is hidden
        """
        asset = await self._load_asset(asset_id)
        check_asset_visible(asset, caller.account_id if caller else None)
        return asset

    async def _get_mutable_asset(self, asset_id: str, caller: Caller | None) -> Asset:
        """
        Load an asset for an ownership mutation.

        Hidden assets are NotFound for every non-owner, anonymous callers
        included, so a 401 is only ever returned for assets the caller can see.
        """
        asset = await self._load_asset(asset_id)
        caller_id = caller.account_id if caller else None
        check_asset_visible(asset, caller_id)
        if caller is None:
            raise UnauthorizedException("Authentication is required to modify an asset")
        check_asset_mutable(asset, caller_id)
        return asset

    async def _validate_remix_sources(self, source_ids: Sequence[str], caller_id: str) -> list[str]:
        """Every remix source must be an existing asset the caller can view."""
        unique_ids = list(dict.fromkeys(source_ids))
        if not unique_ids:
            return []

        result = await self.db.execute(select(Asset).where(Asset.id.in_(unique_ids)))
        sources = {asset.id: asset for asset in result.scalars()}

        for index, source_id in enumerate(source_ids):
            source = sources.get(source_id)
            if source is None or not can_view(source, caller_id):
                field = f"remix_info.source_asset_ids[{index}]"
                raise InvalidArgumentException(
                    f"{field} references unknown asset '{source_id}'",
                    details={"field": field, "asset_id": source_id},
                )

        return unique_ids

    async def create_asset(self, data: AssetCreate, caller: Caller) -> Asset:
        """
        Create a new asset owned by the caller.

        Args:
            data: Asset creation data
            caller: Authenticated caller, becomes the owner

        Returns:
            Created Asset model

        Raises:
            InvalidArgumentException: If a format, thumbnail or remix source
                does not resolve
        """
        await self.ensure_account(caller)

        elements = await self.elements.resolve_elements(
            referenced_element_ids(data.formats, data.thumbnail_ids),
            caller.account_id,
        )
        formats = validate_formats(data.formats, elements)
        thumbnail_ids = validate_thumbnails(data.thumbnail_ids, elements)

        remix_info = None
        if data.remix_info is not None:
            sources = await self._validate_remix_sources(
                data.remix_info.source_asset_ids, caller.account_id
            )
            remix_info = {"source_asset_ids": sources}

        now = utcnow()
        asset = Asset(
            id=str(uuid4()),
            owner_id=caller.account_id,
            display_name=data.display_name,
            description=data.description,
            tags=list(dict.fromkeys(data.tags)),
            admin_tags=[],
            access_level=data.access_level,
            license=data.license,
            formats=formats,
            thumbnail_ids=thumbnail_ids,
            remix_info=remix_info,
            camera_params=data.camera_params.model_dump() if data.camera_params else None,
            create_time=now,
            update_time=now,
        )
        self.db.add(asset)
        await self._flush()

        logger.info(f"Asset created: {asset.id} ({asset.access_level.value}) by {caller.account_id}")
        return asset

    async def update_asset(
        self,
        asset_id: str,
        request: AssetUpdateRequest,
        caller: Caller | None,
    ) -> Asset:
        """
        Apply a masked metadata update.

        Raises:
            AssetNotFoundException: If the asset is missing or hidden
            UnauthorizedException: If an anonymous caller targets a visible asset
            PermissionDeniedException: If the caller does not own the asset
            InvalidArgumentException: If the mask or new thumbnail is invalid
            FailedPreconditionException: If the mask names an immutable field
        """
        patch = request.asset
        if patch.asset_id and patch.asset_id != asset_id:
            raise InvalidArgumentException(
                "asset.assetId does not match the asset in the path",
                details={"path": asset_id, "body": patch.asset_id},
            )

        asset = await self._get_mutable_asset(asset_id, caller)

        new_thumbnail_id = request.new_thumbnail_id or None
        if new_thumbnail_id is not None:
            elements = await self.elements.resolve_elements([new_thumbnail_id], caller.account_id)
            validate_thumbnails([new_thumbnail_id], elements, field="new_thumbnail_id")

        changed = apply_asset_mask(asset, patch, request.update_mask, new_thumbnail_id)
        if changed:
            asset.update_time = utcnow()
            await self._flush()
            logger.info(f"Asset updated: {asset.id} ({', '.join(sorted(changed))})")

        return asset

    async def update_asset_data(
        self,
        asset_id: str,
        request: AssetDataUpdateRequest,
        caller: Caller | None,
    ) -> Asset:
        """
        Replace an asset's formats, and its thumbnails when any are given.

        The new lists are fully validated before the asset is touched.

        Raises:
            FailedPreconditionException: If the replacement has no formats
            InvalidArgumentException: If any element does not resolve
        """
        asset = await self._get_mutable_asset(asset_id, caller)

        elements = await self.elements.resolve_elements(
            referenced_element_ids(request.formats, request.thumbnail_ids),
            caller.account_id,
        )
        formats = validate_formats(request.formats, elements, replacing=True)
        thumbnail_ids = None
        if request.thumbnail_ids:
            thumbnail_ids = validate_thumbnails(request.thumbnail_ids, elements)

        changed = apply_format_replacement(asset, formats, thumbnail_ids)
        if changed:
            asset.update_time = utcnow()
            await self._flush()
            logger.info(f"Asset data replaced: {asset.id} ({len(formats)} formats)")

        return asset

    async def delete_asset(self, asset_id: str, caller: Caller | None) -> None:
        """Hard-delete an asset and every like of it."""
        asset = await self._get_mutable_asset(asset_id, caller)

        await self.db.execute(delete(AssetLike).where(AssetLike.asset_id == asset_id))
        await self.db.delete(asset)
        await self._flush()

        logger.info(f"Asset deleted: {asset_id} by {caller.account_id}")

    async def like_asset(self, asset_id: str, caller: Caller) -> None:
        """Record that the caller likes a viewable asset. Repeating is a no-op."""
        await self.get_asset(asset_id, caller)
        await self.ensure_account(caller)

        if await self.db.get(AssetLike, (caller.account_id, asset_id)) is None:
            self.db.add(AssetLike(account_id=caller.account_id, asset_id=asset_id, create_time=utcnow()))
            await self._flush()
            logger.info(f"Asset liked: {asset_id} by {caller.account_id}")

    async def unlike_asset(self, asset_id: str, caller: Caller) -> None:
        """Remove the caller's like of an asset, if any."""
        await self.get_asset(asset_id, caller)

        like = await self.db.get(AssetLike, (caller.account_id, asset_id))
        if like is not None:
            await self.db.delete(like)
            await self._flush()
            logger.info(f"Asset unliked: {asset_id} by {caller.account_id}")

    # ===================
    # Listings
    # ===================

    async def list_assets(
        self,
        caller: Caller | None,
        filter_str: str | None = None,
        order_by: str | None = None,
        page_size: int | None = None,
        page_token: str | None = None,
    ) -> tuple[QueryPage, dict[str, Account]]:
        """
        List PUBLIC assets across all accounts.

        Returns:
            Tuple of (page of assets, owner accounts of that page)
        """
        caller_id = caller.account_id if caller else None
        query = build_query(
            scope=ListScope.GLOBAL.value,
            allowed_levels=candidate_access_levels(ListScope.GLOBAL, caller_id),
            filter_str=filter_str,
            order_by=order_by,
            page_size=page_size,
            page_token=page_token,
            max_page_size=settings.LIST_ASSETS_MAX_PAGE_SIZE,
            default_page_size=settings.DEFAULT_PAGE_SIZE,
        )
        return await self._run_listing(query, caller_id)

    async def list_assets_by_account(
        self,
        account_id: str,
        caller: Caller | None,
        filter_str: str | None = None,
        order_by: str | None = None,
        page_size: int | None = None,
        page_token: str | None = None,
    ) -> tuple[QueryPage, dict[str, Account]]:
        """
        List one account's assets: all of them for the account itself,
        only PUBLIC ones for anybody else.

        Raises:
            UnauthorizedException: If ``me`` is used anonymously
            AccountNotFoundException: If the account does not exist
        """
        account = await self.get_account(account_id, caller)
        caller_id = caller.account_id if caller else None

        query = build_query(
            scope=f"{ListScope.ACCOUNT.value}:{account.id}",
            allowed_levels=candidate_access_levels(ListScope.ACCOUNT, caller_id, account.id),
            filter_str=filter_str,
            order_by=order_by,
            page_size=page_size,
            page_token=page_token,
            max_page_size=settings.LIST_ACCOUNT_ASSETS_MAX_PAGE_SIZE,
            default_page_size=settings.DEFAULT_PAGE_SIZE,
        )
        return await self._run_listing(query, caller_id, owner_id=account.id)

    async def _run_listing(
        self,
        query: AssetQuery,
        caller_id: str | None,
        owner_id: str | None = None,
    ) -> tuple[QueryPage, dict[str, Account]]:
        candidates_query = select(Asset).where(Asset.access_level.in_(query.allowed_levels))
        if owner_id is not None:
            candidates_query = candidates_query.where(Asset.owner_id == owner_id)
        for term in query.filters:
            column = SQL_FILTER_COLUMNS.get(term.key)
            if column is not None:
                candidates_query = candidates_query.where(column == term.value)
        candidates = (await self.db.execute(candidates_query)).scalars().all()

        liked_asset_ids: frozenset[str] = frozenset()
        if caller_id is not None and any(term.key == "liked" for term in query.filters):
            liked = await self.db.execute(
                select(AssetLike.asset_id).where(AssetLike.account_id == caller_id)
            )
            liked_asset_ids = frozenset(liked.scalars())

        page = run_query(candidates, query, QueryContext(caller_id, liked_asset_ids))

        accounts: dict[str, Account] = {}
        ids = owner_ids(page.items)
        if ids:
            result = await self.db.execute(select(Account).where(Account.id.in_(ids)))
            accounts = collect_owner_accounts(page.items, {a.id: a for a in result.scalars()})

        return page, accounts
