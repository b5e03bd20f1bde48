"""
Content element upload endpoint.
"""

from fastapi import APIRouter, File, Form, UploadFile

from vrcatalog.api.v1.serializers import element_to_response
from vrcatalog.auth.dependencies import CurrentCaller
from vrcatalog.config import get_settings
from vrcatalog.core.exceptions import PayloadTooLargeException
from vrcatalog.dependencies import DbSession, Storage
from vrcatalog.models.element import ElementType
from vrcatalog.schemas.element import ElementResponse
from vrcatalog.schemas.error import ErrorResponse
from vrcatalog.services.catalog_service import CatalogService
from vrcatalog.services.element_service import ElementService

router = APIRouter()
settings = get_settings()


@router.post(
    "",
    response_model=ElementResponse,
    status_code=201,
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}},
)
async def create_element(
    db: DbSession,
    storage: Storage,
    caller: CurrentCaller,
    file: UploadFile = File(..., description="Element content"),
    elementType: ElementType | None = Form(default=None, description="Inferred from the file extension if omitted"),
):
    """
    Upload a content element.

    Accepts multipart/form-data. The returned ``elementId`` is what asset
    formats and thumbnails refer to.
    """
    content = await file.read()
    if len(content) > settings.MAX_ELEMENT_UPLOAD_SIZE:
        raise PayloadTooLargeException(settings.MAX_ELEMENT_UPLOAD_SIZE)

    await CatalogService(db).ensure_account(caller)
    element = await ElementService(db, storage).create(
        owner_id=caller.account_id,
        file_name=file.filename or "",
        data=content,
        element_type=elementType,
    )
    return element_to_response(element)
