"""
Authentication dependencies for FastAPI.
Resolve the calling account (or None for anonymous callers).
"""

from typing import Annotated

from fastapi import Depends, Header, Request

from vrcatalog.config import get_settings
from vrcatalog.core.exceptions import UnauthorizedException
from vrcatalog.auth.jwt import Caller, extract_caller, validate_token

settings = get_settings()


def _parse_bearer(authorization: str) -> str:
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise UnauthorizedException("Invalid authorization header format")
    return parts[1]


async def get_optional_caller(
    request: Request,
    authorization: str | None = Header(default=None),
) -> Caller | None:
    """
    Dependency that resolves the caller, or None for anonymous requests.

    In development mode (DEV_MODE=true) every request is made by the
    configured development account. A header that is present but invalid is
    rejected rather than downgraded to anonymous.
    """
    if settings.DEV_MODE:
        caller = Caller(
            account_id=settings.DEV_ACCOUNT_ID,
            display_name=settings.DEV_ACCOUNT_DISPLAY_NAME,
        )
        request.state.caller = caller
        return caller

    if not authorization:
        return None

    payload = await validate_token(_parse_bearer(authorization))
    caller = extract_caller(payload)
    request.state.caller = caller
    return caller


async def get_current_caller(
    caller: Caller | None = Depends(get_optional_caller),
) -> Caller:
    """
    Dependency for endpoints that require an authenticated caller.

    Raises:
        UnauthorizedException: If the request is anonymous
    """
    if caller is None:
        raise UnauthorizedException("Authorization header required")
    return caller


# Type aliases for dependency injection
CurrentCaller = Annotated[Caller, Depends(get_current_caller)]
OptionalCaller = Annotated[Caller | None, Depends(get_optional_caller)]
