"""
JWT token validation with JWKS caching.

Turns a bearer token from the identity provider into a ``Caller``. Who the
caller is gets decided here; what the caller may do is decided in
``vrcatalog.auth.permissions``.
"""

import time
from dataclasses import dataclass
from typing import Any

import httpx
from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError

from vrcatalog.config import get_settings
from vrcatalog.core.exceptions import UnauthorizedException

settings = get_settings()


@dataclass(frozen=True)
class Caller:
    """Resolved identity of an authenticated caller."""
    account_id: str
    display_name: str = ""


# JWKS cache
_jwks_cache: dict[str, Any] = {}
_jwks_cache_time: float = 0


async def fetch_jwks() -> dict[str, Any]:
    """
    Fetch the JSON Web Key Set from the identity provider.
    Cached for JWKS_CACHE_TTL seconds.

    Raises:
        UnauthorizedException: If JWKS cannot be fetched and nothing is cached
    """
    global _jwks_cache, _jwks_cache_time

    current_time = time.time()
    if _jwks_cache and (current_time - _jwks_cache_time) < settings.JWKS_CACHE_TTL:
        return _jwks_cache

    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(
                settings.AUTH_JWKS_URL,
                timeout=10.0,
            )
            response.raise_for_status()

            _jwks_cache = response.json()
            _jwks_cache_time = current_time

            return _jwks_cache

    except httpx.HTTPError as e:
        # Serve a stale key set rather than locking everyone out
        if _jwks_cache:
            return _jwks_cache
        raise UnauthorizedException(f"Failed to fetch JWKS: {str(e)}")


def get_rsa_key(jwks: dict[str, Any], kid: str) -> dict[str, Any] | None:
    """Get the RSA public key with the given key ID from a JWKS."""
    for key in jwks.get("keys", []):
        if key.get("kid") == kid:
            return {
                "kty": key.get("kty"),
                "kid": key.get("kid"),
                "use": key.get("use"),
                "n": key.get("n"),
                "e": key.get("e"),
            }
    return None


async def validate_token(token: str) -> dict[str, Any]:
    """
    Validate a bearer token: signature, expiry, issuer and audience.

    Returns:
        Decoded token claims

    Raises:
        UnauthorizedException: If token is invalid
    """
    try:
        unverified_header = jwt.get_unverified_header(token)
        kid = unverified_header.get("kid")

        if not kid:
            raise UnauthorizedException("Token missing key ID")

        jwks = await fetch_jwks()
        rsa_key = get_rsa_key(jwks, kid)

        if not rsa_key:
            raise UnauthorizedException("Unable to find appropriate key")

        return jwt.decode(
            token,
            rsa_key,
            algorithms=["RS256"],
            audience=settings.AUTH_AUDIENCE,
            issuer=settings.AUTH_ISSUER,
        )

    except ExpiredSignatureError:
        raise UnauthorizedException("Token has expired")
    except JWTError as e:
        raise UnauthorizedException(f"Invalid token: {str(e)}")


def extract_caller(payload: dict[str, Any]) -> Caller:
    """
    Build a Caller from validated token claims.

    Uses ``sub`` as the account ID and ``name`` (or ``preferred_username``)
    as the display name.

    Raises:
        UnauthorizedException: If the token carries no subject
    """
    subject = payload.get("sub")
    if not subject:
        raise UnauthorizedException("Token missing subject")

    return Caller(
        account_id=subject,
        display_name=payload.get("name") or payload.get("preferred_username") or "",
    )
