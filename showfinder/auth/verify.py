"""
verify.py
---------
Purpose:
    JWT verification using Supabase JWKS (ES256).

Notes:
    - Fetches JWKS from Supabase and caches keys.
    - Provides `auth_dependency` for signed-in routes.
    - Provides `admin_dependency` for review and maintenance routes; the
      caller's role is read from `profiles`, not trusted from the token.
"""

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWKClient

from showfinder.config import settings
from showfinder.db.helpers import DatabaseError, fetch_val
from showfinder.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

SUPABASE_AUDIENCE = "authenticated"
ADMIN_ROLE = "admin"

_jwk_client = PyJWKClient(settings.jwks_url())
_security = HTTPBearer()


def verify_jwt(token: str) -> dict:
    try:
        signing_key = _jwk_client.get_signing_key_from_jwt(token)
        decoded = jwt.decode(
            token,
            signing_key.key,
            algorithms=["ES256"],  # Supabase now uses ES256
            audience=SUPABASE_AUDIENCE,
            options={"verify_exp": True},
        )
        return decoded
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid authentication token: {e}",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


def auth_dependency(credentials: HTTPAuthorizationCredentials = Depends(_security)) -> dict:
    token = credentials.credentials
    return verify_jwt(token)


async def get_profile_role(user_id: str) -> str | None:
    return await fetch_val("SELECT role FROM profiles WHERE id = %s", (user_id,))


async def admin_dependency(claims: dict = Depends(auth_dependency)) -> dict:
    """Claims of a caller whose profile role is admin; 403 otherwise."""
    user_id = claims.get("sub")
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token has no subject")

    try:
        role = await get_profile_role(user_id)
    except DatabaseError as e:
        logger.error("Admin role lookup failed", user_id=user_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Unable to verify admin role"
        ) from e

    if (role or "").lower() != ADMIN_ROLE:
        logger.warning("Admin access denied", user_id=user_id, role=role)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")

    return claims
