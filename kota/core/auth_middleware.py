"""Authentication dependencies for FastAPI.

Records are owned by the user's email (`created_by`), so every request
resolves to an owner email.
"""

import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from kota.core.config import get_settings

logger = logging.getLogger(__name__)

# HTTP Bearer scheme for Authorization header
security = HTTPBearer(auto_error=False)


class AuthContext:
    """Context object containing the authenticated owner."""

    def __init__(self, owner: str, token: str, user_id: Optional[str] = None, is_admin: bool = False):
        self.owner = owner
        self.token = token
        self.user_id = user_id
        self.is_admin = is_admin


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
    x_owner_email: Optional[str] = Header(None, alias="X-Owner-Email"),
) -> Optional[AuthContext]:
    """
    Extract and validate the current user from the request.

    Supports two authentication methods:
    1. Supabase JWT tokens (Bearer auth)
    2. Admin API key (X-API-Key header) acting for X-Owner-Email

    Returns None if no valid auth is present.
    """
    admin_key = get_settings().ADMIN_API_KEY
    if x_api_key and admin_key and x_api_key == admin_key:
        if not x_owner_email:
            logger.warning("Admin API key used without X-Owner-Email")
            return None
        logger.debug("Authenticated via admin API key")
        return AuthContext(owner=x_owner_email.lower(), token="api-key", is_admin=True)

    if not credentials:
        return None

    token = credentials.credentials
    try:
        from kota.db.supabase_client import get_supabase

        # Validates the JWT signature and expiration
        auth_response = get_supabase().auth.get_user(token)
        if not auth_response or not auth_response.user or not auth_response.user.email:
            return None
        return AuthContext(
            owner=auth_response.user.email.lower(),
            token=token,
            user_id=str(auth_response.user.id),
        )
    except Exception as e:
        logger.warning(f"Auth error: {e}")
        return None


async def require_auth(
    auth: Optional[AuthContext] = Depends(get_current_user),
) -> AuthContext:
    """Require authentication. Raises 401 if not authenticated."""
    if not auth:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return auth
