"""
B.I Booster Backend — Request Dependencies
============================================

What:  FastAPI dependencies that identify the caller.
How:   get_current_member reads the Bearer session token and loads the user;
       require_admin checks the X-Admin-Key header against settings.

    Member routes:  Depends(get_current_member)
    Admin routes:   dependencies=[Depends(require_admin)] on the router
"""

import hmac
import logging
import uuid
from typing import Optional

from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from bibooster.config import settings
from bibooster.database import get_db_session
from bibooster.exceptions import AccessDeniedError, AuthenticationError
from bibooster.models.user import User
from bibooster.security import decode_session_token
from bibooster.services.account_service import account_service

logger = logging.getLogger(__name__)

# auto_error=False so a missing header goes through our own 401 handler
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_member(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> User:
    """
    Resolve the Bearer token to a verified, paying member.

    Raises:
        AuthenticationError: no token, bad token, or the user no longer exists
        AccessDeniedError:   the account lost its verified/paid flags
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(message="Please log in to access the member area")

    claims = decode_session_token(credentials.credentials)
    try:
        user_id = uuid.UUID(str(claims["sub"]))
    except ValueError:
        raise AuthenticationError(message="Invalid session token")

    return await account_service.get_member(db, user_id)


async def require_admin(
    x_admin_key: Optional[str] = Header(default=None, alias="X-Admin-Key"),
) -> None:
    """Reject admin console calls without the shared admin key."""
    if not x_admin_key:
        raise AuthenticationError(message="Admin key required")
    if not hmac.compare_digest(x_admin_key.encode("utf-8"), settings.admin_api_key.encode("utf-8")):
        logger.warning("Admin request rejected: wrong X-Admin-Key")
        raise AccessDeniedError(message="Invalid admin key")
