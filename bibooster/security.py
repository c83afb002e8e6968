"""
B.I Booster Backend — Password Hashing & Session Tokens
=========================================================

What:  bcrypt password hashing and HS256 session tokens for members.
How:   bcrypt.hashpw / bcrypt.checkpw for passwords; PyJWT encode/decode
       for the session token handed out at login.
Who:   AccountService (login/register), AdminService (default password on
       verification) and the get_current_member dependency.

Session token claims:
    sub             user id (UUID string)
    name, email     copied from the user row at login
    package_access  package_access, falling back to access_tier
    iat, exp        issued-at and expiry (settings.jwt_expire_minutes)
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt

from bibooster.config import settings
from bibooster.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of the password
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    """Return a bcrypt hash (utf-8 text) for a plaintext password."""
    hashed = bcrypt.hashpw(password.encode("utf-8")[:MAX_PASSWORD_BYTES], bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """
    Compare a plaintext password with a stored bcrypt hash.

    A missing hash never matches: users created by the order form have no
    password until their payment is verified.
    """
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(
            password.encode("utf-8")[:MAX_PASSWORD_BYTES],
            password_hash.encode("utf-8"),
        )
    except ValueError:
        # Stored value is not a bcrypt hash
        logger.warning("Stored password hash has an invalid format")
        return False


def create_session_token(claims: Dict[str, Any]) -> str:
    """Sign a member session token carrying `claims` plus iat/exp."""
    now = datetime.now(timezone.utc)
    payload = dict(claims)
    payload["iat"] = int(now.timestamp())
    payload["exp"] = int((now + timedelta(minutes=settings.jwt_expire_minutes)).timestamp())
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_session_token(token: str) -> Dict[str, Any]:
    """
    Verify signature and expiry of a session token and return its claims.

    Raises:
        AuthenticationError: expired, tampered or malformed token
    """
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError(message="Session expired. Please log in again.")
    except jwt.InvalidTokenError as e:
        logger.info("Rejected session token: %s", type(e).__name__)
        raise AuthenticationError(message="Invalid session token")
