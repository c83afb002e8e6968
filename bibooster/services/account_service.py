"""
B.I Booster Backend — Account Service
=======================================

What:  Registration, login and member lookup.
How:   Plain SELECT/INSERT against `users`; passwords hashed with bcrypt;
       login hands back a signed session token.
Who:   Auth routes and the get_current_member dependency.

Login checks, in order (first failure wins):
    1. email unknown            → AuthenticationError (401)
    2. is_verified is false     → AccessDeniedError (403)
    3. has_paid is false        → AccessDeniedError (403)
    4. password does not match  → AuthenticationError (401)
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bibooster.config import settings
from bibooster.exceptions import (
    AccessDeniedError,
    AuthenticationError,
    ConflictError,
    DatabaseError,
    ValidationError,
)
from bibooster.models.user import TIER_NONE, USER_STATUS_PENDING, User
from bibooster.schemas.account import (
    AccountResponse,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    SessionUser,
)
from bibooster.security import create_session_token, hash_password, verify_password

logger = logging.getLogger(__name__)


class AccountService:
    """Member accounts: register, log in, resolve a session."""

    async def find_by_email(self, db: AsyncSession, email: str) -> User | None:
        try:
            result = await db.execute(select(User).where(User.email == email.strip().lower()))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error looking up user by email: %s", str(e))
            raise DatabaseError(message="Could not look up the account. Please try again.")

    async def register(self, db: AsyncSession, data: RegisterRequest) -> RegisterResponse:
        """
        Create a pending account from the registration form.

        The new account cannot log in until the admin verifies a payment
        for it: status pending, access_tier none, both flags false.

        Raises:
            ValidationError: password and confirmation differ
            ConflictError:   the email already has an account
        """
        if data.password != data.confirm_password:
            raise ValidationError(message="Passwords do not match", field="confirm_password")

        email = data.email.lower()
        if await self.find_by_email(db, email) is not None:
            raise ConflictError(
                message="Email already registered. Use another email or log in.",
                context={"field": "email"},
            )

        user = User(
            name=data.name,
            email=email,
            phone=data.phone,
            password_hash=hash_password(data.password),
            status=USER_STATUS_PENDING,
            access_tier=TIER_NONE,
            is_verified=False,
            has_paid=False,
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            await db.rollback()
            raise ConflictError(
                message="Email already registered. Use another email or log in.",
                context={"field": "email"},
            )
        except SQLAlchemyError as e:
            logger.error("Database error creating account: %s", str(e), exc_info=True)
            raise DatabaseError(message="Could not create the account. Please try again.")

        logger.info("Account registered: %s", user.id)
        return RegisterResponse(account=AccountResponse.model_validate(user))

    async def login(self, db: AsyncSession, data: LoginRequest) -> LoginResponse:
        """Check the login form and issue a session token. See module docstring for the order."""
        user = await self.find_by_email(db, data.email)
        if user is None:
            raise AuthenticationError(
                message="Email not found. Register first or contact the admin to verify your account."
            )
        if not user.is_verified:
            raise AccessDeniedError(
                message="Account not verified yet. Our team will contact you shortly."
            )
        if not user.has_paid:
            raise AccessDeniedError(
                message="Payment not confirmed. Complete your payment to access the LMS dashboard."
            )
        if not verify_password(data.password, user.password_hash):
            raise AuthenticationError(message="Wrong password. Please check it and try again.")

        session_user = self.session_user(user)
        token = create_session_token(
            {
                "sub": str(user.id),
                "name": session_user.name,
                "email": session_user.email,
                "package_access": session_user.package_access,
            }
        )
        logger.info("Member logged in: %s (tier=%s)", user.id, session_user.package_access)
        return LoginResponse(
            access_token=token,
            expires_in=settings.jwt_expire_minutes * 60,
            user=session_user,
        )

    def session_user(self, user: User) -> SessionUser:
        return SessionUser(
            id=user.id,
            name=user.name,
            email=user.email,
            package_access=user.effective_tier,
        )

    async def get_member(self, db: AsyncSession, user_id: uuid.UUID) -> User:
        """
        Load the member behind a session token.

        The verified/paid flags are checked again here, so an account the
        admin has since locked stops working before its token expires.
        """
        try:
            user = await db.get(User, user_id)
        except SQLAlchemyError as e:
            logger.error("Database error loading member %s: %s", user_id, str(e))
            raise DatabaseError(message="Could not load your account. Please try again.")

        if user is None:
            raise AuthenticationError(message="Account no longer exists")
        if not (user.is_verified and user.has_paid):
            raise AccessDeniedError(message="Your account is not active")
        return user


account_service = AccountService()
