"""
B.I Booster Backend — Auth Routes
===================================

Registration and login forms, plus the session check the member
dashboard runs on load.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from bibooster.database import get_db_session
from bibooster.dependencies import get_current_member
from bibooster.models.user import User
from bibooster.schemas.account import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    SessionUser,
)
from bibooster.schemas.common import ErrorResponse
from bibooster.services.account_service import account_service

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Passwords do not match", "model": ErrorResponse},
        409: {"description": "Email already registered", "model": ErrorResponse},
    },
    summary="Create a member account",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> RegisterResponse:
    return await account_service.register(db, body)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        401: {"description": "Unknown email or wrong password", "model": ErrorResponse},
        403: {"description": "Account not verified or payment not confirmed", "model": ErrorResponse},
    },
    summary="Log in to the member area",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> LoginResponse:
    return await account_service.login(db, body)


@router.get(
    "/me",
    response_model=SessionUser,
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="Current member session",
)
async def me(member: User = Depends(get_current_member)) -> SessionUser:
    return account_service.session_user(member)
