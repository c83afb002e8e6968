"""
B.I Booster Backend — Member LMS Routes
=========================================

What:  Course view, lesson progress and dashboard summary for members.
How:   Every endpoint depends on get_current_member (Bearer token) and
       delegates to LearningService.
Who:   The member LMS page and the dashboard overview tab.

    GET  /api/lms/course                     published tree with locks
    POST /api/lms/lessons/{id}/progress      mark complete / record watch time
    GET  /api/lms/summary                    dashboard numbers

Responses are per-member, so they are marked private / no-store.
"""

import uuid

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from bibooster.database import get_db_session
from bibooster.dependencies import get_current_member
from bibooster.models.user import User
from bibooster.schemas.common import ErrorResponse
from bibooster.schemas.learning import (
    CourseResponse,
    LearningSummary,
    ProgressResponse,
    ProgressUpdateRequest,
)
from bibooster.services.learning_service import learning_service

router = APIRouter(
    prefix="/api/lms",
    tags=["LMS"],
    responses={
        401: {"description": "Not logged in", "model": ErrorResponse},
        403: {"description": "Account inactive or lesson locked", "model": ErrorResponse},
    },
)


@router.get("/course", response_model=CourseResponse, summary="Course tree for the member")
async def get_course(
    response: Response,
    member: User = Depends(get_current_member),
    db: AsyncSession = Depends(get_db_session),
) -> CourseResponse:
    response.headers["Cache-Control"] = "private, no-store"
    return await learning_service.get_course(db, member)


@router.post(
    "/lessons/{lesson_id}/progress",
    response_model=ProgressResponse,
    responses={404: {"description": "Lesson not found or unpublished", "model": ErrorResponse}},
    summary="Record lesson progress",
)
async def record_progress(
    lesson_id: uuid.UUID,
    body: ProgressUpdateRequest,
    member: User = Depends(get_current_member),
    db: AsyncSession = Depends(get_db_session),
) -> ProgressResponse:
    return await learning_service.record_progress(db, member, lesson_id, body)


@router.get("/summary", response_model=LearningSummary, summary="Dashboard progress summary")
async def get_summary(
    response: Response,
    member: User = Depends(get_current_member),
    db: AsyncSession = Depends(get_db_session),
) -> LearningSummary:
    response.headers["Cache-Control"] = "private, no-store"
    return await learning_service.get_summary(db, member)
