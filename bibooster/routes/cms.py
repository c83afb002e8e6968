"""
B.I Booster Backend — CMS Routes
==================================

What:  Admin course editor endpoints.
How:   Thin wrappers over CourseService; the router-level require_admin
       dependency checks X-Admin-Key before any handler runs.
Who:   The admin CMS page.

    GET    /api/admin/cms/modules                      full tree, drafts included
    POST   /api/admin/cms/modules                      add module
    PATCH  /api/admin/cms/modules/{id}                 edit / publish module
    POST   /api/admin/cms/modules/{id}/chapters        add chapter
    PATCH  /api/admin/cms/chapters/{id}                edit / publish chapter
    POST   /api/admin/cms/chapters/{id}/lessons        add lesson
    PATCH  /api/admin/cms/lessons/{id}                 edit lesson
    POST   /api/admin/cms/media                        upload video or material
"""

import uuid
from typing import Literal

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from bibooster.database import get_db_session
from bibooster.dependencies import require_admin
from bibooster.schemas.common import ErrorResponse
from bibooster.schemas.course import (
    ChapterCreate,
    ChapterResponse,
    ChapterUpdate,
    LessonCreate,
    LessonResponse,
    LessonUpdate,
    MediaUploadResponse,
    ModuleCreate,
    ModuleResponse,
    ModuleTreeResponse,
    ModuleUpdate,
)
from bibooster.services.course_service import course_service

router = APIRouter(
    prefix="/api/admin/cms",
    tags=["CMS"],
    dependencies=[Depends(require_admin)],
    responses={
        401: {"description": "Missing admin key", "model": ErrorResponse},
        403: {"description": "Wrong admin key", "model": ErrorResponse},
    },
)

_NOT_FOUND = {404: {"description": "Parent or target not found", "model": ErrorResponse}}


@router.get("/modules", response_model=ModuleTreeResponse, summary="List the full course tree")
async def list_modules(db: AsyncSession = Depends(get_db_session)) -> ModuleTreeResponse:
    return await course_service.list_tree(db)


@router.post(
    "/modules",
    response_model=ModuleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a module",
)
async def create_module(
    body: ModuleCreate,
    db: AsyncSession = Depends(get_db_session),
) -> ModuleResponse:
    return await course_service.create_module(db, body)


@router.patch(
    "/modules/{module_id}",
    response_model=ModuleResponse,
    responses=_NOT_FOUND,
    summary="Edit or publish a module",
)
async def update_module(
    module_id: uuid.UUID,
    body: ModuleUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> ModuleResponse:
    return await course_service.update_module(db, module_id, body)


@router.post(
    "/modules/{module_id}/chapters",
    response_model=ChapterResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_NOT_FOUND,
    summary="Add a chapter to a module",
)
async def create_chapter(
    module_id: uuid.UUID,
    body: ChapterCreate,
    db: AsyncSession = Depends(get_db_session),
) -> ChapterResponse:
    return await course_service.create_chapter(db, module_id, body)


@router.patch(
    "/chapters/{chapter_id}",
    response_model=ChapterResponse,
    responses=_NOT_FOUND,
    summary="Edit or publish a chapter",
)
async def update_chapter(
    chapter_id: uuid.UUID,
    body: ChapterUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> ChapterResponse:
    return await course_service.update_chapter(db, chapter_id, body)


@router.post(
    "/chapters/{chapter_id}/lessons",
    response_model=LessonResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_NOT_FOUND,
    summary="Add a lesson to a chapter",
)
async def create_lesson(
    chapter_id: uuid.UUID,
    body: LessonCreate,
    db: AsyncSession = Depends(get_db_session),
) -> LessonResponse:
    return await course_service.create_lesson(db, chapter_id, body)


@router.patch(
    "/lessons/{lesson_id}",
    response_model=LessonResponse,
    responses=_NOT_FOUND,
    summary="Edit a lesson",
)
async def update_lesson(
    lesson_id: uuid.UUID,
    body: LessonUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> LessonResponse:
    return await course_service.update_lesson(db, lesson_id, body)


@router.post(
    "/media",
    response_model=MediaUploadResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "File type or size rejected", "model": ErrorResponse}},
    summary="Upload a lesson video or material",
    description=(
        "kind=video accepts .mp4, .webm, .mov, .mkv; "
        "kind=material accepts .pdf, .doc, .docx, .ppt, .pptx. "
        "Returns the URL to store in the lesson's video_url or materials_url."
    ),
)
async def upload_media(
    file: UploadFile = File(...),
    kind: Literal["video", "material"] = Form(...),
) -> MediaUploadResponse:
    content = await file.read()
    return await course_service.upload_media(
        kind=kind,
        filename=file.filename or "",
        content=content,
        content_length=file.size,
    )
