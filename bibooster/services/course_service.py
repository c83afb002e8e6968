"""
B.I Booster Backend — Course Service (CMS)
============================================

What:  The admin course editor: list the full module tree and create or
       update modules, chapters and lessons; upload lesson media.
How:   Single-row INSERTs and partial UPDATEs. Only the fields present in
       the request body are written (exclude_unset), so a publish toggle
       does not touch titles and vice versa.
Who:   CMS routes (behind the X-Admin-Key check).
"""

import logging
import uuid
from typing import Any, Dict, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bibooster.database import Base
from bibooster.exceptions import DatabaseError, NotFoundError
from bibooster.models.course import Chapter, CourseModule, Lesson
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
from bibooster.services.file_service import file_service

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class CourseService:

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _get_or_404(
        self, db: AsyncSession, model: Type[ModelT], object_id: uuid.UUID, resource: str
    ) -> ModelT:
        try:
            obj = await db.get(model, object_id)
        except SQLAlchemyError as e:
            logger.error("Database error loading %s %s: %s", resource, object_id, str(e))
            raise DatabaseError(message=f"Could not load the {resource}. Please try again.")
        if obj is None:
            raise NotFoundError(resource=resource, resource_id=str(object_id))
        return obj

    async def _save(self, db: AsyncSession, obj: Base, resource: str) -> None:
        db.add(obj)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error saving %s: %s", resource, str(e), exc_info=True)
            raise DatabaseError(message=f"Could not save the {resource}. Please try again.")

    def _apply(self, obj: Base, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Write `changes` onto obj, skipping nulls sent for NOT NULL columns."""
        columns = obj.__table__.c
        applied = {
            field: value
            for field, value in changes.items()
            if value is not None or columns[field].nullable
        }
        for field, value in applied.items():
            setattr(obj, field, value)
        return applied

    # ── Tree ──────────────────────────────────────────────────────────────

    async def list_tree(self, db: AsyncSession) -> ModuleTreeResponse:
        """Every module with its chapters and lessons, drafts included, by order_index."""
        try:
            result = await db.execute(
                select(CourseModule).order_by(CourseModule.order_index, CourseModule.created_at)
            )
            modules = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error loading course tree: %s", str(e), exc_info=True)
            raise DatabaseError(message="Could not load the course content. Please try again.")
        return ModuleTreeResponse(modules=[ModuleResponse.model_validate(m) for m in modules])

    # ── Modules ───────────────────────────────────────────────────────────

    async def create_module(self, db: AsyncSession, data: ModuleCreate) -> ModuleResponse:
        module = CourseModule(**data.model_dump(), chapters=[])
        await self._save(db, module, "module")
        logger.info("Module created: %s '%s'", module.id, module.title)
        return ModuleResponse.model_validate(module)

    async def update_module(
        self, db: AsyncSession, module_id: uuid.UUID, data: ModuleUpdate
    ) -> ModuleResponse:
        module = await self._get_or_404(db, CourseModule, module_id, "module")
        self._apply(module, data.model_dump(exclude_unset=True))
        await self._save(db, module, "module")
        logger.info("Module updated: %s", module.id)
        return ModuleResponse.model_validate(module)

    # ── Chapters ──────────────────────────────────────────────────────────

    async def create_chapter(
        self, db: AsyncSession, module_id: uuid.UUID, data: ChapterCreate
    ) -> ChapterResponse:
        await self._get_or_404(db, CourseModule, module_id, "module")
        chapter = Chapter(module_id=module_id, **data.model_dump(), lessons=[])
        await self._save(db, chapter, "chapter")
        logger.info("Chapter created: %s in module %s", chapter.id, module_id)
        return ChapterResponse.model_validate(chapter)

    async def update_chapter(
        self, db: AsyncSession, chapter_id: uuid.UUID, data: ChapterUpdate
    ) -> ChapterResponse:
        chapter = await self._get_or_404(db, Chapter, chapter_id, "chapter")
        self._apply(chapter, data.model_dump(exclude_unset=True))
        await self._save(db, chapter, "chapter")
        logger.info("Chapter updated: %s", chapter.id)
        return ChapterResponse.model_validate(chapter)

    # ── Lessons ───────────────────────────────────────────────────────────

    async def create_lesson(
        self, db: AsyncSession, chapter_id: uuid.UUID, data: LessonCreate
    ) -> LessonResponse:
        await self._get_or_404(db, Chapter, chapter_id, "chapter")
        lesson = Lesson(chapter_id=chapter_id, **data.model_dump())
        await self._save(db, lesson, "lesson")
        logger.info("Lesson created: %s in chapter %s", lesson.id, chapter_id)
        return LessonResponse.model_validate(lesson)

    async def update_lesson(
        self, db: AsyncSession, lesson_id: uuid.UUID, data: LessonUpdate
    ) -> LessonResponse:
        lesson = await self._get_or_404(db, Lesson, lesson_id, "lesson")
        changes = self._apply(lesson, data.model_dump(exclude_unset=True))
        await self._save(db, lesson, "lesson")
        logger.info("Lesson updated: %s (%s)", lesson.id, ", ".join(sorted(changes)) or "no changes")
        return LessonResponse.model_validate(lesson)

    # ── Media ─────────────────────────────────────────────────────────────

    async def upload_media(
        self,
        kind: str,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> MediaUploadResponse:
        """Store a lesson video or material and return the URL to put on the lesson."""
        _, relative_path = await file_service.store_media(
            kind=kind,
            filename=filename,
            content=content,
            content_length=content_length,
        )
        return MediaUploadResponse(
            kind=kind,
            path=relative_path,
            url=file_service.public_url(relative_path),
            size=len(content),
        )


course_service = CourseService()
