"""
B.I Booster Backend — Learning Service (member LMS)
=====================================================

What:  The course as a logged-in member sees it, lesson progress tracking
       and the dashboard summary numbers.
How:   Loads the published module tree plus the member's progress rows and
       folds them together in Python. The tree is small (tens of lessons),
       so there is no SQL aggregation.
Who:   LMS routes (behind get_current_member).

Visibility:
    - Unpublished modules, chapters and lessons are hidden entirely.
    - A published lesson is locked when the member's tier ranks below the
      lowest tier in its required_package. Locked lessons are listed but
      without content, video_url or materials_url.

Percentages:
    chapter  completed lessons / published lessons in the chapter
    summary  completed lessons / unlocked lessons in the whole course
    Both round half up to a whole percent; 0 when there is nothing to count.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bibooster.exceptions import AccessDeniedError, DatabaseError, NotFoundError
from bibooster.models.course import Chapter, CourseModule, Lesson
from bibooster.models.progress import UserProgress
from bibooster.models.user import User
from bibooster.schemas.learning import (
    CourseResponse,
    LearningSummary,
    MemberChapter,
    MemberLesson,
    MemberModule,
    ProgressResponse,
    ProgressUpdateRequest,
)
from bibooster.services.catalog_service import tier_allows

logger = logging.getLogger(__name__)


def percent(done: int, total: int) -> int:
    """Whole-number percentage, rounded half up; 0 when total is 0."""
    if total <= 0:
        return 0
    return (100 * done + total // 2) // total


class LearningService:

    async def _progress_by_lesson(
        self, db: AsyncSession, user_id: uuid.UUID
    ) -> Dict[uuid.UUID, UserProgress]:
        result = await db.execute(select(UserProgress).where(UserProgress.user_id == user_id))
        return {row.lesson_id: row for row in result.scalars().all()}

    async def get_course(self, db: AsyncSession, user: User) -> CourseResponse:
        """Published modules → chapters → lessons with lock, completion and chapter percentages."""
        course, _ = await self._load_course(db, user)
        return course

    async def _load_course(
        self, db: AsyncSession, user: User
    ) -> Tuple[CourseResponse, Dict[uuid.UUID, UserProgress]]:
        tier = user.effective_tier
        try:
            result = await db.execute(
                select(CourseModule)
                .where(CourseModule.is_published.is_(True))
                .order_by(CourseModule.order_index, CourseModule.created_at)
            )
            modules = list(result.scalars().all())
            progress = await self._progress_by_lesson(db, user.id)
        except SQLAlchemyError as e:
            logger.error("Database error loading course for %s: %s", user.id, str(e), exc_info=True)
            raise DatabaseError(message="Could not load the course. Please try again.")

        member_modules: List[MemberModule] = []
        for module in modules:
            chapters: List[MemberChapter] = []
            for chapter in module.chapters:
                if not chapter.is_published:
                    continue
                lessons: List[MemberLesson] = []
                for lesson in chapter.lessons:
                    if not lesson.is_published:
                        continue
                    locked = not tier_allows(tier, lesson.required_package or [])
                    row = progress.get(lesson.id)
                    lessons.append(
                        MemberLesson(
                            id=lesson.id,
                            title=lesson.title,
                            description=lesson.description,
                            difficulty=lesson.difficulty,
                            order_index=lesson.order_index,
                            duration_minutes=lesson.duration_minutes,
                            required_package=list(lesson.required_package or []),
                            locked=locked,
                            completed=bool(row and row.completed),
                            content=None if locked else lesson.content,
                            video_url=None if locked else lesson.video_url,
                            materials_url=None if locked else lesson.materials_url,
                        )
                    )
                done = sum(1 for lesson in lessons if lesson.completed)
                chapters.append(
                    MemberChapter(
                        id=chapter.id,
                        title=chapter.title,
                        description=chapter.description,
                        order_index=chapter.order_index,
                        total_lessons=len(lessons),
                        completed_lessons=done,
                        progress_percent=percent(done, len(lessons)),
                        lessons=lessons,
                    )
                )
            member_modules.append(
                MemberModule(
                    id=module.id,
                    title=module.title,
                    description=module.description,
                    order_index=module.order_index,
                    chapters=chapters,
                )
            )

        return CourseResponse(package_access=tier, modules=member_modules), progress

    async def record_progress(
        self,
        db: AsyncSession,
        user: User,
        lesson_id: uuid.UUID,
        data: ProgressUpdateRequest,
    ) -> ProgressResponse:
        """
        Upsert the member's progress row for one lesson.

        completion_date is stamped when the lesson first becomes completed
        and cleared when it is marked incomplete again.

        Raises:
            NotFoundError:     lesson missing or not published (at any level)
            AccessDeniedError: lesson locked for the member's package
        """
        try:
            result = await db.execute(
                select(Lesson, Chapter.is_published, CourseModule.is_published)
                .join(Chapter, Lesson.chapter_id == Chapter.id)
                .join(CourseModule, Chapter.module_id == CourseModule.id)
                .where(Lesson.id == lesson_id)
            )
            row = result.first()
        except SQLAlchemyError as e:
            logger.error("Database error loading lesson %s: %s", lesson_id, str(e))
            raise DatabaseError(message="Could not load the lesson. Please try again.")

        if row is None:
            raise NotFoundError(resource="lesson", resource_id=str(lesson_id))
        lesson, chapter_published, module_published = row
        if not (lesson.is_published and chapter_published and module_published):
            raise NotFoundError(resource="lesson", resource_id=str(lesson_id))
        if not tier_allows(user.effective_tier, lesson.required_package or []):
            raise AccessDeniedError(
                message="This lesson is not included in your package. Upgrade to unlock it.",
                context={"required_package": lesson.required_package},
            )

        try:
            result = await db.execute(
                select(UserProgress).where(
                    UserProgress.user_id == user.id,
                    UserProgress.lesson_id == lesson_id,
                )
            )
            progress = result.scalar_one_or_none()
            if progress is None:
                progress = UserProgress(user_id=user.id, lesson_id=lesson_id)
                db.add(progress)

            if data.completed and not progress.completed:
                progress.completion_date = datetime.now(timezone.utc)
            elif not data.completed:
                progress.completion_date = None
            progress.completed = data.completed
            if data.watch_time_minutes is not None:
                progress.watch_time_minutes = data.watch_time_minutes
            await db.flush()
        except IntegrityError:
            await db.rollback()
            logger.warning("Concurrent progress write for user %s lesson %s", user.id, lesson_id)
            raise DatabaseError(message="Progress was updated elsewhere. Please retry.")
        except SQLAlchemyError as e:
            logger.error("Database error saving progress: %s", str(e), exc_info=True)
            raise DatabaseError(message="Could not save your progress. Please try again.")

        logger.info(
            "Progress recorded: user=%s lesson=%s completed=%s",
            user.id,
            lesson_id,
            progress.completed,
        )
        return ProgressResponse(
            lesson_id=lesson_id,
            completed=progress.completed,
            completion_date=progress.completion_date,
            watch_time_minutes=progress.watch_time_minutes or 0,
        )

    async def get_summary(self, db: AsyncSession, user: User) -> LearningSummary:
        """
        Overall progress over unlocked lessons plus chapter and study-time totals.

        Study time only counts lessons the member can still see; progress on
        lessons that were unpublished since is kept but not summed.
        """
        course, progress = await self._load_course(db, user)

        unlocked = 0
        completed = 0
        completed_chapters = 0
        total_chapters = 0
        watch_minutes = 0
        for module in course.modules:
            for chapter in module.chapters:
                total_chapters += 1
                if chapter.total_lessons and chapter.completed_lessons == chapter.total_lessons:
                    completed_chapters += 1
                for lesson in chapter.lessons:
                    row = progress.get(lesson.id)
                    if row is not None:
                        watch_minutes += row.watch_time_minutes or 0
                    if lesson.locked:
                        continue
                    unlocked += 1
                    if lesson.completed:
                        completed += 1

        return LearningSummary(
            package_access=course.package_access,
            progress_percent=percent(completed, unlocked),
            completed_lessons=completed,
            total_lessons=unlocked,
            completed_chapters=completed_chapters,
            total_chapters=total_chapters,
            study_hours=round(watch_minutes / 60, 1),
        )


learning_service = LearningService()
