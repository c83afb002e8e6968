"""
B.I Booster Backend — Member LMS Schemas
==========================================

The course as a member sees it: published content only, each lesson
marked locked/completed, each chapter with its completion percentage.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class MemberLesson(BaseModel):
    """
    A lesson in the member view.

    content, video_url and materials_url are withheld (null) while the
    lesson is locked for the member's package.
    """

    id: uuid.UUID
    title: str
    description: Optional[str] = None
    difficulty: str
    order_index: int
    duration_minutes: int
    required_package: List[str]
    locked: bool
    completed: bool = False
    content: Optional[str] = None
    video_url: Optional[str] = None
    materials_url: Optional[str] = None


class MemberChapter(BaseModel):
    id: uuid.UUID
    title: str
    description: Optional[str] = None
    order_index: int
    total_lessons: int
    completed_lessons: int
    progress_percent: int = Field(ge=0, le=100)
    lessons: List[MemberLesson]


class MemberModule(BaseModel):
    id: uuid.UUID
    title: str
    description: Optional[str] = None
    order_index: int
    chapters: List[MemberChapter]


class CourseResponse(BaseModel):
    package_access: str
    modules: List[MemberModule]


class ProgressUpdateRequest(BaseModel):
    completed: bool = True
    watch_time_minutes: Optional[int] = Field(
        default=None,
        ge=0,
        le=10_000,
        description="Total minutes watched so far; omitted keeps the stored value",
    )


class ProgressResponse(BaseModel):
    lesson_id: uuid.UUID
    completed: bool
    completion_date: Optional[datetime] = None
    watch_time_minutes: int

    model_config = {"from_attributes": True}


class LearningSummary(BaseModel):
    """Dashboard header numbers for the logged-in member."""

    package_access: str
    progress_percent: int = Field(ge=0, le=100, description="Completed share of unlocked lessons")
    completed_lessons: int
    total_lessons: int = Field(description="Published lessons unlocked for the member")
    completed_chapters: int
    total_chapters: int
    study_hours: float = Field(description="Recorded watch time in hours")
