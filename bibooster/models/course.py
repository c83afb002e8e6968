"""
B.I Booster Backend — Course Content Models
=============================================

What:  ORM models for the LMS content tree: modules → chapters → lessons.
How:   Each level has an order_index for display order and an is_published
       flag. Members only ever see published rows; the admin CMS sees all.

Children are loaded with selectin so that a single SELECT of modules pulls
the whole tree in three queries, which is what both the CMS and the member
course view need.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bibooster.database import Base

DIFFICULTY_LEVELS = ("basic", "medium", "large")
DEFAULT_REQUIRED_PACKAGE = ["small"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _default_required_package() -> List[str]:
    return list(DEFAULT_REQUIRED_PACKAGE)


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=func.now(),
    )


class CourseModule(TimestampMixin, Base):
    """Top level of the course tree (table `modules`)."""

    __tablename__ = "modules"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    order_index: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    is_published: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    chapters: Mapped[List["Chapter"]] = relationship(
        back_populates="module",
        cascade="all, delete-orphan",
        order_by="Chapter.order_index",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<CourseModule(id={self.id}, title='{self.title}')>"


class Chapter(TimestampMixin, Base):
    """A chapter inside a module; progress percentages are reported per chapter."""

    __tablename__ = "chapters"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    module_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("modules.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    order_index: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    is_published: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    module: Mapped["CourseModule"] = relationship(back_populates="chapters")
    lessons: Mapped[List["Lesson"]] = relationship(
        back_populates="chapter",
        cascade="all, delete-orphan",
        order_by="Lesson.order_index",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Chapter(id={self.id}, title='{self.title}')>"


class Lesson(TimestampMixin, Base):
    """
    A single lesson: video, text content and downloadable materials.

    required_package lists the tiers the lesson was written for. A member
    can open it when their tier ranks at or above the lowest listed tier;
    an empty list opens it to every paying member.
    """

    __tablename__ = "lessons"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    chapter_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("chapters.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    difficulty: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="basic",
        server_default=text("'basic'"),
        comment="basic, medium, large",
    )
    order_index: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    video_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    materials_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    duration_minutes: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    is_published: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    required_package: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=_default_required_package,
    )

    chapter: Mapped["Chapter"] = relationship(back_populates="lessons")

    def __repr__(self) -> str:
        return f"<Lesson(id={self.id}, title='{self.title}', difficulty='{self.difficulty}')>"
