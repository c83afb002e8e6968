"""
B.I Booster Backend — CMS Schemas
===================================

Request and response models for the admin course editor: modules,
chapters, lessons and media uploads.

Update models leave every field optional; the service applies only the
fields the client actually sent (model_dump(exclude_unset=True)).
"""

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from bibooster.services.catalog_service import PACKAGE_TIERS

Difficulty = Literal["basic", "medium", "large"]


def _check_tiers(tiers: Optional[List[str]]) -> Optional[List[str]]:
    if tiers is None:
        return tiers
    cleaned = []
    for tier in tiers:
        tier = tier.strip().lower()
        if tier not in PACKAGE_TIERS:
            raise ValueError(f"Unknown package '{tier}'. Must be one of: {list(PACKAGE_TIERS)}")
        if tier not in cleaned:
            cleaned.append(tier)
    return cleaned


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════

class ModuleCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    order_index: int = Field(default=0, ge=0)
    is_published: bool = False


class ModuleUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    order_index: Optional[int] = Field(default=None, ge=0)
    is_published: Optional[bool] = None


class ChapterCreate(ModuleCreate):
    pass


class ChapterUpdate(ModuleUpdate):
    pass


class LessonCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    difficulty: Difficulty = "basic"
    content: Optional[str] = None
    video_url: Optional[str] = None
    materials_url: Optional[str] = None
    duration_minutes: int = Field(default=0, ge=0, le=10_000)
    order_index: int = Field(default=0, ge=0)
    is_published: bool = False
    required_package: List[str] = Field(default_factory=lambda: ["small"])

    @field_validator("required_package")
    @classmethod
    def validate_required_package(cls, v: List[str]) -> List[str]:
        return _check_tiers(v)


class LessonUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    content: Optional[str] = None
    video_url: Optional[str] = None
    materials_url: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, ge=0, le=10_000)
    order_index: Optional[int] = Field(default=None, ge=0)
    is_published: Optional[bool] = None
    required_package: Optional[List[str]] = None

    @field_validator("required_package")
    @classmethod
    def validate_required_package(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _check_tiers(v)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════

class LessonResponse(BaseModel):
    id: uuid.UUID
    chapter_id: uuid.UUID
    title: str
    description: Optional[str] = None
    difficulty: str
    content: Optional[str] = None
    video_url: Optional[str] = None
    materials_url: Optional[str] = None
    duration_minutes: int
    order_index: int
    is_published: bool
    required_package: List[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ChapterResponse(BaseModel):
    id: uuid.UUID
    module_id: uuid.UUID
    title: str
    description: Optional[str] = None
    order_index: int
    is_published: bool
    created_at: datetime
    updated_at: datetime
    lessons: List[LessonResponse] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class ModuleResponse(BaseModel):
    id: uuid.UUID
    title: str
    description: Optional[str] = None
    order_index: int
    is_published: bool
    created_at: datetime
    updated_at: datetime
    chapters: List[ChapterResponse] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class ModuleTreeResponse(BaseModel):
    modules: List[ModuleResponse]


class MediaUploadResponse(BaseModel):
    kind: str = Field(description="video or material")
    path: str = Field(description="Path relative to the storage root")
    url: str = Field(description="Public URL to put in video_url / materials_url")
    size: int = Field(description="Stored size in bytes")
