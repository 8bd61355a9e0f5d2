"""
Course, chapter and lesson I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from churchsync.core.models.domain.enums import CourseLevel, CourseStatus


class CourseInput(BaseModel):
    """Schema used to create and to edit a course."""

    title: str = Field(min_length=3, max_length=100)
    description: str = Field(min_length=3)
    small_description: str = Field(min_length=3, max_length=200)
    slug: str = Field(min_length=3, max_length=200)
    file_key: Optional[str] = Field(default=None, max_length=500)
    price: int = Field(default=0, ge=0, le=999999)
    duration: int = Field(default=1, ge=1, le=500)
    level: CourseLevel = CourseLevel.Beginner
    status: CourseStatus = CourseStatus.Draft
    category: str = Field(min_length=1, max_length=100)


class CourseRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    organization_id: Optional[str] = None
    title: str
    slug: str
    description: str
    small_description: str
    file_key: Optional[str] = None
    price: int
    duration: int
    level: CourseLevel
    status: CourseStatus
    category: str
    created_at: datetime


class ChapterCreate(BaseModel):
    name: str = Field(min_length=3, max_length=200)


class LessonCreate(BaseModel):
    name: str = Field(min_length=3, max_length=200)
    description: Optional[str] = None
    thumbnail_key: Optional[str] = Field(default=None, max_length=500)
    video_key: Optional[str] = Field(default=None, max_length=500)


class LessonUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=3, max_length=200)
    description: Optional[str] = None
    thumbnail_key: Optional[str] = Field(default=None, max_length=500)
    video_key: Optional[str] = Field(default=None, max_length=500)


class LessonRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    chapter_id: str
    title: str
    description: Optional[str] = None
    thumbnail_key: Optional[str] = None
    video_key: Optional[str] = None
    position: int


class ChapterRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    course_id: str
    title: str
    position: int
    lessons: List[LessonRead] = Field(default_factory=list)


class CourseDetail(BaseModel):
    course: CourseRead
    chapters: List[ChapterRead] = Field(default_factory=list)


class PositionUpdate(BaseModel):
    id: str
    position: int = Field(ge=1)


class Reorder(BaseModel):
    items: List[PositionUpdate] = Field(default_factory=list)
