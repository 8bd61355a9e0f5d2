"""
Course (LMS) entity models.

Courses without an organization are platform courses, visible to every
tenant when published and editable by none of them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Text
from sqlmodel import Field

from churchsync.core.models.domain.enums import CourseLevel, CourseStatus

from ..base import Base, new_id, utc_now


class Course(Base, table=True):
    """Table: courses"""

    __tablename__ = "courses"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    organization_id: Optional[str] = Field(default=None, foreign_key="organizations.id", max_length=64, index=True)
    title: str = Field(max_length=100)
    slug: str = Field(max_length=200, index=True)
    description: str = Field(sa_type=Text)
    small_description: str = Field(max_length=200)
    file_key: Optional[str] = Field(default=None, max_length=500)
    price: int = Field(default=0)
    duration: int = Field(default=1)
    level: CourseLevel = Field(default=CourseLevel.Beginner)
    status: CourseStatus = Field(default=CourseStatus.Draft)
    category: str = Field(max_length=100)
    created_by: Optional[str] = Field(default=None, max_length=64)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Course(id={self.id}, slug={self.slug}, status={self.status})"


class Chapter(Base, table=True):
    """Table: chapters"""

    __tablename__ = "chapters"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    course_id: str = Field(foreign_key="courses.id", max_length=64, index=True, ondelete="CASCADE")
    title: str = Field(max_length=200)
    position: int

    created_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"Chapter(id={self.id}, title={self.title}, position={self.position})"


class Lesson(Base, table=True):
    """Table: lessons"""

    __tablename__ = "lessons"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    chapter_id: str = Field(foreign_key="chapters.id", max_length=64, index=True, ondelete="CASCADE")
    title: str = Field(max_length=200)
    description: Optional[str] = Field(default=None, sa_type=Text)
    thumbnail_key: Optional[str] = Field(default=None, max_length=500)
    video_key: Optional[str] = Field(default=None, max_length=500)
    position: int

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Lesson(id={self.id}, title={self.title}, position={self.position})"
