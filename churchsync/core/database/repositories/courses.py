"""
Course repositories.

Data access for courses, chapters and lessons. Chapters and lessons are
ordered by an integer ``position``.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from churchsync.core.models.domain.enums import CourseStatus

from ..entities.courses import Chapter, Course, Lesson
from .base import SQLModelRepository


class CourseRepository(SQLModelRepository[Course]):
    """Repository for courses."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Course)

    async def list_visible(self, organization_id: str) -> List[Course]:
        """Published platform courses plus every course of the organization."""
        stmt = select(Course).where(
            or_(
                and_(Course.organization_id.is_(None), Course.status == CourseStatus.Published),
                Course.organization_id == organization_id,
            )
        )
        result = await self.session.execute(stmt.order_by(Course.created_at.desc()))
        return list(result.scalars().all())

    async def slug_taken(self, organization_id: str, slug: str, exclude_id: Optional[str] = None) -> bool:
        stmt = select(func.count()).select_from(Course).where(
            (Course.organization_id == organization_id) & (Course.slug == slug)
        )
        if exclude_id:
            stmt = stmt.where(Course.id != exclude_id)
        result = await self.session.execute(stmt)
        return int(result.scalar_one()) > 0


class ChapterRepository(SQLModelRepository[Chapter]):
    """Repository for course chapters."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Chapter)

    async def list_for_course(self, course_id: str) -> List[Chapter]:
        result = await self.session.execute(
            select(Chapter).where(Chapter.course_id == course_id).order_by(Chapter.position)
        )
        return list(result.scalars().all())

    async def max_position(self, course_id: str) -> int:
        result = await self.session.execute(select(func.max(Chapter.position)).where(Chapter.course_id == course_id))
        return int(result.scalar_one_or_none() or 0)


class LessonRepository(SQLModelRepository[Lesson]):
    """Repository for chapter lessons."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Lesson)

    async def list_for_chapter(self, chapter_id: str) -> List[Lesson]:
        result = await self.session.execute(
            select(Lesson).where(Lesson.chapter_id == chapter_id).order_by(Lesson.position)
        )
        return list(result.scalars().all())

    async def list_for_chapters(self, chapter_ids: List[str]) -> List[Lesson]:
        if not chapter_ids:
            return []
        result = await self.session.execute(
            select(Lesson).where(Lesson.chapter_id.in_(chapter_ids)).order_by(Lesson.position)
        )
        return list(result.scalars().all())

    async def max_position(self, chapter_id: str) -> int:
        result = await self.session.execute(select(func.max(Lesson.position)).where(Lesson.chapter_id == chapter_id))
        return int(result.scalar_one_or_none() or 0)
