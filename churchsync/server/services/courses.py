"""
Course Service.

Organizations author their own training courses (course -> chapters ->
lessons) and can read the published platform courses. Platform courses have
no organization and are read-only here. Deleting content also removes the
files it references from storage.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from churchsync.core.database.entities.courses import Chapter, Course, Lesson
from churchsync.core.database.repositories.courses import ChapterRepository, CourseRepository, LessonRepository
from churchsync.core.errors import BusinessRuleError, NotFoundError, PermissionDeniedError
from churchsync.core.logging_config import get_logger
from churchsync.core.models.io.common import ActionResponse
from churchsync.core.models.io.courses import (
    ChapterCreate,
    ChapterRead,
    CourseDetail,
    CourseInput,
    CourseRead,
    LessonCreate,
    LessonRead,
    LessonUpdate,
    PositionUpdate,
)
from churchsync.core.rate_limit import RateLimitTier
from churchsync.core.tenancy import require_admin
from churchsync.integrations.storage import FileStorage, get_storage

from .tenancy import TenantContext

logger = get_logger(__name__)


class CourseService:
    def __init__(self, session: AsyncSession, storage: Optional[FileStorage] = None) -> None:
        self.session = session
        self.storage = storage or get_storage()
        self.courses = CourseRepository(session)
        self.chapters = ChapterRepository(session)
        self.lessons = LessonRepository(session)

    async def _visible_course(self, tenant: TenantContext, course_id: str) -> Course:
        course = await self.courses.get_by_id(course_id)
        if course is None or course.organization_id not in (None, tenant.organization_id):
            raise NotFoundError("Course not found")
        return course

    async def _own_course(self, tenant: TenantContext, course_id: str) -> Course:
        """Course the tenant may change (admin, own organization)."""
        require_admin(tenant.scope)
        course = await self._visible_course(tenant, course_id)
        if course.organization_id is None:
            raise PermissionDeniedError("Platform courses cannot be modified")
        return course

    async def _own_chapter(self, tenant: TenantContext, chapter_id: str) -> Chapter:
        chapter = await self.chapters.get_by_id(chapter_id)
        if chapter is None:
            raise NotFoundError("Chapter not found")
        await self._own_course(tenant, chapter.course_id)
        return chapter

    async def _own_lesson(self, tenant: TenantContext, lesson_id: str) -> Lesson:
        lesson = await self.lessons.get_by_id(lesson_id)
        if lesson is None:
            raise NotFoundError("Lesson not found")
        await self._own_chapter(tenant, lesson.chapter_id)
        return lesson

    async def _remove_files(self, keys: Iterable[Optional[str]]) -> int:
        """Delete stored files and return how many were removed."""
        removed = 0
        for key in filter(None, keys):
            try:
                if await self.storage.delete(key):
                    removed += 1
            except Exception:
                logger.warning(f"Failed to delete stored file {key}", exc_info=True)
        return removed

    # ------------------------------------------------------------------
    # Courses
    # ------------------------------------------------------------------

    async def list_courses(self, tenant: TenantContext) -> ActionResponse[List[CourseRead]]:
        courses = await self.courses.list_visible(tenant.organization_id)
        return ActionResponse(data=[CourseRead.model_validate(course) for course in courses])

    async def get_course(self, tenant: TenantContext, course_id: str) -> ActionResponse[CourseDetail]:
        course = await self._visible_course(tenant, course_id)
        chapters = await self.chapters.list_for_course(course.id)
        lessons = await self.lessons.list_for_chapters([chapter.id for chapter in chapters])
        return ActionResponse(
            data=CourseDetail(
                course=CourseRead.model_validate(course),
                chapters=[
                    ChapterRead(
                        id=chapter.id,
                        course_id=chapter.course_id,
                        title=chapter.title,
                        position=chapter.position,
                        lessons=[LessonRead.model_validate(l) for l in lessons if l.chapter_id == chapter.id],
                    )
                    for chapter in chapters
                ],
            )
        )

    async def create_course(self, tenant: TenantContext, payload: CourseInput) -> ActionResponse[CourseRead]:
        require_admin(tenant.scope)
        tenant.rate_limit("create_course", RateLimitTier.STANDARD)
        if await self.courses.slug_taken(tenant.organization_id, payload.slug):
            raise BusinessRuleError("A course with this slug already exists")

        course = await self.courses.create(
            Course(organization_id=tenant.organization_id, created_by=tenant.user_id, **payload.model_dump())
        )
        logger.info(f"Course {course.id} created in organization {tenant.organization_id}")
        return ActionResponse(message="Course created successfully", data=CourseRead.model_validate(course))

    async def edit_course(
        self, tenant: TenantContext, course_id: str, payload: CourseInput
    ) -> ActionResponse[CourseRead]:
        tenant.rate_limit("edit_course", RateLimitTier.STANDARD)
        course = await self._own_course(tenant, course_id)
        if await self.courses.slug_taken(tenant.organization_id, payload.slug, exclude_id=course.id):
            raise BusinessRuleError("A course with this slug already exists")

        for field, value in payload.model_dump().items():
            setattr(course, field, value)
        course = await self.courses.update(course)
        return ActionResponse(message="Course Saved Successfully", data=CourseRead.model_validate(course))

    async def delete_course(self, tenant: TenantContext, course_id: str) -> ActionResponse[None]:
        tenant.rate_limit("delete_course", RateLimitTier.STANDARD)
        course = await self._own_course(tenant, course_id)
        chapters = await self.chapters.list_for_course(course.id)
        lessons = await self.lessons.list_for_chapters([chapter.id for chapter in chapters])

        keys = [course.file_key]
        for lesson in lessons:
            keys += [lesson.thumbnail_key, lesson.video_key]
            await self.session.delete(lesson)
        for chapter in chapters:
            await self.session.delete(chapter)
        await self.session.delete(course)
        await self.session.commit()

        removed = await self._remove_files(keys)
        logger.info(f"Course {course_id} deleted with {len(chapters)} chapters")
        return ActionResponse(message=f"Course deleted ({removed} files cleaned up)")

    # ------------------------------------------------------------------
    # Chapters
    # ------------------------------------------------------------------

    async def create_chapter(
        self, tenant: TenantContext, course_id: str, payload: ChapterCreate
    ) -> ActionResponse[ChapterRead]:
        tenant.rate_limit("create_chapter", RateLimitTier.BULK)
        course = await self._own_course(tenant, course_id)
        chapter = await self.chapters.create(
            Chapter(
                course_id=course.id,
                title=payload.name,
                position=await self.chapters.max_position(course.id) + 1,
            )
        )
        return ActionResponse(message="Chapter created successfully", data=ChapterRead.model_validate(chapter))

    async def reorder_chapters(
        self, tenant: TenantContext, course_id: str, items: List[PositionUpdate]
    ) -> ActionResponse[None]:
        """Apply new chapter positions in one transaction."""
        if not items:
            raise BusinessRuleError("No chapters to reorder")
        tenant.rate_limit("reorder_chapters", RateLimitTier.ASSIGNMENT)
        course = await self._own_course(tenant, course_id)
        chapters = {chapter.id: chapter for chapter in await self.chapters.list_for_course(course.id)}
        if any(item.id not in chapters for item in items):
            raise NotFoundError("Chapter not found")

        for item in items:
            chapters[item.id].position = item.position
            self.session.add(chapters[item.id])
        await self.session.commit()
        return ActionResponse(message="Chapters reordered successfully")

    async def delete_chapter(self, tenant: TenantContext, chapter_id: str) -> ActionResponse[None]:
        """Delete a chapter with its lessons and renumber the rest 1..n."""
        tenant.rate_limit("delete_chapter", RateLimitTier.STANDARD)
        chapter = await self._own_chapter(tenant, chapter_id)
        course_id = chapter.course_id
        lessons = await self.lessons.list_for_chapter(chapter.id)

        keys: List[Optional[str]] = []
        for lesson in lessons:
            keys += [lesson.thumbnail_key, lesson.video_key]
            await self.session.delete(lesson)
        await self.session.delete(chapter)
        await self.session.flush()
        for position, remaining in enumerate(await self.chapters.list_for_course(course_id), start=1):
            remaining.position = position
            self.session.add(remaining)
        await self.session.commit()

        removed = await self._remove_files(keys)
        return ActionResponse(message=f"Chapter deleted ({removed} files cleaned)")

    # ------------------------------------------------------------------
    # Lessons
    # ------------------------------------------------------------------

    async def create_lesson(
        self, tenant: TenantContext, chapter_id: str, payload: LessonCreate
    ) -> ActionResponse[LessonRead]:
        tenant.rate_limit("create_lesson", RateLimitTier.BULK)
        chapter = await self._own_chapter(tenant, chapter_id)
        lesson = await self.lessons.create(
            Lesson(
                chapter_id=chapter.id,
                title=payload.name,
                description=payload.description,
                thumbnail_key=payload.thumbnail_key,
                video_key=payload.video_key,
                position=await self.lessons.max_position(chapter.id) + 1,
            )
        )
        return ActionResponse(message="Lesson created successfully", data=LessonRead.model_validate(lesson))

    async def update_lesson(
        self, tenant: TenantContext, lesson_id: str, payload: LessonUpdate
    ) -> ActionResponse[LessonRead]:
        tenant.rate_limit("update_lesson", RateLimitTier.BULK)
        lesson = await self._own_lesson(tenant, lesson_id)
        values = payload.model_dump(exclude_unset=True)
        if "name" in values:
            values["title"] = values.pop("name")
        for field, value in values.items():
            setattr(lesson, field, value)
        lesson = await self.lessons.update(lesson)
        return ActionResponse(message="Lesson updated successfully", data=LessonRead.model_validate(lesson))

    async def reorder_lessons(
        self, tenant: TenantContext, chapter_id: str, items: List[PositionUpdate]
    ) -> ActionResponse[None]:
        if not items:
            raise BusinessRuleError("No lessons to reorder")
        tenant.rate_limit("reorder_lessons", RateLimitTier.ASSIGNMENT)
        chapter = await self._own_chapter(tenant, chapter_id)
        lessons = {lesson.id: lesson for lesson in await self.lessons.list_for_chapter(chapter.id)}
        if any(item.id not in lessons for item in items):
            raise NotFoundError("Lesson not found")

        for item in items:
            lessons[item.id].position = item.position
            self.session.add(lessons[item.id])
        await self.session.commit()
        return ActionResponse(message="Lessons reordered successfully")

    async def delete_lesson(self, tenant: TenantContext, lesson_id: str) -> ActionResponse[None]:
        tenant.rate_limit("delete_lesson", RateLimitTier.STANDARD)
        lesson = await self._own_lesson(tenant, lesson_id)
        chapter_id = lesson.chapter_id
        keys = [lesson.thumbnail_key, lesson.video_key]

        await self.session.delete(lesson)
        await self.session.flush()
        for position, remaining in enumerate(await self.lessons.list_for_chapter(chapter_id), start=1):
            remaining.position = position
            self.session.add(remaining)
        await self.session.commit()

        removed = await self._remove_files(keys)
        return ActionResponse(message=f"Lesson deleted ({removed} files cleaned)")
