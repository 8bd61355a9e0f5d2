"""
Course endpoints.

Organizations see their own courses plus the platform catalog. Only the
organization's own courses can be edited; chapters and lessons keep a
contiguous 1-based position.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, status

from churchsync.core.models.io.common import ActionResponse, ErrorResponse
from churchsync.core.models.io.courses import (
    ChapterCreate,
    ChapterRead,
    CourseDetail,
    CourseInput,
    CourseRead,
    LessonCreate,
    LessonRead,
    LessonUpdate,
    Reorder,
)
from churchsync.server.services.courses import CourseService
from churchsync.server.services.deps import SessionDep, StorageDep, TenantDep

router = APIRouter(tags=["courses"])

OWN_COURSE = {
    403: {"model": ErrorResponse, "description": "Platform course or caller is not an administrator"},
    404: {"model": ErrorResponse, "description": "Course not found"},
}


@router.get(
    "",
    response_model=ActionResponse[List[CourseRead]],
    summary="List Courses",
    description="The organization's courses together with the published platform catalog, newest first.",
)
async def list_courses(tenant: TenantDep, session: SessionDep) -> ActionResponse[List[CourseRead]]:
    return await CourseService(session).list_courses(tenant)


@router.post(
    "",
    response_model=ActionResponse[CourseRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create Course",
    responses={400: {"model": ErrorResponse, "description": "Slug already used"}},
)
async def create_course(payload: CourseInput, tenant: TenantDep, session: SessionDep) -> ActionResponse[CourseRead]:
    """
    Create a course.

    - **title** / **slug**: Display name and URL slug, unique per organization.
    - **small_description** / **description**: Summary and full description.
    - **file_key**: Uploaded cover image.
    - **level** / **status** / **category** / **duration** / **price**: Catalog metadata.
    """
    return await CourseService(session).create_course(tenant, payload)


@router.get(
    "/{course_id}",
    response_model=ActionResponse[CourseDetail],
    summary="Get Course",
    description="The course with its chapters and lessons in order.",
    responses={404: {"model": ErrorResponse, "description": "Course not found"}},
)
async def get_course(course_id: str, tenant: TenantDep, session: SessionDep) -> ActionResponse[CourseDetail]:
    return await CourseService(session).get_course(tenant, course_id)


@router.put(
    "/{course_id}",
    response_model=ActionResponse[CourseRead],
    summary="Edit Course",
    responses=OWN_COURSE,
)
async def edit_course(
    course_id: str, payload: CourseInput, tenant: TenantDep, session: SessionDep
) -> ActionResponse[CourseRead]:
    return await CourseService(session).edit_course(tenant, course_id, payload)


@router.delete(
    "/{course_id}",
    response_model=ActionResponse[None],
    summary="Delete Course",
    description="Delete a course with its chapters and lessons, and remove their stored files.",
    responses=OWN_COURSE,
)
async def delete_course(
    course_id: str, tenant: TenantDep, session: SessionDep, storage: StorageDep
) -> ActionResponse[None]:
    return await CourseService(session, storage=storage).delete_course(tenant, course_id)


# ----------------------------------------------------------------------
# Chapters
# ----------------------------------------------------------------------


@router.post(
    "/{course_id}/chapters",
    response_model=ActionResponse[ChapterRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create Chapter",
    description="Append a chapter at the end of the course.",
    responses=OWN_COURSE,
)
async def create_chapter(
    course_id: str, payload: ChapterCreate, tenant: TenantDep, session: SessionDep
) -> ActionResponse[ChapterRead]:
    return await CourseService(session).create_chapter(tenant, course_id, payload)


@router.put(
    "/{course_id}/chapters/order",
    response_model=ActionResponse[None],
    summary="Reorder Chapters",
    responses={400: {"model": ErrorResponse, "description": "Empty or unknown chapter list"}, **OWN_COURSE},
)
async def reorder_chapters(
    course_id: str, payload: Reorder, tenant: TenantDep, session: SessionDep
) -> ActionResponse[None]:
    """
    Reorder chapters.

    - **items**: Every chapter id with its new position.
    """
    return await CourseService(session).reorder_chapters(tenant, course_id, payload.items)


@router.delete(
    "/chapters/{chapter_id}",
    response_model=ActionResponse[None],
    summary="Delete Chapter",
    description="Delete a chapter and its lessons; the remaining chapters are renumbered.",
)
async def delete_chapter(
    chapter_id: str, tenant: TenantDep, session: SessionDep, storage: StorageDep
) -> ActionResponse[None]:
    return await CourseService(session, storage=storage).delete_chapter(tenant, chapter_id)


# ----------------------------------------------------------------------
# Lessons
# ----------------------------------------------------------------------


@router.post(
    "/chapters/{chapter_id}/lessons",
    response_model=ActionResponse[LessonRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create Lesson",
)
async def create_lesson(
    chapter_id: str, payload: LessonCreate, tenant: TenantDep, session: SessionDep
) -> ActionResponse[LessonRead]:
    return await CourseService(session).create_lesson(tenant, chapter_id, payload)


@router.put(
    "/chapters/{chapter_id}/lessons/order",
    response_model=ActionResponse[None],
    summary="Reorder Lessons",
)
async def reorder_lessons(
    chapter_id: str, payload: Reorder, tenant: TenantDep, session: SessionDep
) -> ActionResponse[None]:
    return await CourseService(session).reorder_lessons(tenant, chapter_id, payload.items)


@router.patch(
    "/lessons/{lesson_id}",
    response_model=ActionResponse[LessonRead],
    summary="Update Lesson",
)
async def update_lesson(
    lesson_id: str, payload: LessonUpdate, tenant: TenantDep, session: SessionDep
) -> ActionResponse[LessonRead]:
    return await CourseService(session).update_lesson(tenant, lesson_id, payload)


@router.delete(
    "/lessons/{lesson_id}",
    response_model=ActionResponse[None],
    summary="Delete Lesson",
)
async def delete_lesson(
    lesson_id: str, tenant: TenantDep, session: SessionDep, storage: StorageDep
) -> ActionResponse[None]:
    return await CourseService(session, storage=storage).delete_lesson(tenant, lesson_id)
