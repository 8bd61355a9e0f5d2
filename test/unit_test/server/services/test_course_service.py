"""Unit tests for CourseService."""

import pytest

from churchsync.core.database.entities import Course
from churchsync.core.errors import BusinessRuleError, NotFoundError, PermissionDeniedError
from churchsync.core.models.domain.enums import CourseStatus
from churchsync.core.models.io.courses import ChapterCreate, CourseInput, LessonCreate, LessonUpdate, PositionUpdate
from churchsync.server.services.courses import CourseService


def course_input(**overrides) -> CourseInput:
    fields = dict(
        title="Volunteer Basics",
        description="Everything a new volunteer needs to know.",
        small_description="Start here",
        slug="volunteer-basics",
        category="Onboarding",
    )
    fields.update(overrides)
    return CourseInput(**fields)


@pytest.fixture
def platform_course(session):
    async def _add(status: CourseStatus = CourseStatus.Published) -> Course:
        course = Course(
            title="Platform Course",
            slug=f"platform-{status.value.lower()}",
            description="Shared course",
            small_description="Shared",
            category="General",
            status=status,
        )
        session.add(course)
        await session.commit()
        return course

    return _add


class TestCourses:
    async def test_create_and_list(self, session, seeded, tenant_for, platform_course):
        published = await platform_course()
        await platform_course(CourseStatus.Draft)
        service = CourseService(session)
        admin = await tenant_for(seeded.admin)

        created = await service.create_course(admin, course_input())
        listed = (await service.list_courses(admin)).data

        assert created.message == "Course created successfully"
        assert created.data.organization_id == seeded.organization.id
        assert {c.id for c in listed} == {created.data.id, published.id}

    async def test_slug_is_unique_per_organization(self, session, seeded, tenant_for):
        service = CourseService(session)
        admin = await tenant_for(seeded.admin)
        await service.create_course(admin, course_input())

        with pytest.raises(BusinessRuleError, match="slug already exists"):
            await service.create_course(admin, course_input(title="Another"))

    async def test_staff_cannot_author(self, session, seeded, tenant_for):
        with pytest.raises(PermissionDeniedError):
            await CourseService(session).create_course(await tenant_for(seeded.staff), course_input())

    async def test_platform_course_is_read_only(self, session, seeded, tenant_for, platform_course):
        course = await platform_course()
        service = CourseService(session)
        admin = await tenant_for(seeded.admin)

        detail = await service.get_course(admin, course.id)
        assert detail.data.course.title == "Platform Course"
        with pytest.raises(PermissionDeniedError, match="Platform courses"):
            await service.edit_course(admin, course.id, course_input())

    async def test_edit_course(self, session, seeded, tenant_for):
        service = CourseService(session)
        admin = await tenant_for(seeded.admin)
        course = (await service.create_course(admin, course_input())).data

        edited = await service.edit_course(
            admin, course.id, course_input(title="Volunteer Basics 2", status=CourseStatus.Published)
        )

        assert edited.message == "Course Saved Successfully"
        assert edited.data.title == "Volunteer Basics 2"
        assert edited.data.status == CourseStatus.Published

    async def test_unknown_course(self, session, seeded, tenant_for):
        with pytest.raises(NotFoundError, match="Course not found"):
            await CourseService(session).get_course(await tenant_for(seeded.staff), "missing")


class TestContent:
    async def test_chapters_and_lessons(self, session, seeded, tenant_for):
        service = CourseService(session)
        admin = await tenant_for(seeded.admin)
        course = (await service.create_course(admin, course_input())).data

        intro = (await service.create_chapter(admin, course.id, ChapterCreate(name="Introduction"))).data
        safety = (await service.create_chapter(admin, course.id, ChapterCreate(name="Child Safety"))).data
        first = (await service.create_lesson(admin, intro.id, LessonCreate(name="Welcome"))).data
        second = (await service.create_lesson(admin, intro.id, LessonCreate(name="Our Values"))).data

        assert (intro.position, safety.position) == (1, 2)
        assert (first.position, second.position) == (1, 2)

        await service.reorder_chapters(
            admin, course.id, [PositionUpdate(id=intro.id, position=2), PositionUpdate(id=safety.id, position=1)]
        )
        renamed = await service.update_lesson(admin, first.id, LessonUpdate(name="Welcome Aboard"))
        assert renamed.data.title == "Welcome Aboard"

        detail = (await service.get_course(admin, course.id)).data
        assert [c.title for c in detail.chapters] == ["Child Safety", "Introduction"]
        assert [l.title for l in detail.chapters[1].lessons] == ["Welcome Aboard", "Our Values"]

    async def test_reorder_rules(self, session, seeded, tenant_for):
        service = CourseService(session)
        admin = await tenant_for(seeded.admin)
        course = (await service.create_course(admin, course_input())).data

        with pytest.raises(BusinessRuleError, match="No chapters"):
            await service.reorder_chapters(admin, course.id, [])
        with pytest.raises(NotFoundError, match="Chapter not found"):
            await service.reorder_chapters(admin, course.id, [PositionUpdate(id="other", position=1)])

    async def test_delete_lesson_renumbers_and_removes_files(self, session, seeded, tenant_for, storage):
        await storage.put("thumb.png", b"png")
        await storage.put("video.mp4", b"mp4")
        service = CourseService(session)
        admin = await tenant_for(seeded.admin)
        course = (await service.create_course(admin, course_input())).data
        chapter = (await service.create_chapter(admin, course.id, ChapterCreate(name="Introduction"))).data
        doomed = (
            await service.create_lesson(
                admin, chapter.id, LessonCreate(name="Welcome", thumbnail_key="thumb.png", video_key="video.mp4")
            )
        ).data
        await service.create_lesson(admin, chapter.id, LessonCreate(name="Our Values"))

        response = await service.delete_lesson(admin, doomed.id)

        assert response.message == "Lesson deleted (2 files cleaned)"
        assert not await storage.exists("video.mp4")
        lessons = (await service.get_course(admin, course.id)).data.chapters[0].lessons
        assert [(l.title, l.position) for l in lessons] == [("Our Values", 1)]

    async def test_missing_files_are_not_counted(self, session, seeded, tenant_for, storage):
        await storage.put("thumb.png", b"png")
        service = CourseService(session)
        admin = await tenant_for(seeded.admin)
        course = (await service.create_course(admin, course_input())).data
        chapter = (await service.create_chapter(admin, course.id, ChapterCreate(name="Introduction"))).data
        lesson = (
            await service.create_lesson(
                admin, chapter.id, LessonCreate(name="Welcome", thumbnail_key="thumb.png", video_key="gone.mp4")
            )
        ).data

        response = await service.delete_lesson(admin, lesson.id)

        assert response.message == "Lesson deleted (1 files cleaned)"

    async def test_delete_chapter_renumbers(self, session, seeded, tenant_for):
        service = CourseService(session)
        admin = await tenant_for(seeded.admin)
        course = (await service.create_course(admin, course_input())).data
        first = (await service.create_chapter(admin, course.id, ChapterCreate(name="One"))).data
        await service.create_chapter(admin, course.id, ChapterCreate(name="Two"))
        await service.create_lesson(admin, first.id, LessonCreate(name="Lesson"))

        response = await service.delete_chapter(admin, first.id)

        assert response.message == "Chapter deleted (0 files cleaned)"
        chapters = (await service.get_course(admin, course.id)).data.chapters
        assert [(c.title, c.position) for c in chapters] == [("Two", 1)]

    async def test_delete_course_cleans_up(self, session, seeded, tenant_for, storage):
        await storage.put("cover.png", b"png")
        service = CourseService(session)
        admin = await tenant_for(seeded.admin)
        course = (await service.create_course(admin, course_input(file_key="cover.png"))).data
        chapter = (await service.create_chapter(admin, course.id, ChapterCreate(name="One"))).data
        await service.create_lesson(admin, chapter.id, LessonCreate(name="Lesson"))

        response = await service.delete_course(admin, course.id)

        assert response.message == "Course deleted (1 files cleaned up)"
        assert not await storage.exists("cover.png")
        with pytest.raises(NotFoundError):
            await service.get_course(admin, course.id)
