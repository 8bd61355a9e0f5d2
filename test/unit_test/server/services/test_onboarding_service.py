"""Unit tests for OnboardingService."""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from churchsync.core.errors import BusinessRuleError, NotFoundError, PermissionDeniedError
from churchsync.core.models.domain.enums import BackgroundCheckStatus, DocumentScope, VolunteerCategoryType
from churchsync.core.models.io.onboarding import (
    BackgroundCheckConfigUpsert,
    MinistryRequirementUpsert,
    VolunteerDocumentCreate,
)
from churchsync.server.services.onboarding import OnboardingService

KIDS = VolunteerCategoryType.KIDS_MINISTRY


@pytest.fixture
def configure(session, tenant_for, seeded):
    """Set up documents, a kids ministry requirement and a provider."""

    async def _configure(background_check_required: bool = True, with_documents: bool = True):
        service = OnboardingService(session)
        admin = await tenant_for(seeded.admin)
        if with_documents:
            await service.create_document(admin, VolunteerDocumentCreate(name="Handbook", file_key="docs/handbook.pdf"))
            await service.create_document(
                admin,
                VolunteerDocumentCreate(
                    name="Kids Policy", file_key="docs/kids.pdf", scope=DocumentScope.MINISTRY_SPECIFIC, category=KIDS
                ),
            )
        await service.upsert_requirement(
            admin, KIDS, MinistryRequirementUpsert(background_check_required=background_check_required)
        )
        await service.upsert_background_check_config(
            admin,
            BackgroundCheckConfigUpsert(provider="Protect My Ministry", application_url="https://checks.example.com"),
        )

    return _configure


class TestConfiguration:
    async def test_documents(self, session, seeded, tenant_for, storage):
        await storage.put("docs/handbook.pdf", b"%PDF")
        service = OnboardingService(session)
        admin = await tenant_for(seeded.admin)

        created = await service.create_document(
            admin, VolunteerDocumentCreate(name="Handbook", file_key="docs/handbook.pdf", category=KIDS)
        )
        assert created.message == "Document uploaded successfully"
        assert created.data.category is None

        document, content = await service.get_public_document(created.data.id)
        assert document.name == "Handbook"
        assert content == b"%PDF"

        await service.delete_document(admin, created.data.id)
        assert (await service.list_documents(admin)).data == []
        assert not await storage.exists("docs/handbook.pdf")

    async def test_ministry_document_needs_category(self, session, seeded, tenant_for):
        with pytest.raises(BusinessRuleError, match="Ministry category is required"):
            await OnboardingService(session).create_document(
                await tenant_for(seeded.admin),
                VolunteerDocumentCreate(name="Policy", file_key="k", scope=DocumentScope.MINISTRY_SPECIFIC),
            )

    async def test_staff_cannot_configure(self, session, seeded, tenant_for):
        with pytest.raises(PermissionDeniedError):
            await OnboardingService(session).create_document(
                await tenant_for(seeded.staff), VolunteerDocumentCreate(name="Handbook", file_key="k")
            )

    async def test_unknown_document(self, session, seeded, tenant_for):
        service = OnboardingService(session)

        with pytest.raises(NotFoundError):
            await service.delete_document(await tenant_for(seeded.admin), "missing")
        with pytest.raises(NotFoundError):
            await service.get_public_document("missing")

    async def test_requirement_upsert_updates_in_place(self, session, seeded, tenant_for):
        service = OnboardingService(session)
        admin = await tenant_for(seeded.admin)

        first = await service.upsert_requirement(admin, KIDS, MinistryRequirementUpsert(background_check_required=True))
        second = await service.upsert_requirement(
            admin, KIDS, MinistryRequirementUpsert(training_required=True, training_url="https://train.example.com")
        )

        assert second.data.id == first.data.id
        assert second.data.background_check_required is False
        listed = (await service.list_requirements(admin)).data
        assert [r.training_url for r in listed] == ["https://train.example.com"]

    async def test_background_check_config(self, session, seeded, tenant_for):
        service = OnboardingService(session)
        admin = await tenant_for(seeded.admin)

        assert (await service.get_background_check_config(admin)).data is None
        await service.upsert_background_check_config(
            admin, BackgroundCheckConfigUpsert(provider="Sterling", application_url="https://a.example.com")
        )
        saved = await service.upsert_background_check_config(
            admin,
            BackgroundCheckConfigUpsert(
                provider="Sterling", application_url="https://b.example.com", validity_months=12, reminder_days=[14]
            ),
        )

        fetched = (await service.get_background_check_config(admin)).data
        assert fetched.id == saved.data.id
        assert fetched.application_url == "https://b.example.com"
        assert fetched.reminder_days == [14]


class TestPackage:
    async def test_collect_package(self, session, seeded, configure):
        await configure()

        package = await OnboardingService(session).collect_onboarding_documents(seeded.organization.id, KIDS)

        assert [d.name for d in package.global_documents] == ["Handbook"]
        assert [d.name for d in package.ministry_documents] == ["Kids Policy"]
        assert package.background_check.provider == "Protect My Ministry"
        assert package.has_content

    async def test_other_ministry_gets_only_global_documents(self, session, seeded, configure):
        await configure()

        package = await OnboardingService(session).collect_onboarding_documents(
            seeded.organization.id, VolunteerCategoryType.GREETER
        )

        assert [d.name for d in package.global_documents] == ["Handbook"]
        assert package.ministry_documents == []
        assert package.background_check is None

    async def test_send_with_background_check_pending(self, session, seeded, configure, make_volunteer):
        await configure()
        volunteer = await make_volunteer("Ruth Moab", email="ruth@example.com")
        email = AsyncMock()
        email.send.return_value = SimpleNamespace(success=True)

        delivery = await OnboardingService(session, email=email).send_onboarding_documents(
            seeded.organization, "Ruth Moab", "ruth@example.com", KIDS, volunteer=volunteer
        )

        assert delivery.sent is True
        assert delivery.ready_for_export is False
        assert volunteer.bg_check_token
        sent = email.send.await_args.kwargs
        assert sent["to"] == "ruth@example.com"
        assert volunteer.bg_check_token in sent["html"]
        assert "Kids Policy" in sent["html"]

    async def test_send_marks_ready_without_check(self, session, seeded, configure, make_volunteer):
        await configure(background_check_required=False)
        volunteer = await make_volunteer("Ruth Moab", email="ruth@example.com")

        delivery = await OnboardingService(session).send_onboarding_documents(
            seeded.organization, "Ruth Moab", "ruth@example.com", KIDS, volunteer=volunteer
        )

        assert delivery.sent is True
        assert delivery.ready_for_export is True
        assert volunteer.ready_for_export is True
        assert volunteer.version == 2

    async def test_send_marks_ready_when_cleared(self, session, seeded, configure, make_volunteer):
        await configure()
        volunteer = await make_volunteer(
            "Ruth Moab", email="ruth@example.com", background_check_status=BackgroundCheckStatus.CLEARED
        )

        delivery = await OnboardingService(session).send_onboarding_documents(
            seeded.organization, "Ruth Moab", "ruth@example.com", KIDS, volunteer=volunteer
        )

        assert delivery.ready_for_export is True

    async def test_nothing_to_send(self, session, seeded, configure):
        await configure(background_check_required=False, with_documents=False)
        email = AsyncMock()

        delivery = await OnboardingService(session, email=email).send_onboarding_documents(
            seeded.organization, "Ruth", "ruth@example.com", KIDS
        )

        assert delivery.sent is False
        email.send.assert_not_awaited()

    async def test_failed_email(self, session, seeded, configure, make_volunteer):
        await configure(background_check_required=False)
        volunteer = await make_volunteer("Ruth", email="ruth@example.com")
        email = AsyncMock()
        email.send.return_value = SimpleNamespace(success=False)

        delivery = await OnboardingService(session, email=email).send_onboarding_documents(
            seeded.organization, "Ruth", "ruth@example.com", KIDS, volunteer=volunteer
        )

        assert delivery.sent is False
        assert volunteer.ready_for_export is False
