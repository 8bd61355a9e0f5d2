"""Unit tests for the repository layer against an in-memory SQLite database."""

from datetime import date, datetime, time, timedelta

import pytest
from sqlalchemy import select

from churchsync.core.database.base import utc_now
from churchsync.core.database.entities import (
    ChurchMember,
    ConnectCard,
    Course,
    EmailLog,
    EventAssignment,
    EventSession,
    Invitation,
    MemberIntegration,
    MemberNote,
    PrayerRequest,
    Volunteer,
    VolunteerCategory,
    VolunteerEvent,
)
from churchsync.core.database.repositories import (
    ChurchMemberRepository,
    ConnectCardRepository,
    CourseRepository,
    EmailLogRepository,
    EventSessionRepository,
    InvitationRepository,
    LocationRepository,
    MemberIntegrationRepository,
    MemberNoteRepository,
    OrganizationRepository,
    PrayerQuery,
    PrayerRequestRepository,
    QueryBuilder,
    UserRepository,
    VolunteerRepository,
)
from churchsync.core.models.domain.enums import (
    BackgroundCheckStatus,
    ConnectCardStatus,
    CourseStatus,
    DeliveryStatus,
    InvitationStatus,
    MemberType,
    PrayerStatus,
    VolunteerCategoryType,
    UserRole,
    VolunteerStatus,
)


@pytest.fixture
def org_id(seeded):
    return seeded.organization.id


async def add_member(session, org_id, name, email=None, location_id=None):
    member = ChurchMember(organization_id=org_id, name=name, email=email, location_id=location_id)
    session.add(member)
    await session.flush()
    return member


async def add_volunteer(session, org_id, name, **values):
    member = await add_member(session, org_id, name, email=f"{name.split()[0].lower()}@example.com")
    volunteer = Volunteer(organization_id=org_id, church_member_id=member.id, **values)
    session.add(volunteer)
    await session.flush()
    return volunteer


class TestBaseRepository:
    async def test_create_get_update_delete(self, session, org_id):
        repo = ChurchMemberRepository(session)
        member = await repo.create(ChurchMember(organization_id=org_id, name="Ruth"))

        assert (await repo.get_by_id(member.id)).name == "Ruth"
        member.name = "Ruth Ann"
        await repo.update(member)
        assert (await repo.get_in_organization(member.id, org_id)).name == "Ruth Ann"
        assert await repo.get_in_organization(member.id, "other-org") is None

        assert await repo.delete(member.id) is True
        assert await repo.delete(member.id) is False

    async def test_list_count_and_filters(self, session, seeded, org_id):
        repo = ChurchMemberRepository(session)
        for index in range(3):
            await add_member(session, org_id, f"Member {index}", location_id=seeded.main.id)
        await add_member(session, org_id, "North Member", location_id=seeded.north.id)
        await session.commit()

        assert await repo.count({"organization_id": org_id}) == 4
        assert await repo.count({"location_id": seeded.north.id}) == 1
        assert len(await repo.list(limit=2)) == 2
        # None filters are ignored
        assert len(await repo.list(filters={"location_id": None})) == 4

    def test_query_builder_ignores_unknown_columns(self):
        stmt = QueryBuilder.apply_filters(select(ChurchMember), ChurchMember, {"unknown": 1, "name": "Ruth"})
        assert "unknown" not in str(stmt)
        assert "church_members.name" in str(stmt)


class TestTenantRepositories:
    async def test_get_by_slug(self, session, seeded):
        repo = OrganizationRepository(session)
        assert (await repo.get_by_slug("grace")).id == seeded.organization.id
        assert await repo.get_by_slug("missing") is None

    async def test_active_locations(self, session, seeded, org_id):
        repo = LocationRepository(session)
        north = await repo.get_by_id(seeded.north.id)
        north.is_active = False
        await repo.update(north)

        active = await repo.list_for_organization(org_id, active_only=True)
        assert [location.name for location in active] == ["Main Campus"]
        assert len(await repo.list_for_organization(org_id)) == 2
        assert await repo.get_active(seeded.north.id, org_id) is None


class TestMemberRepositories:
    async def test_find_by_email_ignores_case(self, session, org_id):
        member = await add_member(session, org_id, "Ruth", email="Ruth@Example.com")
        await session.commit()

        found = await ChurchMemberRepository(session).find_by_email(org_id, " ruth@example.COM ")
        assert found.id == member.id
        assert await ChurchMemberRepository(session).find_by_email("other-org", "ruth@example.com") is None

    async def test_search(self, session, seeded, org_id):
        await add_member(session, org_id, "Ruth Moab", email="ruth@example.com", location_id=seeded.main.id)
        await add_member(session, org_id, "Naomi", email="naomi@moab.org", location_id=seeded.north.id)
        await session.commit()
        repo = ChurchMemberRepository(session)

        assert {m.name for m in await repo.search(org_id, "MOAB")} == {"Ruth Moab", "Naomi"}
        main_only = await repo.search(org_id, "moab", {"location_id": seeded.main.id})
        assert [m.name for m in main_only] == ["Ruth Moab"]

    async def test_search_by_member_type(self, session, org_id):
        await add_member(session, org_id, "Ruth")
        boaz = await add_member(session, org_id, "Boaz")
        boaz.member_type = MemberType.MEMBER
        await session.commit()

        found = await ChurchMemberRepository(session).search(org_id, member_type=MemberType.MEMBER)
        assert [m.name for m in found] == ["Boaz"]

    async def test_email_taken(self, session, org_id):
        member = await add_member(session, org_id, "Ruth", email="ruth@example.com")
        await session.commit()
        repo = ChurchMemberRepository(session)

        assert await repo.email_taken(org_id, " RUTH@example.com")
        assert not await repo.email_taken(org_id, "ruth@example.com", exclude_id=member.id)
        assert not await repo.email_taken("other-org", "ruth@example.com")

    async def test_list_by_ids_respects_location(self, session, seeded, org_id):
        main = await add_member(session, org_id, "Ruth", location_id=seeded.main.id)
        north = await add_member(session, org_id, "Boaz", location_id=seeded.north.id)
        await session.commit()
        repo = ChurchMemberRepository(session)

        both = await repo.list_by_ids(org_id, [main.id, north.id, "missing"])
        scoped = await repo.list_by_ids(org_id, [main.id, north.id], {"location_id": seeded.main.id})
        assert {m.id for m in both} == {main.id, north.id}
        assert [m.id for m in scoped] == [main.id]

    async def test_remove_clears_dependents(self, session, seeded, org_id):
        member = await add_member(session, org_id, "Ruth")
        card = ConnectCard(organization_id=org_id, name="Ruth", church_member_id=member.id)
        session.add_all(
            [
                card,
                MemberNote(organization_id=org_id, church_member_id=member.id, content="hi", created_by=seeded.admin.id),
                MemberIntegration(organization_id=org_id, church_member_id=member.id, provider="ghl", external_id="c-1"),
            ]
        )
        await session.commit()
        repo = ChurchMemberRepository(session)

        assert not await repo.has_volunteer_record(member.id)
        await repo.remove(member)
        await session.commit()

        await session.refresh(card)
        assert card.church_member_id is None
        assert await MemberNoteRepository(session).list_for_member(member.id) == []
        assert await MemberIntegrationRepository(session).get_for_member(member.id, "ghl") is None

    async def test_has_volunteer_record(self, session, org_id):
        volunteer = await add_volunteer(session, org_id, "Ruth Moab")
        await session.commit()

        assert await ChurchMemberRepository(session).has_volunteer_record(volunteer.church_member_id)

    async def test_sync_summary(self, session, org_id):
        member = await add_member(session, org_id, "Ruth")
        synced_at = datetime(2024, 5, 1, 12, 0)
        session.add(
            MemberIntegration(
                organization_id=org_id,
                church_member_id=member.id,
                provider="ghl",
                external_id="c-1",
                last_sync_at=synced_at,
            )
        )
        await session.commit()
        repo = MemberIntegrationRepository(session)

        assert await repo.sync_summary(org_id, "ghl") == (1, synced_at)
        assert (await repo.find_by_external_id("ghl", "c-1")).church_member_id == member.id
        assert await repo.get_for_member(member.id, "other") is None


class TestConnectCardRepository:
    async def test_find_duplicate(self, session, org_id):
        older = ConnectCard(organization_id=org_id, name="Jane Doe", email="JANE@x.com", scanned_at=datetime(2024, 1, 1))
        newer = ConnectCard(organization_id=org_id, name="jane doe", phone="5551234567", scanned_at=datetime(2024, 2, 1))
        other = ConnectCard(organization_id=org_id, name="John Doe", email="jane@x.com")
        session.add_all([older, newer, other])
        await session.commit()
        repo = ConnectCardRepository(session)

        match = await repo.find_duplicate(org_id, "Jane Doe", emails=["jane@x.com"], phones=["5551234567"])
        assert match.id == newer.id
        match = await repo.find_duplicate(org_id, "Jane Doe", emails=["jane@x.com"], exclude_id=newer.id)
        assert match.id == older.id
        assert await repo.find_duplicate(org_id, "Jane Doe") is None

    async def test_list_for_export(self, session, seeded, org_id):
        exported = ConnectCard(
            organization_id=org_id,
            location_id=seeded.main.id,
            name="Old",
            status=ConnectCardStatus.PROCESSED,
            last_exported_at=utc_now(),
        )
        fresh = ConnectCard(
            organization_id=org_id, location_id=seeded.main.id, name="New", status=ConnectCardStatus.PROCESSED
        )
        north = ConnectCard(
            organization_id=org_id, location_id=seeded.north.id, name="North", status=ConnectCardStatus.PROCESSED
        )
        pending = ConnectCard(organization_id=org_id, location_id=seeded.main.id, name="Pending")
        session.add_all([exported, fresh, north, pending])
        await session.commit()
        repo = ConnectCardRepository(session)

        cards = await repo.list_for_export(org_id, [ConnectCardStatus.PROCESSED], location_id=seeded.main.id)
        assert {card.name for card in cards} == {"Old", "New"}
        cards = await repo.list_for_export(org_id, [ConnectCardStatus.PROCESSED], only_new=True)
        assert {card.name for card in cards} == {"New", "North"}


class TestVolunteerRepository:
    async def test_update_with_version(self, session, org_id):
        volunteer = await add_volunteer(session, org_id, "Ruth Moab")
        await session.commit()
        repo = VolunteerRepository(session)

        assert await repo.update_with_version(volunteer.id, org_id, 1, {"notes": "first"}) == 1
        assert await repo.update_with_version(volunteer.id, org_id, 1, {"notes": "stale"}) == 0
        await session.commit()

        refreshed, _ = await repo.get_with_member(volunteer.id, org_id)
        assert refreshed.version == 2
        assert refreshed.notes == "first"

    async def test_categories(self, session, org_id):
        volunteer = await add_volunteer(session, org_id, "Ruth Moab")
        repo = VolunteerRepository(session)
        await repo.replace_categories(
            volunteer, [VolunteerCategoryType.GREETER, VolunteerCategoryType.USHER, VolunteerCategoryType.GREETER]
        )
        await session.commit()

        categories = await repo.categories_for([volunteer.id])
        assert sorted(categories[volunteer.id]) == ["GREETER", "USHER"]

        await repo.replace_categories(volunteer, [VolunteerCategoryType.PARKING])
        await session.commit()
        assert (await repo.categories_for([volunteer.id]))[volunteer.id] == [VolunteerCategoryType.PARKING]

    async def test_list_with_members_filters(self, session, org_id):
        ruth = await add_volunteer(session, org_id, "Ruth Moab", status=VolunteerStatus.ACTIVE)
        await add_volunteer(session, org_id, "Boaz Field", status=VolunteerStatus.INACTIVE)
        session.add(VolunteerCategory(organization_id=org_id, volunteer_id=ruth.id, category=VolunteerCategoryType.GREETER))
        await session.commit()
        repo = VolunteerRepository(session)

        assert len(await repo.list_with_members(org_id)) == 2
        rows = await repo.list_with_members(org_id, status=VolunteerStatus.ACTIVE)
        assert [member.name for _, member in rows] == ["Ruth Moab"]
        rows = await repo.list_with_members(org_id, category=VolunteerCategoryType.GREETER)
        assert [volunteer.id for volunteer, _ in rows] == [ruth.id]
        rows = await repo.list_with_members(org_id, search="boaz")
        assert [member.name for _, member in rows] == ["Boaz Field"]

    async def test_available_for_session(self, session, org_id):
        event = VolunteerEvent(organization_id=org_id, name="Sunday")
        session.add(event)
        await session.flush()
        event_session = EventSession(
            event_id=event.id,
            organization_id=org_id,
            session_date=date(2024, 6, 2),
            start_time=time(9, 0),
            end_time=time(11, 0),
        )
        session.add(event_session)
        await session.flush()

        never = await add_volunteer(session, org_id, "Anna Never", status=VolunteerStatus.ACTIVE)
        recent = await add_volunteer(
            session, org_id, "Bill Recent", status=VolunteerStatus.ACTIVE, last_served_date=date(2024, 5, 26)
        )
        long_ago = await add_volunteer(
            session,
            org_id,
            "Cara Longago",
            status=VolunteerStatus.ACTIVE,
            last_served_date=date(2023, 1, 1),
            background_check_status=BackgroundCheckStatus.CLEARED,
        )
        assigned = await add_volunteer(session, org_id, "Dan Assigned", status=VolunteerStatus.ACTIVE)
        await add_volunteer(session, org_id, "Eve Inactive", status=VolunteerStatus.INACTIVE)
        session.add(
            EventAssignment(
                organization_id=org_id, event_id=event.id, session_id=event_session.id, volunteer_id=assigned.id
            )
        )
        await session.commit()
        repo = VolunteerRepository(session)

        rows = await repo.available_for_session(org_id, event_session.id)
        assert [volunteer.id for volunteer, _ in rows] == [never.id, long_ago.id, recent.id]

        rows = await repo.available_for_session(org_id, event_session.id, requires_background_check=True)
        assert [volunteer.id for volunteer, _ in rows] == [long_ago.id]


class TestEventSessionRepository:
    async def test_adjust_slots_never_negative(self, session, org_id):
        event = VolunteerEvent(organization_id=org_id, name="Outreach")
        session.add(event)
        await session.flush()
        event_session = EventSession(
            event_id=event.id,
            organization_id=org_id,
            session_date=date(2024, 6, 2),
            start_time=time(9, 0),
            end_time=time(10, 0),
            slots_needed=3,
        )
        session.add(event_session)
        await session.commit()
        repo = EventSessionRepository(session)

        await repo.adjust_slots(event_session.id, 2)
        await repo.adjust_slots(event_session.id, -5)
        await session.commit()

        rows = await repo.list_for_event(event.id)
        assert rows[0].slots_filled == 0

        await repo.adjust_slots(event_session.id, 1)
        await session.commit()
        found, found_event = await repo.get_with_event(event_session.id, org_id)
        assert found.slots_filled == 1
        assert found_event.id == event.id


class TestPrayerRequestRepository:
    async def test_staff_visibility(self, session, seeded, org_id):
        staff_id = seeded.staff.id
        session.add_all(
            [
                PrayerRequest(organization_id=org_id, request="Public one"),
                PrayerRequest(organization_id=org_id, request="Private mine", is_private=True, assigned_to_id=staff_id),
                PrayerRequest(organization_id=org_id, request="Private other", is_private=True),
            ]
        )
        await session.commit()
        repo = PrayerRequestRepository(session)

        items, total = await repo.search(org_id, None, staff_id, PrayerQuery(), page=1, limit=10)
        assert total == 2
        assert {item.request for item in items} == {"Public one", "Private mine"}

        items, total = await repo.search(org_id, None, None, PrayerQuery(), page=1, limit=10)
        assert total == 3

        items, _ = await repo.search(org_id, None, staff_id, PrayerQuery(is_private=True), page=1, limit=10)
        assert [item.request for item in items] == ["Private mine"]
        assert len(await repo.list_visible(org_id, None, staff_id)) == 2

    async def test_search_pagination_and_order(self, session, org_id):
        base = datetime(2024, 1, 1)
        for index in range(5):
            session.add(
                PrayerRequest(
                    organization_id=org_id,
                    request=f"Request {index}",
                    created_at=base + timedelta(days=index),
                    status=PrayerStatus.PENDING,
                )
            )
        session.add(PrayerRequest(organization_id=org_id, request="Urgent", is_urgent=True, created_at=base))
        await session.commit()
        repo = PrayerRequestRepository(session)

        items, total = await repo.search(org_id, None, None, PrayerQuery(), page=1, limit=2)
        assert total == 6
        assert [item.request for item in items] == ["Urgent", "Request 4"]

        items, _ = await repo.search(org_id, None, None, PrayerQuery(search="request 1"), page=1, limit=10)
        assert [item.request for item in items] == ["Request 1"]

        items, _ = await repo.search(org_id, None, None, PrayerQuery(), page=3, limit=2)
        assert [item.request for item in items] == ["Request 1", "Request 0"]


class TestCourseRepository:
    async def test_list_visible(self, session, org_id):
        def course(title, organization_id, status):
            return Course(
                organization_id=organization_id,
                title=title,
                slug=title.lower(),
                description="d",
                small_description="s",
                category="Teaching",
                status=status,
            )

        session.add_all(
            [
                course("Mine", org_id, CourseStatus.Draft),
                course("Platform", None, CourseStatus.Published),
                course("PlatformDraft", None, CourseStatus.Draft),
            ]
        )
        await session.commit()
        repo = CourseRepository(session)

        assert {c.title for c in await repo.list_visible(org_id)} == {"Mine", "Platform"}
        assert await repo.slug_taken(org_id, "mine")
        assert not await repo.slug_taken(org_id, "platform")


async def test_email_status_counts(session, org_id):
    session.add_all(
        [
            EmailLog(organization_id=org_id, to_address="a@x.org", subject="Hi", status=DeliveryStatus.SENT),
            EmailLog(organization_id=org_id, to_address="b@x.org", subject="Hi", status=DeliveryStatus.SENT),
            EmailLog(organization_id=org_id, to_address="c@x.org", subject="Hi", status=DeliveryStatus.FAILED),
        ]
    )
    await session.commit()

    counts = await EmailLogRepository(session).status_counts(org_id)
    assert counts == {DeliveryStatus.SENT: 2, DeliveryStatus.FAILED: 1}


class TestInvitationRepository:
    async def test_pending_lookups(self, session, seeded, org_id):
        def invitation(email, status, token):
            return Invitation(
                organization_id=org_id,
                email=email,
                token=token.ljust(64, "0"),
                status=status,
                expires_at=utc_now() + timedelta(days=7),
                invited_by=seeded.owner.id,
            )

        pending = invitation("new@grace.test", InvitationStatus.PENDING, "a")
        session.add_all([pending, invitation("old@grace.test", InvitationStatus.EXPIRED, "b")])
        await session.commit()
        repo = InvitationRepository(session)

        assert (await repo.find_pending(org_id, " NEW@grace.test")).id == pending.id
        assert await repo.find_pending(org_id, "old@grace.test") is None
        assert [i.email for i in await repo.list_pending(org_id)] == ["new@grace.test"]
        assert (await repo.get_by_token("a".ljust(64, "0"))).id == pending.id


class TestUserQueries:
    async def test_find_by_email_and_count_owners(self, session, seeded, org_id):
        repo = UserRepository(session)

        found = await repo.find_in_organization_by_email(org_id, "SAM.STAFF@grace.test")
        assert found.id == seeded.staff.id
        assert await repo.find_in_organization_by_email("other-org", "sam.staff@grace.test") is None
        assert await repo.count_with_role(org_id, UserRole.church_owner) == 1
        assert await repo.count_with_role(org_id, UserRole.church_admin) == 2
