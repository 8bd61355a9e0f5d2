"""Unit tests for OrganizationService and MemberService."""

import pytest

from churchsync.core.database.entities import ChurchMember
from churchsync.core.errors import BusinessRuleError, NotFoundError, PermissionDeniedError
from churchsync.core.models.io.organizations import LocationCreate
from churchsync.server.services.members import MemberService
from churchsync.server.services.organizations import OrganizationService, slugify


@pytest.mark.parametrize(
    "value,expected",
    [("North Campus", "north-campus"), ("  St. Mark's  ", "st-mark-s"), ("Downtown #2", "downtown-2"), ("!!!", "")],
)
def test_slugify(value, expected):
    assert slugify(value) == expected


class TestOrganizationService:
    async def test_get_organization_lists_active_campuses(self, session, seeded, tenant_for):
        service = OrganizationService(session)
        admin = await tenant_for(seeded.admin)
        await service.deactivate_location(admin, seeded.north.id)

        detail = (await service.get_organization(admin)).data

        assert detail.organization.slug == "grace"
        assert [location.name for location in detail.locations] == ["Main Campus"]

    async def test_create_location(self, session, seeded, tenant_for):
        service = OrganizationService(session)
        admin = await tenant_for(seeded.admin)

        created = await service.create_location(admin, LocationCreate(name=" East Campus ", address="1 East St"))

        assert created.data.slug == "east-campus"
        assert created.data.name == "East Campus"
        names = [location.name for location in (await service.list_locations(admin)).data]
        assert names == ["East Campus", "Main Campus", "North Campus"]

    async def test_duplicate_slug(self, session, seeded, tenant_for):
        with pytest.raises(BusinessRuleError, match="slug 'north' already exists"):
            await OrganizationService(session).create_location(
                await tenant_for(seeded.admin), LocationCreate(name="North")
            )

    async def test_slug_needs_letters(self, session, seeded, tenant_for):
        with pytest.raises(BusinessRuleError, match="letters or digits"):
            await OrganizationService(session).create_location(await tenant_for(seeded.admin), LocationCreate(name="!!"))

    async def test_staff_cannot_manage_campuses(self, session, seeded, tenant_for):
        with pytest.raises(PermissionDeniedError):
            await OrganizationService(session).create_location(
                await tenant_for(seeded.staff), LocationCreate(name="East")
            )

    async def test_deactivate_unknown_location(self, session, seeded, tenant_for):
        with pytest.raises(NotFoundError):
            await OrganizationService(session).deactivate_location(await tenant_for(seeded.admin), "missing")

    async def test_inactive_campuses_are_listed_on_request(self, session, seeded, tenant_for):
        service = OrganizationService(session)
        admin = await tenant_for(seeded.admin)
        await service.deactivate_location(admin, seeded.north.id)

        active = (await service.list_locations(admin)).data
        every = (await service.list_locations(admin, active_only=False)).data

        assert len(active) == 1
        assert len(every) == 2

    async def test_list_users(self, session, seeded, tenant_for):
        users = (await OrganizationService(session).list_users(await tenant_for(seeded.staff))).data

        assert [user.name for user in users] == [
            "Adam Admin",
            "Carla Campus",
            "Nina North",
            "Olivia Owner",
            "Sam Staff",
        ]


class TestMemberService:
    @pytest.fixture
    async def members(self, session, seeded):
        rows = [
            ChurchMember(organization_id=seeded.organization.id, location_id=seeded.main.id, name="Ruth Moab", email="ruth@example.com"),
            ChurchMember(organization_id=seeded.organization.id, location_id=seeded.main.id, name="Naomi"),
            ChurchMember(organization_id=seeded.organization.id, location_id=seeded.north.id, name="Boaz"),
        ]
        session.add_all(rows)
        await session.commit()
        return rows

    async def test_list_is_scoped(self, session, seeded, tenant_for, members):
        service = MemberService(session)

        staff = (await service.list_members(await tenant_for(seeded.staff))).data
        owner = (await service.list_members(await tenant_for(seeded.owner))).data

        assert [m.name for m in staff] == ["Naomi", "Ruth Moab"]
        assert [m.name for m in owner] == ["Boaz", "Naomi", "Ruth Moab"]

    async def test_search(self, session, seeded, tenant_for, members):
        found = (await MemberService(session).list_members(await tenant_for(seeded.owner), search="RUTH@")).data

        assert [m.name for m in found] == ["Ruth Moab"]

    async def test_get_member(self, session, seeded, tenant_for, members):
        service = MemberService(session)

        assert (await service.get_member(await tenant_for(seeded.staff), members[0].id)).data.name == "Ruth Moab"
        with pytest.raises(NotFoundError):
            await service.get_member(await tenant_for(seeded.staff), members[2].id)
