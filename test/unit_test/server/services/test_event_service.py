"""
Unit tests for EventService.

Slot counters are read back through a fresh session because the service
moves them with bulk UPDATE statements.
"""

from datetime import date, time
from unittest.mock import AsyncMock, patch

import pytest

from churchsync.core.database.base import utc_now
from churchsync.core.database.entities import EventAssignment, EventSession, MemberIntegration, VolunteerEvent
from churchsync.core.database.repositories.members import MemberIntegrationRepository
from churchsync.core.errors import (
    BusinessRuleError,
    IntegrationNotConfiguredError,
    NotFoundError,
    PermissionDeniedError,
)
from churchsync.core.models.domain.enums import AssignmentStatus, EventStatus, ResourceStatus, VolunteerStatus
from churchsync.core.models.io.events import (
    CommonResourcesCreate,
    EventCreate,
    EventSessionInput,
    EventUpdate,
    ResourceCreate,
    ResourceUpdate,
)
from churchsync.integrations.ghl import PROVIDER
from churchsync.server.core.config import GHLConfig
from churchsync.server.services.events import MAX_BATCH, SMS_NOT_CONFIGURED, EventService
from churchsync.server.services.ghl import GHLService

SUNDAY = EventSessionInput(session_date=date(2025, 1, 5), start_time=time(9), end_time=time(11), slots_needed=3)


@pytest.fixture
def slots_filled(session_maker):
    async def _read(session_id: str) -> int:
        async with session_maker() as fresh:
            return (await fresh.get(EventSession, session_id)).slots_filled

    return _read


@pytest.fixture
def configured_service(session):
    return EventService(session, ghl=GHLService(session, config=GHLConfig(private_token="pit", location_id="loc-1")))


async def _assignment(session, seeded, event, event_session, volunteer, status=AssignmentStatus.INVITED):
    assignment = EventAssignment(
        organization_id=seeded.organization.id,
        event_id=event.id,
        session_id=event_session.id,
        volunteer_id=volunteer.id,
        status=status,
        invited_at=utc_now() if status == AssignmentStatus.INVITED else None,
    )
    session.add(assignment)
    await session.commit()
    return assignment


class TestEventLifecycle:
    async def test_create_event_as_draft(self, session, seeded, tenant_for):
        response = await EventService(session).create_event(
            await tenant_for(seeded.staff), EventCreate(name="Easter Service", sessions=[SUNDAY])
        )

        assert response.message == "Event created successfully"
        assert response.data.event.status == EventStatus.DRAFT
        assert response.data.event.location_id == seeded.main.id
        assert len(response.data.sessions) == 1
        assert response.data.sessions[0].slots_needed == 3
        assert response.data.sessions[0].slots_filled == 0

    async def test_create_event_in_other_campus(self, session, seeded, tenant_for):
        with pytest.raises(PermissionDeniedError):
            await EventService(session).create_event(
                await tenant_for(seeded.staff), EventCreate(name="Outreach", location_id=seeded.north.id)
            )

    async def test_publish_rules(self, session, seeded, tenant_for):
        service = EventService(session)
        tenant = await tenant_for(seeded.admin)
        empty = (await service.create_event(tenant, EventCreate(name="No Sessions"))).data.event

        with pytest.raises(BusinessRuleError, match="at least one session"):
            await service.publish_event(tenant, empty.id)

        event = (await service.create_event(tenant, EventCreate(name="Christmas", sessions=[SUNDAY]))).data.event
        published = await service.publish_event(tenant, event.id)
        assert published.data.status == EventStatus.PUBLISHED

        with pytest.raises(BusinessRuleError, match="Only draft events"):
            await service.publish_event(tenant, event.id)

    async def test_sessions_locked_after_publish(self, session, seeded, tenant_for, make_event):
        event, _ = await make_event()
        service = EventService(session)
        tenant = await tenant_for(seeded.staff)

        renamed = await service.update_event(tenant, event.id, EventUpdate(name="Sunday Worship"))
        assert renamed.data.event.name == "Sunday Worship"

        with pytest.raises(BusinessRuleError, match="only be changed while the event is a draft"):
            await service.update_event(tenant, event.id, EventUpdate(sessions=[SUNDAY]))

    async def test_draft_sessions_are_replaced(self, session, seeded, tenant_for, make_event):
        event, old_session = await make_event(status=EventStatus.DRAFT)
        evening = EventSessionInput(session_date=date(2025, 1, 5), start_time=time(18), end_time=time(20))

        response = await EventService(session).update_event(
            await tenant_for(seeded.staff), event.id, EventUpdate(sessions=[SUNDAY, evening])
        )

        ids = [s.id for s in response.data.sessions]
        assert len(ids) == 2
        assert old_session.id not in ids

    async def test_empty_session_list_is_rejected(self, session, seeded, tenant_for, make_event):
        event, _ = await make_event(status=EventStatus.DRAFT)

        with pytest.raises(BusinessRuleError, match="at least one session"):
            await EventService(session).update_event(await tenant_for(seeded.staff), event.id, EventUpdate(sessions=[]))

    async def test_cancel_rules(self, session, seeded, tenant_for, make_event):
        event, _ = await make_event()
        completed, _ = await make_event("Done", status=EventStatus.COMPLETED)
        service = EventService(session)
        tenant = await tenant_for(seeded.staff)

        assert (await service.cancel_event(tenant, event.id)).data.status == EventStatus.CANCELLED
        with pytest.raises(BusinessRuleError, match="already cancelled"):
            await service.cancel_event(tenant, event.id)
        with pytest.raises(BusinessRuleError, match="completed event"):
            await service.cancel_event(tenant, completed.id)

    async def test_delete_draft(self, session, seeded, tenant_for, make_event, session_maker):
        event, event_session = await make_event(status=EventStatus.DRAFT)
        service = EventService(session)
        tenant = await tenant_for(seeded.staff)
        await service.add_resource(tenant, event.id, ResourceCreate(name="Chairs"))

        response = await service.delete_event(tenant, event.id)

        assert response.message == "Event deleted successfully"
        async with session_maker() as fresh:
            assert await fresh.get(VolunteerEvent, event.id) is None
            assert await fresh.get(EventSession, event_session.id) is None

    async def test_delete_published_is_refused(self, session, seeded, tenant_for, make_event):
        event, _ = await make_event()

        with pytest.raises(BusinessRuleError, match="Consider cancelling first"):
            await EventService(session).delete_event(await tenant_for(seeded.staff), event.id)

    async def test_delete_with_history_archives(self, session, seeded, tenant_for, make_event, make_volunteer):
        event, event_session = await make_event(status=EventStatus.CANCELLED)
        volunteer = await make_volunteer("Ruth")
        await _assignment(session, seeded, event, event_session, volunteer, AssignmentStatus.ASSIGNED)
        service = EventService(session)
        tenant = await tenant_for(seeded.staff)

        response = await service.delete_event(tenant, event.id)

        assert response.message == "Event archived (has volunteer history)"
        assert (await service.get_event(tenant, event.id)).data.event.status == EventStatus.ARCHIVED

    async def test_other_campus_event_is_hidden(self, session, seeded, tenant_for, make_event):
        event, _ = await make_event(location=seeded.north)
        service = EventService(session)

        with pytest.raises(NotFoundError):
            await service.get_event(await tenant_for(seeded.staff), event.id)
        listed = (await service.list_events(await tenant_for(seeded.staff))).data
        assert listed == []


class TestResources:
    async def test_resource_checklist(self, session, seeded, tenant_for, make_event):
        event, _ = await make_event()
        service = EventService(session)
        tenant = await tenant_for(seeded.staff)

        chairs = (await service.add_resource(tenant, event.id, ResourceCreate(name=" Chairs ", quantity=40))).data
        added = await service.add_common_resources(
            tenant, event.id, CommonResourcesCreate(names=["chairs", "Sound System", "", "Sound System", "Tables"])
        )

        assert chairs.name == "Chairs" and chairs.sort_order == 1
        assert added.message == "Added 2 resources"
        assert [(r.name, r.sort_order) for r in added.data] == [("Sound System", 2), ("Tables", 3)]

        updated = await service.update_resource(tenant, chairs.id, ResourceUpdate(status=ResourceStatus.READY))
        assert updated.message == "Status updated to READY"
        renamed = await service.update_resource(tenant, chairs.id, ResourceUpdate(quantity=50))
        assert renamed.message == "Resource updated"
        assert renamed.data.quantity == 50

        await service.delete_resource(tenant, chairs.id)
        detail = (await service.get_event(tenant, event.id)).data
        assert [r.name for r in detail.resources] == ["Sound System", "Tables"]

    async def test_unknown_resource(self, session, seeded, tenant_for):
        with pytest.raises(NotFoundError, match="Resource not found"):
            await EventService(session).delete_resource(await tenant_for(seeded.staff), "missing")


class TestAssignments:
    async def test_assign_and_remove(self, session, seeded, tenant_for, make_event, make_volunteer, slots_filled):
        _, event_session = await make_event()
        volunteer = await make_volunteer("Ruth Moab")
        service = EventService(session)
        tenant = await tenant_for(seeded.staff)

        response = await service.assign_volunteer(tenant, event_session.id, volunteer.id)
        assert response.message == "Ruth Moab assigned successfully"
        assert response.data.status == AssignmentStatus.ASSIGNED
        assert await slots_filled(event_session.id) == 1

        with pytest.raises(BusinessRuleError, match="already assigned"):
            await service.assign_volunteer(tenant, event_session.id, volunteer.id)

        removed = await service.remove_assignment(tenant, response.data.id)
        assert removed.message == "Ruth Moab removed from session"
        assert await slots_filled(event_session.id) == 0

    async def test_assign_rules(self, session, seeded, tenant_for, make_event, make_volunteer):
        _, draft_session = await make_event(status=EventStatus.DRAFT)
        _, open_session = await make_event("Open")
        inactive = await make_volunteer("Gone", status=VolunteerStatus.INACTIVE)
        service = EventService(session)
        tenant = await tenant_for(seeded.staff)

        with pytest.raises(BusinessRuleError, match="event not active"):
            await service.assign_volunteer(tenant, draft_session.id, inactive.id)
        with pytest.raises(NotFoundError, match="not found or not active"):
            await service.assign_volunteer(tenant, open_session.id, inactive.id)
        with pytest.raises(NotFoundError, match="event not active"):
            await service.assign_volunteer(tenant, "missing", inactive.id)

    async def test_removing_declined_keeps_slots(
        self, session, seeded, tenant_for, make_event, make_volunteer, slots_filled
    ):
        event, event_session = await make_event()
        volunteer = await make_volunteer("Ruth")
        declined = await _assignment(session, seeded, event, event_session, volunteer, AssignmentStatus.DECLINED)
        event_session.slots_filled = 1
        session.add(event_session)
        await session.commit()

        await EventService(session).remove_assignment(await tenant_for(seeded.staff), declined.id)

        assert await slots_filled(event_session.id) == 1

    async def test_bulk_assign(self, session, seeded, tenant_for, make_event, make_volunteer, slots_filled):
        event, event_session = await make_event()
        first = await make_volunteer("Ruth")
        second = await make_volunteer("Naomi")
        inactive = await make_volunteer("Orpah", status=VolunteerStatus.INACTIVE)
        await _assignment(session, seeded, event, event_session, first, AssignmentStatus.ASSIGNED)
        service = EventService(session)
        tenant = await tenant_for(seeded.staff)

        response = await service.bulk_assign(tenant, event_session.id, [first.id, second.id, inactive.id, second.id])

        assert response.data.assigned == 1
        assert response.data.skipped == 1
        assert response.data.failed == 1
        assert response.message == "1 volunteer(s) assigned, 1 skipped"
        assert await slots_filled(event_session.id) == 1

    async def test_bulk_limits(self, session, seeded, tenant_for, make_event):
        _, event_session = await make_event()
        service = EventService(session)
        tenant = await tenant_for(seeded.staff)

        with pytest.raises(BusinessRuleError, match="No volunteers selected"):
            await service.bulk_assign(tenant, event_session.id, [])
        with pytest.raises(BusinessRuleError, match=f"Maximum {MAX_BATCH}"):
            await service.bulk_assign(tenant, event_session.id, [f"v{i}" for i in range(MAX_BATCH + 1)])


class TestInvitations:
    async def test_invite_requires_crm(self, session, seeded, tenant_for, make_event, make_volunteer):
        _, event_session = await make_event()
        volunteer = await make_volunteer("Ruth", phone="5551234567")

        with pytest.raises(IntegrationNotConfiguredError) as exc_info:
            await EventService(session).invite_volunteers(await tenant_for(seeded.staff), event_session.id, [volunteer.id])

        assert exc_info.value.message == SMS_NOT_CONFIGURED

    async def test_invite_volunteers(
        self, session, seeded, tenant_for, make_event, make_volunteer, configured_service, slots_filled, session_maker
    ):
        _, event_session = await make_event()
        with_phone = await make_volunteer("Ruth Moab", phone="5551234567")
        without_phone = await make_volunteer("Naomi")

        response = await configured_service.invite_volunteers(
            await tenant_for(seeded.staff), event_session.id, [with_phone.id, without_phone.id]
        )

        assert response.data.invited == 2
        assert response.data.sms_skipped == 1
        assert response.data.failed == 0
        assert response.message == "2 volunteer(s) invited (1 without phone)"
        assert await slots_filled(event_session.id) == 2
        async with session_maker() as fresh:
            link = await MemberIntegrationRepository(fresh).get_for_member(with_phone.church_member_id, PROVIDER)
            assert link.external_id.startswith("mock-contact-")
            assert await MemberIntegrationRepository(fresh).get_for_member(without_phone.church_member_id, PROVIDER) is None

    async def test_sms_failure_after_invitation_is_counted_separately(
        self, session, seeded, tenant_for, make_event, make_volunteer, configured_service, slots_filled
    ):
        _, event_session = await make_event()
        volunteer = await make_volunteer("Ruth Moab", phone="5551234567")

        with patch.object(configured_service.ghl, "sync_contact", AsyncMock(side_effect=RuntimeError("CRM down"))):
            response = await configured_service.invite_volunteers(
                await tenant_for(seeded.staff), event_session.id, [volunteer.id]
            )

        assert response.data.invited == 1
        assert response.data.failed == 0
        assert response.data.sms_failed == 1
        assert response.message == "1 volunteer(s) invited, 1 SMS failed"
        assert await slots_filled(event_session.id) == 1


class TestInboundSms:
    @pytest.fixture
    async def invited(self, session, seeded, make_event, make_volunteer):
        event, event_session = await make_event(confirmation_message="See you {date}, {name}!")
        volunteer = await make_volunteer("Ruth Moab", phone="5551234567")
        session.add(
            MemberIntegration(
                organization_id=seeded.organization.id,
                church_member_id=volunteer.church_member_id,
                provider=PROVIDER,
                external_id="contact-1",
            )
        )
        event_session.slots_filled = 1
        session.add(event_session)
        await session.commit()
        assignment = await _assignment(session, seeded, event, event_session, volunteer)
        return volunteer, event_session, assignment

    async def test_missing_contact_id(self, session):
        with pytest.raises(BusinessRuleError, match="Missing contactId"):
            await EventService(session).process_inbound_sms({"message": "YES"})

    @pytest.mark.parametrize("payload", [{"contactId": "contact-1"}, {"contactId": "contact-1", "body": "what time?"}])
    async def test_ignored_messages(self, session, payload):
        response = await EventService(session).process_inbound_sms(payload)

        assert response.data.action == "ignored"

    async def test_unknown_contact(self, session, seeded):
        response = await EventService(session).process_inbound_sms({"contactId": "nobody", "message": "YES"})

        assert response.data.action == "no_member"

    async def test_no_pending_invite(self, session, seeded, make_volunteer):
        volunteer = await make_volunteer("Ruth")
        session.add(
            MemberIntegration(
                organization_id=seeded.organization.id,
                church_member_id=volunteer.church_member_id,
                provider=PROVIDER,
                external_id="contact-2",
            )
        )
        await session.commit()

        response = await EventService(session).process_inbound_sms({"contactId": "contact-2", "body": "yes"})

        assert response.data.action == "no_invite"
        assert response.data.volunteer_id == volunteer.id

    async def test_decline_frees_slot(self, session, configured_service, invited, slots_filled):
        volunteer, event_session, assignment = invited

        response = await configured_service.process_inbound_sms({"contactId": "contact-1", "message": "No sorry"})

        assert response.message == "Response processed: DECLINED"
        assert response.data.action == "declined"
        assert response.data.assignment_id == assignment.id
        assert response.data.new_status == AssignmentStatus.DECLINED
        assert await slots_filled(event_session.id) == 0

    async def test_confirm_keeps_slot(self, session, configured_service, invited, slots_filled, session_maker):
        volunteer, event_session, assignment = invited

        response = await configured_service.process_inbound_sms({"contactId": "contact-1", "text": "Yes I can"})

        assert response.message == "Response processed: CONFIRMED"
        assert response.data.new_status == AssignmentStatus.CONFIRMED
        assert await slots_filled(event_session.id) == 1
        async with session_maker() as fresh:
            stored = await fresh.get(EventAssignment, assignment.id)
            assert stored.status == AssignmentStatus.CONFIRMED
            assert stored.responded_at is not None

    async def test_confirmation_sms_failure_is_tolerated(self, session, invited, session_maker):
        _, _, assignment = invited
        assignment_id = assignment.id

        response = await EventService(session).process_inbound_sms({"contactId": "contact-1", "message": "yes"})

        assert response.data.action == "confirmed"
        assert response.data.assignment_id == assignment_id
        async with session_maker() as fresh:
            assert (await fresh.get(EventAssignment, assignment_id)).status == AssignmentStatus.CONFIRMED
