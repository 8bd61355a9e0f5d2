"""
API tests for the GoHighLevel inbound SMS webhook.
"""

import pytest
from httpx import AsyncClient

from churchsync.core.database.base import utc_now
from churchsync.core.database.entities import EventAssignment, EventSession, MemberIntegration
from churchsync.core.models.domain.enums import AssignmentStatus
from churchsync.integrations.ghl import PROVIDER

pytestmark = pytest.mark.asyncio

WEBHOOK = "/api/v1/webhooks/ghl/inbound-sms"


@pytest.fixture
async def invitation(session, seeded, make_event, make_volunteer):
    event, event_session = await make_event()
    volunteer = await make_volunteer("Alice Active", phone="5551234567")
    assignment = EventAssignment(
        organization_id=seeded.organization.id,
        event_id=event.id,
        session_id=event_session.id,
        volunteer_id=volunteer.id,
        status=AssignmentStatus.INVITED,
        invited_at=utc_now(),
    )
    event_session.slots_filled = 1
    session.add_all(
        [
            assignment,
            event_session,
            MemberIntegration(
                organization_id=seeded.organization.id,
                church_member_id=volunteer.church_member_id,
                provider=PROVIDER,
                external_id="contact-1",
            ),
        ]
    )
    await session.commit()
    return assignment


async def test_decline_frees_the_slot(client: AsyncClient, session_maker, invitation):
    response = await client.post(WEBHOOK, json={"contactId": "contact-1", "message": "No sorry"})

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Response processed: DECLINED"
    assert body["data"]["action"] == "declined"
    async with session_maker() as fresh:
        assert (await fresh.get(EventSession, invitation.session_id)).slots_filled == 0
        assert (await fresh.get(EventAssignment, invitation.id)).status == AssignmentStatus.DECLINED


async def test_confirm_without_sms_configured(client: AsyncClient, session_maker, invitation):
    response = await client.post(WEBHOOK, json={"contactId": "contact-1", "text": "Yes I can"})

    assert response.json()["data"]["action"] == "confirmed"
    async with session_maker() as fresh:
        assert (await fresh.get(EventAssignment, invitation.id)).status == AssignmentStatus.CONFIRMED


async def test_unknown_contact(client: AsyncClient, seeded):
    response = await client.post(WEBHOOK, json={"contactId": "stranger", "message": "yes"})

    assert response.status_code == 200
    assert response.json()["data"]["action"] == "no_member"


async def test_missing_contact_id(client: AsyncClient, seeded):
    response = await client.post(WEBHOOK, json={"message": "yes"})

    assert response.status_code == 400
    assert response.json() == {"status": "error", "message": "Missing contactId"}
