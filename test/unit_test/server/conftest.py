"""Factories shared by the service and API tests."""

from datetime import date, time
from typing import Iterable, Optional, Tuple

import pytest

from churchsync.core.database.entities import (
    ChurchMember,
    EventSession,
    Location,
    Volunteer,
    VolunteerCategory,
    VolunteerEvent,
)
from churchsync.core.models.domain.enums import (
    BackgroundCheckStatus,
    EventStatus,
    VolunteerCategoryType,
    VolunteerStatus,
)


@pytest.fixture
def make_volunteer(session, seeded):
    """Create a church member with a volunteer record."""

    async def _make(
        name: str,
        *,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        location: Optional[Location] = None,
        status: VolunteerStatus = VolunteerStatus.ACTIVE,
        categories: Iterable[VolunteerCategoryType] = (),
        background_check_status: BackgroundCheckStatus = BackgroundCheckStatus.NOT_STARTED,
        last_served_date: Optional[date] = None,
    ) -> Volunteer:
        location = location or seeded.main
        member = ChurchMember(
            organization_id=seeded.organization.id,
            location_id=location.id,
            name=name,
            email=email,
            phone=phone,
        )
        volunteer = Volunteer(
            organization_id=seeded.organization.id,
            church_member_id=member.id,
            location_id=location.id,
            status=status,
            background_check_status=background_check_status,
            last_served_date=last_served_date,
        )
        session.add_all([member, volunteer])
        for category in categories:
            session.add(
                VolunteerCategory(organization_id=seeded.organization.id, volunteer_id=volunteer.id, category=category)
            )
        await session.commit()
        return volunteer

    return _make


@pytest.fixture
def make_event(session, seeded):
    """Create an event with one session on Sunday Jan 5 2025, 9:00-11:00."""

    async def _make(
        name: str = "Sunday Service",
        *,
        status: EventStatus = EventStatus.PUBLISHED,
        location: Optional[Location] = None,
        slots_needed: int = 2,
        **fields,
    ) -> Tuple[VolunteerEvent, EventSession]:
        event = VolunteerEvent(
            organization_id=seeded.organization.id,
            location_id=(location or seeded.main).id,
            name=name,
            status=status,
            **fields,
        )
        event_session = EventSession(
            event_id=event.id,
            organization_id=seeded.organization.id,
            session_date=date(2025, 1, 5),
            start_time=time(9, 0),
            end_time=time(11, 0),
            slots_needed=slots_needed,
        )
        session.add_all([event, event_session])
        await session.commit()
        return event, event_session

    return _make
