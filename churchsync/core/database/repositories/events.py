"""
Volunteer event repositories.

Data access for events and the rows that hang off them: sessions, resources
and volunteer assignments.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from churchsync.core.models.domain.enums import AssignmentStatus, EventStatus, EventType

from ..entities.events import EventAssignment, EventResource, EventSession, VolunteerEvent
from ..entities.members import ChurchMember
from ..entities.volunteers import Volunteer
from .base import QueryBuilder, SQLModelRepository

AssignmentRow = Tuple[EventAssignment, Volunteer, ChurchMember]


class VolunteerEventRepository(SQLModelRepository[VolunteerEvent]):
    """Repository for volunteer events."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, VolunteerEvent)

    async def list_for_organization(
        self,
        organization_id: str,
        location_filter: Optional[Dict[str, Any]] = None,
        status: Optional[EventStatus] = None,
        event_type: Optional[EventType] = None,
    ) -> List[VolunteerEvent]:
        stmt = select(VolunteerEvent).where(VolunteerEvent.organization_id == organization_id)
        filters: Dict[str, Any] = dict(location_filter or {})
        filters.update({"status": status, "event_type": event_type})
        stmt = QueryBuilder.apply_filters(stmt, VolunteerEvent, filters)
        result = await self.session.execute(stmt.order_by(VolunteerEvent.created_at.desc()))
        return list(result.scalars().all())


class EventSessionRepository(SQLModelRepository[EventSession]):
    """Repository for event sessions."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, EventSession)

    async def list_for_event(self, event_id: str) -> List[EventSession]:
        result = await self.session.execute(
            select(EventSession)
            .where(EventSession.event_id == event_id)
            .order_by(EventSession.session_date, EventSession.start_time)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def get_with_event(
        self, session_id: str, organization_id: str
    ) -> Optional[Tuple[EventSession, VolunteerEvent]]:
        stmt = (
            select(EventSession, VolunteerEvent)
            .join(VolunteerEvent, VolunteerEvent.id == EventSession.event_id)
            .where((EventSession.id == session_id) & (EventSession.organization_id == organization_id))
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        row = result.first()
        return (row[0], row[1]) if row else None

    async def adjust_slots(self, session_id: str, delta: int) -> None:
        """Add ``delta`` to ``slots_filled`` in SQL, never going below 0. The caller owns the commit."""
        filled = EventSession.slots_filled + delta
        await self.session.execute(
            update(EventSession)
            .where(EventSession.id == session_id)
            .values(slots_filled=case((filled < 0, 0), else_=filled))
            .execution_options(synchronize_session=False)
        )

    async def delete_for_event(self, event_id: str) -> None:
        """Delete every session of an event. The caller owns the commit."""
        await self.session.execute(delete(EventSession).where(EventSession.event_id == event_id))


class EventResourceRepository(SQLModelRepository[EventResource]):
    """Repository for event resources."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, EventResource)

    async def list_for_event(self, event_id: str) -> List[EventResource]:
        result = await self.session.execute(
            select(EventResource).where(EventResource.event_id == event_id).order_by(EventResource.sort_order)
        )
        return list(result.scalars().all())

    async def max_sort_order(self, event_id: str) -> int:
        result = await self.session.execute(
            select(func.max(EventResource.sort_order)).where(EventResource.event_id == event_id)
        )
        value = result.scalar_one_or_none()
        return int(value) if value is not None else 0

    async def delete_for_event(self, event_id: str) -> None:
        await self.session.execute(delete(EventResource).where(EventResource.event_id == event_id))


class EventAssignmentRepository(SQLModelRepository[EventAssignment]):
    """Repository for volunteer assignments to event sessions."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, EventAssignment)

    async def find(self, session_id: str, volunteer_id: str) -> Optional[EventAssignment]:
        result = await self.session.execute(
            select(EventAssignment).where(
                (EventAssignment.session_id == session_id) & (EventAssignment.volunteer_id == volunteer_id)
            )
        )
        return result.scalar_one_or_none()

    async def assigned_volunteer_ids(self, session_id: str) -> set[str]:
        result = await self.session.execute(
            select(EventAssignment.volunteer_id).where(EventAssignment.session_id == session_id)
        )
        return set(result.scalars().all())

    async def count_for_event(self, event_id: str) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(EventAssignment).where(EventAssignment.event_id == event_id)
        )
        return int(result.scalar_one())

    async def list_for_event(self, event_id: str) -> List[AssignmentRow]:
        stmt = (
            select(EventAssignment, Volunteer, ChurchMember)
            .join(Volunteer, Volunteer.id == EventAssignment.volunteer_id)
            .join(ChurchMember, ChurchMember.id == Volunteer.church_member_id)
            .where(EventAssignment.event_id == event_id)
            .order_by(EventAssignment.created_at)
        )
        result = await self.session.execute(stmt)
        return [(assignment, volunteer, member) for assignment, volunteer, member in result.all()]

    async def latest_invitation(self, volunteer_id: str) -> Optional[EventAssignment]:
        """Most recent INVITED assignment of a volunteer, if any."""
        result = await self.session.execute(
            select(EventAssignment)
            .where(
                (EventAssignment.volunteer_id == volunteer_id)
                & (EventAssignment.status == AssignmentStatus.INVITED)
            )
            .order_by(EventAssignment.invited_at.desc(), EventAssignment.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()
