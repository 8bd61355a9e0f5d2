"""
Volunteer event entity models.

An event has one or more sessions (date + time slot with a number of
volunteer slots), a checklist of resources, and volunteer assignments per
session.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

from sqlalchemy import Text, UniqueConstraint
from sqlmodel import Field

from churchsync.core.models.domain.enums import (
    AssignmentStatus,
    EventStatus,
    EventType,
    ResourceStatus,
    VolunteerCategoryType,
    VolunteerPoolScope,
)

from ..base import Base, new_id, utc_now


class VolunteerEvent(Base, table=True):
    """Table: volunteer_events"""

    __tablename__ = "volunteer_events"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    organization_id: str = Field(foreign_key="organizations.id", max_length=64, index=True)
    location_id: Optional[str] = Field(default=None, foreign_key="locations.id", max_length=64, index=True)
    name: str = Field(max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    event_type: EventType = Field(default=EventType.OTHER)
    status: EventStatus = Field(default=EventStatus.DRAFT)

    # Volunteer matching
    category: Optional[VolunteerCategoryType] = Field(default=None)
    requires_background_check: bool = Field(default=False)
    volunteer_pool_scope: VolunteerPoolScope = Field(default=VolunteerPoolScope.organization)

    # SMS confirmation
    confirmation_message: Optional[str] = Field(default=None, sa_type=Text)
    leader_name: Optional[str] = Field(default=None, max_length=200)

    created_by: Optional[str] = Field(default=None, max_length=64)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"VolunteerEvent(id={self.id}, name={self.name}, status={self.status})"


class EventSession(Base, table=True):
    """Table: event_sessions"""

    __tablename__ = "event_sessions"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    event_id: str = Field(foreign_key="volunteer_events.id", max_length=64, index=True, ondelete="CASCADE")
    organization_id: str = Field(foreign_key="organizations.id", max_length=64, index=True)
    name: Optional[str] = Field(default=None, max_length=100)
    session_date: date
    start_time: time
    end_time: time
    slots_needed: int = Field(default=1)
    slots_filled: int = Field(default=0)

    created_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"EventSession(id={self.id}, date={self.session_date}, slots={self.slots_filled}/{self.slots_needed})"


class EventResource(Base, table=True):
    """Table: event_resources"""

    __tablename__ = "event_resources"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    event_id: str = Field(foreign_key="volunteer_events.id", max_length=64, index=True, ondelete="CASCADE")
    organization_id: str = Field(foreign_key="organizations.id", max_length=64, index=True)
    name: str = Field(max_length=100)
    quantity: int = Field(default=1)
    notes: Optional[str] = Field(default=None, max_length=500)
    status: ResourceStatus = Field(default=ResourceStatus.NEEDED)
    sort_order: int = Field(default=0)

    created_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"EventResource(id={self.id}, name={self.name}, status={self.status})"


class EventAssignment(Base, table=True):
    """Table: event_assignments"""

    __tablename__ = "event_assignments"
    __table_args__ = (UniqueConstraint("session_id", "volunteer_id", name="uq_event_assignment_session_volunteer"),)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    organization_id: str = Field(foreign_key="organizations.id", max_length=64, index=True)
    event_id: str = Field(foreign_key="volunteer_events.id", max_length=64, index=True, ondelete="CASCADE")
    session_id: str = Field(foreign_key="event_sessions.id", max_length=64, index=True, ondelete="CASCADE")
    volunteer_id: str = Field(foreign_key="volunteers.id", max_length=64, index=True)
    status: AssignmentStatus = Field(default=AssignmentStatus.ASSIGNED)
    assigned_by: Optional[str] = Field(default=None, max_length=64)
    invited_at: Optional[datetime] = Field(default=None)
    responded_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"EventAssignment(session={self.session_id}, volunteer={self.volunteer_id}, status={self.status})"
