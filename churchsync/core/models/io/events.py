"""
Volunteer event I/O models.

Covers events with their sessions, the resource checklist and volunteer
assignments, plus the inbound SMS webhook result.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from churchsync.core.models.domain.enums import (
    AssignmentStatus,
    EventStatus,
    EventType,
    ResourceStatus,
    VolunteerCategoryType,
    VolunteerPoolScope,
)


class EventSessionInput(BaseModel):
    name: Optional[str] = Field(default=None, max_length=100)
    session_date: date
    start_time: time
    end_time: time
    slots_needed: int = Field(default=1, ge=1, le=100)

    @model_validator(mode="after")
    def _end_after_start(self) -> "EventSessionInput":
        if self.end_time <= self.start_time:
            raise ValueError("Session end time must be after start time")
        return self


class EventCreate(BaseModel):
    name: str = Field(min_length=3, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    event_type: EventType = EventType.OTHER
    location_id: Optional[str] = None
    category: Optional[VolunteerCategoryType] = None
    requires_background_check: bool = False
    volunteer_pool_scope: VolunteerPoolScope = VolunteerPoolScope.organization
    confirmation_message: Optional[str] = Field(default=None, max_length=1000)
    leader_name: Optional[str] = Field(default=None, max_length=200)
    sessions: List[EventSessionInput] = Field(default_factory=list)


class EventUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=3, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    event_type: Optional[EventType] = None
    location_id: Optional[str] = None
    category: Optional[VolunteerCategoryType] = None
    requires_background_check: Optional[bool] = None
    volunteer_pool_scope: Optional[VolunteerPoolScope] = None
    confirmation_message: Optional[str] = Field(default=None, max_length=1000)
    leader_name: Optional[str] = Field(default=None, max_length=200)
    sessions: Optional[List[EventSessionInput]] = None


class EventSessionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: Optional[str] = None
    session_date: date
    start_time: time
    end_time: time
    slots_needed: int
    slots_filled: int


class EventResourceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    quantity: int
    notes: Optional[str] = None
    status: ResourceStatus
    sort_order: int


class EventAssignmentRead(BaseModel):
    id: str
    session_id: str
    volunteer_id: str
    volunteer_name: str
    status: AssignmentStatus
    invited_at: Optional[datetime] = None
    responded_at: Optional[datetime] = None


class EventRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    location_id: Optional[str] = None
    name: str
    description: Optional[str] = None
    event_type: EventType
    status: EventStatus
    category: Optional[VolunteerCategoryType] = None
    requires_background_check: bool
    volunteer_pool_scope: VolunteerPoolScope
    confirmation_message: Optional[str] = None
    leader_name: Optional[str] = None
    created_at: datetime


class EventDetail(BaseModel):
    event: EventRead
    sessions: List[EventSessionRead] = Field(default_factory=list)
    resources: List[EventResourceRead] = Field(default_factory=list)
    assignments: List[EventAssignmentRead] = Field(default_factory=list)


class ResourceCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    quantity: int = Field(default=1, ge=1)
    notes: Optional[str] = Field(default=None, max_length=500)


class ResourceUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    quantity: Optional[int] = Field(default=None, ge=1)
    notes: Optional[str] = Field(default=None, max_length=500)
    status: Optional[ResourceStatus] = None


class CommonResourcesCreate(BaseModel):
    names: List[str] = Field(default_factory=list)


class VolunteerAssign(BaseModel):
    volunteer_id: str


class VolunteerBulkAssign(BaseModel):
    volunteer_ids: List[str] = Field(default_factory=list)


class BulkAssignResult(BaseModel):
    assigned: int = 0
    skipped: int = 0
    failed: int = 0


class InviteResult(BaseModel):
    invited: int = 0
    failed: int = 0
    sms_skipped: int = 0
    sms_failed: int = 0


class AvailableVolunteer(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    last_served_date: Optional[date] = None
    background_check_status: str
    categories: List[VolunteerCategoryType] = Field(default_factory=list)


class InboundSmsResult(BaseModel):
    action: str
    volunteer_id: Optional[str] = None
    assignment_id: Optional[str] = None
    new_status: Optional[AssignmentStatus] = None
