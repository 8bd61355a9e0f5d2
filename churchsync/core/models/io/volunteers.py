"""
Church member and volunteer I/O models.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from churchsync.core.models.domain.enums import (
    BackgroundCheckStatus,
    MemberType,
    VolunteerCategoryType,
    VolunteerStatus,
)


class ChurchMemberRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    member_type: MemberType
    location_id: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    created_at: datetime


class VolunteerRead(BaseModel):
    """Volunteer joined with its member record and categories."""

    id: str
    church_member_id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    location_id: Optional[str] = None
    status: VolunteerStatus
    categories: List[VolunteerCategoryType] = Field(default_factory=list)
    start_date: date
    end_date: Optional[date] = None
    inactive_reason: Optional[str] = None
    notes: Optional[str] = None
    last_served_date: Optional[date] = None
    background_check_status: BackgroundCheckStatus
    background_check_date: Optional[date] = None
    background_check_expiry: Optional[date] = None
    bg_check_confirmed_at: Optional[datetime] = None
    ready_for_export: bool
    version: int


class VolunteerUpdate(BaseModel):
    """Fields editable on a volunteer; ``version`` is the one the client last read."""

    version: int = Field(ge=1, description="Version the client last read")
    location_id: Optional[str] = None
    notes: Optional[str] = Field(default=None, max_length=2000)
    start_date: Optional[date] = None
    last_served_date: Optional[date] = None


class VolunteerProcess(BaseModel):
    categories: List[VolunteerCategoryType] = Field(default_factory=list)
    background_check_status: Optional[BackgroundCheckStatus] = None


class VolunteerDeactivate(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=500)


class BackgroundCheckStatusUpdate(BaseModel):
    status: BackgroundCheckStatus


class BackgroundCheckConfirmed(BaseModel):
    already_confirmed: bool
    volunteer_name: Optional[str] = None


class BackgroundCheckRequested(BaseModel):
    email_sent: bool
    confirmation_url: str
