"""
Organization, location and team I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from churchsync.core.models.domain.enums import InvitationStatus, SubscriptionStatus, TeamRole, UserRole

from .common import validate_optional_email


class LocationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    slug: str
    address: Optional[str] = None
    is_active: bool
    created_at: datetime


class LocationCreate(BaseModel):
    """Schema for adding a campus."""

    name: str = Field(min_length=1, max_length=100, description="Campus name")
    slug: Optional[str] = Field(default=None, max_length=100, description="URL slug, derived from name when omitted")
    address: Optional[str] = Field(default=None, max_length=300)


class OrganizationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    slug: str
    subscription_status: SubscriptionStatus
    created_at: datetime


class OrganizationDetail(BaseModel):
    organization: OrganizationRead
    locations: List[LocationRead]


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    role: UserRole
    default_location_id: Optional[str] = None
    can_see_all_locations: bool


class InvitationCreate(BaseModel):
    """Schema for inviting someone to the staff."""

    email: str = Field(max_length=320)
    role: TeamRole = TeamRole.member
    location_id: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        checked = validate_optional_email(value)
        if checked is None:
            raise ValueError("Invalid email address")
        return checked.lower()


class InvitationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    role: TeamRole
    location_id: Optional[str] = None
    status: InvitationStatus
    expires_at: datetime
    created_at: datetime


class TeamOverview(BaseModel):
    members: List[UserRead]
    invitations: List[InvitationRead]


class TeamMemberUpdate(BaseModel):
    role: TeamRole
    location_id: Optional[str] = None


class InvitationAccept(BaseModel):
    token: str


class AcceptedInvitation(BaseModel):
    organization_slug: str
    redirect_url: str
