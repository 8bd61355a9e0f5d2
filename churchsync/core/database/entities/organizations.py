"""
Tenant entity models.

This module contains the database entities that define a tenant: the
organization itself, its campuses (locations), the dashboard users who
operate on its data and the pending invitations to join them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from churchsync.core.models.domain.enums import InvitationStatus, SubscriptionStatus, TeamRole, UserRole

from ..base import Base, new_id, utc_now


class Organization(Base, table=True):
    """A church (or clinic) tenant.

    Table: organizations
    """

    __tablename__ = "organizations"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    name: str = Field(max_length=200)
    slug: str = Field(max_length=100, unique=True, index=True)
    subscription_status: SubscriptionStatus = Field(default=SubscriptionStatus.TRIAL)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Organization(id={self.id}, slug={self.slug}, subscription={self.subscription_status})"


class Location(Base, table=True):
    """A campus belonging to an organization.

    Table: locations
    """

    __tablename__ = "locations"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    organization_id: str = Field(foreign_key="organizations.id", max_length=64, index=True)
    name: str = Field(max_length=100)
    slug: str = Field(max_length=100)
    address: Optional[str] = Field(default=None, max_length=300)
    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"Location(id={self.id}, name={self.name}, active={self.is_active})"


class User(Base, table=True):
    """A dashboard user.

    Platform admins have no organization; every other role belongs to exactly
    one organization and usually to one default campus.

    Table: users
    """

    __tablename__ = "users"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    organization_id: Optional[str] = Field(default=None, foreign_key="organizations.id", max_length=64, index=True)
    name: str = Field(max_length=200)
    email: str = Field(max_length=320, index=True)
    role: UserRole = Field(default=UserRole.user)
    default_location_id: Optional[str] = Field(default=None, foreign_key="locations.id", max_length=64)
    can_see_all_locations: bool = Field(default=False)

    created_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"User(id={self.id}, email={self.email}, role={self.role})"


class Invitation(Base, table=True):
    """An emailed invitation for someone to join the organization's staff.

    Revoked invitations are stored as EXPIRED.

    Table: invitations
    """

    __tablename__ = "invitations"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    organization_id: str = Field(foreign_key="organizations.id", max_length=64, index=True)
    email: str = Field(max_length=320, index=True)
    role: TeamRole = Field(default=TeamRole.member)
    location_id: Optional[str] = Field(default=None, foreign_key="locations.id", max_length=64)
    token: str = Field(max_length=64, unique=True, index=True)
    status: InvitationStatus = Field(default=InvitationStatus.PENDING)
    expires_at: datetime
    invited_by: str = Field(foreign_key="users.id", max_length=64)
    accepted_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"Invitation(id={self.id}, email={self.email}, status={self.status})"
