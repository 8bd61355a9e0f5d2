"""
Volunteer entity models.

This module contains the volunteer record (one per church member that
serves) and the ministry categories the volunteer serves in. Volunteers are
updated under optimistic locking through the ``version`` column.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from churchsync.core.models.domain.enums import (
    BackgroundCheckStatus,
    VolunteerCategoryType,
    VolunteerStatus,
)

from ..base import Base, new_id, utc_now


class Volunteer(Base, table=True):
    """Persistent volunteer record.

    Table: volunteers
    """

    __tablename__ = "volunteers"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    organization_id: str = Field(foreign_key="organizations.id", max_length=64, index=True)
    church_member_id: str = Field(foreign_key="church_members.id", max_length=64, index=True)
    location_id: Optional[str] = Field(default=None, foreign_key="locations.id", max_length=64)

    status: VolunteerStatus = Field(default=VolunteerStatus.PENDING_APPROVAL)
    start_date: date = Field(default_factory=lambda: utc_now().date())
    end_date: Optional[date] = Field(default=None)
    inactive_reason: Optional[str] = Field(default=None, max_length=500)
    notes: Optional[str] = Field(default=None, max_length=2000)
    last_served_date: Optional[date] = Field(default=None)

    # Background check
    background_check_status: BackgroundCheckStatus = Field(default=BackgroundCheckStatus.NOT_STARTED)
    background_check_date: Optional[date] = Field(default=None)
    background_check_expiry: Optional[date] = Field(default=None)
    bg_check_token: Optional[str] = Field(default=None, max_length=64, unique=True, index=True)
    bg_check_confirmed_at: Optional[datetime] = Field(default=None)

    ready_for_export: bool = Field(default=False)
    ready_for_export_date: Optional[datetime] = Field(default=None)

    # Optimistic lock
    version: int = Field(default=1)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Volunteer(id={self.id}, status={self.status}, version={self.version})"


class VolunteerCategory(Base, table=True):
    """Ministry a volunteer serves in.

    Table: volunteer_categories
    """

    __tablename__ = "volunteer_categories"
    __table_args__ = (UniqueConstraint("volunteer_id", "category", name="uq_volunteer_category"),)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    organization_id: str = Field(foreign_key="organizations.id", max_length=64, index=True)
    volunteer_id: str = Field(foreign_key="volunteers.id", max_length=64, index=True, ondelete="CASCADE")
    category: VolunteerCategoryType

    created_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"VolunteerCategory(volunteer={self.volunteer_id}, category={self.category})"
