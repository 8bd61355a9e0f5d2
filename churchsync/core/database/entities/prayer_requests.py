"""
Prayer request entity models.

Prayer requests come from connect cards or manual entry. Admins group them
into batches assigned to one prayer team member.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Text
from sqlmodel import Field

from churchsync.core.models.domain.enums import PrayerBatchStatus, PrayerStatus

from ..base import Base, new_id, utc_now


class PrayerBatch(Base, table=True):
    """Table: prayer_batches"""

    __tablename__ = "prayer_batches"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    organization_id: str = Field(foreign_key="organizations.id", max_length=64, index=True)
    location_id: Optional[str] = Field(default=None, foreign_key="locations.id", max_length=64)
    name: str = Field(max_length=200)
    status: PrayerBatchStatus = Field(default=PrayerBatchStatus.IN_REVIEW)
    assigned_to_id: Optional[str] = Field(default=None, foreign_key="users.id", max_length=64)
    assigned_to_name: Optional[str] = Field(default=None, max_length=200)
    prayer_count: int = Field(default=0)
    created_by: Optional[str] = Field(default=None, max_length=64)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    completed_at: Optional[datetime] = Field(default=None)

    def __repr__(self) -> str:
        return f"PrayerBatch(id={self.id}, name={self.name}, status={self.status})"


class PrayerRequest(Base, table=True):
    """Table: prayer_requests"""

    __tablename__ = "prayer_requests"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    organization_id: str = Field(foreign_key="organizations.id", max_length=64, index=True)
    location_id: Optional[str] = Field(default=None, foreign_key="locations.id", max_length=64, index=True)
    request: str = Field(sa_type=Text)
    category: Optional[str] = Field(default=None, max_length=50)
    is_private: bool = Field(default=False)
    is_urgent: bool = Field(default=False)
    status: PrayerStatus = Field(default=PrayerStatus.PENDING)

    # Submitter
    submitted_by: Optional[str] = Field(default=None, max_length=200)
    submitter_email: Optional[str] = Field(default=None, max_length=320)
    submitter_phone: Optional[str] = Field(default=None, max_length=32)
    connect_card_id: Optional[str] = Field(
        default=None, foreign_key="connect_cards.id", max_length=64, index=True, ondelete="SET NULL"
    )

    # Assignment
    assigned_to_id: Optional[str] = Field(default=None, foreign_key="users.id", max_length=64, index=True)
    batch_id: Optional[str] = Field(default=None, foreign_key="prayer_batches.id", max_length=64, index=True)
    created_by: Optional[str] = Field(default=None, max_length=64)

    # Answer
    answered_date: Optional[datetime] = Field(default=None)
    answered_notes: Optional[str] = Field(default=None, sa_type=Text)
    follow_up_date: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"PrayerRequest(id={self.id}, status={self.status}, private={self.is_private})"
