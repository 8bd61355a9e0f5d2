"""
Connect card entity models.

Connect cards are scanned visitor/member intake forms. Cards are grouped into
review batches, one open batch per campus per day.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Text
from sqlmodel import Field

from churchsync.core.models.domain.enums import (
    BatchStatus,
    ConnectCardStatus,
    VolunteerCategoryType,
    VolunteerOnboardingStatus,
)

from ..base import Base, new_id, utc_now


class ConnectCardBatch(Base, table=True):
    """Review batch of connect cards.

    Table: connect_card_batches
    """

    __tablename__ = "connect_card_batches"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    organization_id: str = Field(foreign_key="organizations.id", max_length=64, index=True)
    location_id: Optional[str] = Field(default=None, foreign_key="locations.id", max_length=64, index=True)
    name: str = Field(max_length=200)
    status: BatchStatus = Field(default=BatchStatus.PENDING)
    card_count: int = Field(default=0)
    created_by: Optional[str] = Field(default=None, max_length=64)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"ConnectCardBatch(id={self.id}, name={self.name}, status={self.status})"


class ConnectCard(Base, table=True):
    """Persistent connect card.

    ``extracted_data`` keeps the raw extraction payload; the normalized fields
    are what reviewers edit and what exports read.

    Table: connect_cards
    """

    __tablename__ = "connect_cards"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    organization_id: str = Field(foreign_key="organizations.id", max_length=64, index=True)
    location_id: Optional[str] = Field(default=None, foreign_key="locations.id", max_length=64, index=True)
    batch_id: Optional[str] = Field(default=None, foreign_key="connect_card_batches.id", max_length=64, index=True)
    image_key: Optional[str] = Field(default=None, max_length=500)

    # Contact fields
    name: Optional[str] = Field(default=None, max_length=200)
    email: Optional[str] = Field(default=None, max_length=320)
    phone: Optional[str] = Field(default=None, max_length=32)
    address: Optional[str] = Field(default=None, max_length=300)
    visit_type: Optional[str] = Field(default=None, max_length=50)
    interests: List[str] = Field(default_factory=list, sa_type=JSON)
    keywords: List[str] = Field(default_factory=list, sa_type=JSON)
    prayer_request: Optional[str] = Field(default=None, sa_type=Text)

    # Extraction
    extracted_data: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)
    validation_issues: List[str] = Field(default_factory=list, sa_type=JSON)

    # Review workflow
    status: ConnectCardStatus = Field(default=ConnectCardStatus.EXTRACTED)
    volunteer_category: Optional[VolunteerCategoryType] = Field(default=None)
    volunteer_onboarding_status: Optional[VolunteerOnboardingStatus] = Field(default=None)
    assigned_leader_id: Optional[str] = Field(default=None, max_length=64)
    sms_automation_enabled: bool = Field(default=False)
    church_member_id: Optional[str] = Field(default=None, foreign_key="church_members.id", max_length=64)

    scanned_by: Optional[str] = Field(default=None, max_length=64)
    scanned_at: datetime = Field(default_factory=utc_now, index=True)
    reviewed_by: Optional[str] = Field(default=None, max_length=64)
    reviewed_at: Optional[datetime] = Field(default=None)

    # Export tracking
    last_exported_at: Optional[datetime] = Field(default=None)
    last_exported_by: Optional[str] = Field(default=None, max_length=64)
    last_export_format: Optional[str] = Field(default=None, max_length=32)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"ConnectCard(id={self.id}, name={self.name}, status={self.status})"
