"""
Prayer request I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from churchsync.core.models.domain.enums import PrayerBatchStatus, PrayerStatus

from .common import validate_optional_email


class PrayerRequestCreate(BaseModel):
    """Schema for a manually entered prayer request.

    Privacy, category and urgency are detected from the text when omitted.
    """

    request: str = Field(min_length=1, max_length=5000)
    category: Optional[str] = Field(default=None, max_length=50)
    is_private: Optional[bool] = None
    is_urgent: Optional[bool] = None
    location_id: Optional[str] = None
    submitted_by: Optional[str] = Field(default=None, max_length=200)
    submitter_email: Optional[str] = Field(default=None, max_length=320)
    submitter_phone: Optional[str] = Field(default=None, max_length=32)

    check_email = field_validator("submitter_email")(validate_optional_email)


class PrayerRequestUpdate(BaseModel):
    request: Optional[str] = Field(default=None, min_length=1, max_length=5000)
    category: Optional[str] = Field(default=None, max_length=50)
    is_urgent: Optional[bool] = None
    status: Optional[PrayerStatus] = None
    location_id: Optional[str] = None
    follow_up_date: Optional[datetime] = None


class PrayerRequestRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    location_id: Optional[str] = None
    request: str
    category: Optional[str] = None
    is_private: bool
    is_urgent: bool
    status: PrayerStatus
    submitted_by: Optional[str] = None
    submitter_email: Optional[str] = None
    submitter_phone: Optional[str] = None
    connect_card_id: Optional[str] = None
    assigned_to_id: Optional[str] = None
    batch_id: Optional[str] = None
    answered_date: Optional[datetime] = None
    answered_notes: Optional[str] = None
    created_at: datetime


class PrayerAssign(BaseModel):
    assigned_to_id: str


class PrayerBatchAssign(BaseModel):
    prayer_request_ids: List[str] = Field(default_factory=list)
    assigned_to_id: str


class PrayerMarkAnswered(BaseModel):
    notes: Optional[str] = Field(default=None, max_length=2000)


class PrayerPrivacyToggle(BaseModel):
    is_private: bool


class PrayerStats(BaseModel):
    total: int = 0
    pending: int = 0
    assigned: int = 0
    praying: int = 0
    answered: int = 0
    archived: int = 0
    private: int = 0
    urgent: int = 0
    this_week: int = 0
    answered_this_month: int = 0
    by_category: Dict[str, int] = Field(default_factory=dict)


class PrayerBatchRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    location_id: Optional[str] = None
    name: str
    status: PrayerBatchStatus
    assigned_to_id: Optional[str] = None
    assigned_to_name: Optional[str] = None
    prayer_count: int
    created_at: datetime
    completed_at: Optional[datetime] = None


class PrayerBatchDetail(BaseModel):
    batch: PrayerBatchRead
    groups: Dict[str, List[PrayerRequestRead]]
    stats: Dict[str, int]
