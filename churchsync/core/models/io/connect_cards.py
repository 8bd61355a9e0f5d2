"""
Connect card I/O models for API requests and responses.

These schemas cover the scan/save step (raw extraction payload), the review
step (reconciliation with church members) and batch management.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from churchsync.core.models.domain.enums import (
    BatchStatus,
    ConnectCardStatus,
    VolunteerCategoryType,
    VolunteerOnboardingStatus,
)

from .common import validate_optional_email

VisitType = Literal["First Visit", "Second Visit", "Regular attendee", "Other"]


class ExtractedCardData(BaseModel):
    """Fields read from a scanned card. Unknown keys are kept verbatim."""

    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    visit_status: Optional[str] = None
    first_time_visitor: bool = False
    interests: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    prayer_request: Optional[str] = None


class ConnectCardSave(BaseModel):
    """Schema for saving a freshly scanned card into the review queue."""

    image_key: Optional[str] = Field(default=None, max_length=500, description="Storage key of the card image")
    extracted_data: ExtractedCardData


class ConnectCardReview(BaseModel):
    """Schema for the review step that reconciles a card with a church member."""

    name: str = Field(min_length=1, max_length=200)
    email: Optional[str] = Field(default=None, max_length=320)
    phone: Optional[str] = Field(default=None, max_length=32)
    address: Optional[str] = Field(default=None, max_length=300)
    visit_type: Optional[VisitType] = None
    interests: List[str] = Field(default_factory=list)
    volunteer_category: Optional[VolunteerCategoryType] = None
    prayer_request: Optional[str] = Field(default=None, max_length=5000)
    assigned_leader_id: Optional[str] = None
    sms_automation_enabled: bool = False
    send_message_to_leader: bool = False
    send_background_check_info: bool = False

    check_email = field_validator("email")(validate_optional_email)


class DuplicateCheck(BaseModel):
    name: str = Field(min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    exclude_id: Optional[str] = None


class OnboardingStatusUpdate(BaseModel):
    status: VolunteerOnboardingStatus


class ConnectCardRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    organization_id: str
    location_id: Optional[str] = None
    batch_id: Optional[str] = None
    image_key: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    visit_type: Optional[str] = None
    interests: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    prayer_request: Optional[str] = None
    validation_issues: List[str] = Field(default_factory=list)
    status: ConnectCardStatus
    volunteer_category: Optional[VolunteerCategoryType] = None
    volunteer_onboarding_status: Optional[VolunteerOnboardingStatus] = None
    assigned_leader_id: Optional[str] = None
    sms_automation_enabled: bool = False
    church_member_id: Optional[str] = None
    scanned_by: Optional[str] = None
    scanned_at: datetime
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    last_exported_at: Optional[datetime] = None


class ConnectCardSaved(BaseModel):
    card: ConnectCardRead
    needs_review: bool
    issues: List[str]
    summary: str


class ConnectCardBatchRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    location_id: Optional[str] = None
    name: str
    status: BatchStatus
    card_count: int
    created_by: Optional[str] = None
    created_at: datetime


class DuplicateMatch(BaseModel):
    is_duplicate: bool
    card: Optional[ConnectCardRead] = None
