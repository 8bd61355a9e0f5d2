"""
Volunteer onboarding I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from churchsync.core.models.domain.enums import (
    BackgroundCheckPaymentModel,
    DocumentScope,
    VolunteerCategoryType,
)


class VolunteerDocumentCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    file_key: str = Field(min_length=1, max_length=500)
    scope: DocumentScope = DocumentScope.GLOBAL
    category: Optional[VolunteerCategoryType] = None


class VolunteerDocumentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    file_key: str
    scope: DocumentScope
    category: Optional[VolunteerCategoryType] = None
    created_at: datetime


class MinistryRequirementUpsert(BaseModel):
    background_check_required: bool = False
    background_check_valid_months: Optional[int] = Field(default=None, ge=1, le=120)
    training_required: bool = False
    training_url: Optional[str] = Field(default=None, max_length=500)
    is_active: bool = True
    sort_order: int = 0


class MinistryRequirementRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    category: VolunteerCategoryType
    background_check_required: bool
    background_check_valid_months: Optional[int] = None
    training_required: bool
    training_url: Optional[str] = None
    is_active: bool
    sort_order: int


class BackgroundCheckConfigUpsert(BaseModel):
    provider: str = Field(min_length=1, max_length=100)
    application_url: str = Field(min_length=1, max_length=500)
    validity_months: int = Field(default=24, ge=1, le=120)
    payment_model: BackgroundCheckPaymentModel = BackgroundCheckPaymentModel.CHURCH_PAID
    reminder_days: List[int] = Field(default_factory=lambda: [30, 7])
    instructions: Optional[str] = Field(default=None, max_length=2000)
    is_enabled: bool = True


class BackgroundCheckConfigRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    provider: str
    application_url: str
    validity_months: int
    payment_model: BackgroundCheckPaymentModel
    reminder_days: List[int]
    instructions: Optional[str] = None
    is_enabled: bool


class OnboardingPackage(BaseModel):
    """Everything a new volunteer of one ministry should receive."""

    global_documents: List[VolunteerDocumentRead] = Field(default_factory=list)
    ministry_documents: List[VolunteerDocumentRead] = Field(default_factory=list)
    background_check: Optional[BackgroundCheckConfigRead] = None
    requirement: Optional[MinistryRequirementRead] = None

    @property
    def has_content(self) -> bool:
        return bool(self.global_documents or self.ministry_documents or self.background_check)
