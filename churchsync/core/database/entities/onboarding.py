"""
Volunteer onboarding entity models.

Each organization configures what a new volunteer receives: shared documents
(global or per ministry), per-ministry requirements and a single background
check provider configuration.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, UniqueConstraint
from sqlmodel import Field

from churchsync.core.models.domain.enums import (
    BackgroundCheckPaymentModel,
    DocumentScope,
    VolunteerCategoryType,
)

from ..base import Base, new_id, utc_now


class VolunteerDocument(Base, table=True):
    """Table: volunteer_documents"""

    __tablename__ = "volunteer_documents"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    organization_id: str = Field(foreign_key="organizations.id", max_length=64, index=True)
    name: str = Field(max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    file_key: str = Field(max_length=500)
    scope: DocumentScope = Field(default=DocumentScope.GLOBAL)
    category: Optional[VolunteerCategoryType] = Field(default=None)
    uploaded_by: Optional[str] = Field(default=None, max_length=64)

    created_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"VolunteerDocument(id={self.id}, name={self.name}, scope={self.scope})"


class MinistryRequirement(Base, table=True):
    """Table: ministry_requirements"""

    __tablename__ = "ministry_requirements"
    __table_args__ = (UniqueConstraint("organization_id", "category", name="uq_ministry_requirement_category"),)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    organization_id: str = Field(foreign_key="organizations.id", max_length=64, index=True)
    category: VolunteerCategoryType
    background_check_required: bool = Field(default=False)
    background_check_valid_months: Optional[int] = Field(default=None)
    training_required: bool = Field(default=False)
    training_url: Optional[str] = Field(default=None, max_length=500)
    is_active: bool = Field(default=True)
    sort_order: int = Field(default=0)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"MinistryRequirement(category={self.category}, bg_required={self.background_check_required})"


class BackgroundCheckConfig(Base, table=True):
    """Table: background_check_configs"""

    __tablename__ = "background_check_configs"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    organization_id: str = Field(foreign_key="organizations.id", max_length=64, unique=True, index=True)
    provider: str = Field(max_length=100)
    application_url: str = Field(max_length=500)
    validity_months: int = Field(default=24)
    payment_model: BackgroundCheckPaymentModel = Field(default=BackgroundCheckPaymentModel.CHURCH_PAID)
    reminder_days: List[int] = Field(default_factory=lambda: [30, 7], sa_type=JSON)
    instructions: Optional[str] = Field(default=None, max_length=2000)
    is_enabled: bool = Field(default=True)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"BackgroundCheckConfig(provider={self.provider}, enabled={self.is_enabled})"
