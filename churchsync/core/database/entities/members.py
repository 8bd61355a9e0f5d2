"""
Church member entity models.

A church member is the reconciled person record behind one or more connect
cards. ``MemberNote`` holds staff notes on a member and ``MemberIntegration``
maps a member to a contact in an external CRM.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, Text, UniqueConstraint
from sqlmodel import Field

from churchsync.core.models.domain.enums import MemberType

from ..base import Base, new_id, utc_now


class ChurchMember(Base, table=True):
    """Table: church_members"""

    __tablename__ = "church_members"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    organization_id: str = Field(foreign_key="organizations.id", max_length=64, index=True)
    location_id: Optional[str] = Field(default=None, foreign_key="locations.id", max_length=64)
    name: str = Field(max_length=200)
    email: Optional[str] = Field(default=None, max_length=320, index=True)
    phone: Optional[str] = Field(default=None, max_length=32)
    address: Optional[str] = Field(default=None, max_length=300)
    member_type: MemberType = Field(default=MemberType.VISITOR)
    tags: List[str] = Field(default_factory=list, sa_type=JSON)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"ChurchMember(id={self.id}, name={self.name}, type={self.member_type})"


class MemberIntegration(Base, table=True):
    """Link between a member and an external CRM contact.

    Table: member_integrations
    """

    __tablename__ = "member_integrations"
    __table_args__ = (UniqueConstraint("church_member_id", "provider", name="uq_member_integration_provider"),)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    organization_id: str = Field(foreign_key="organizations.id", max_length=64, index=True)
    church_member_id: str = Field(foreign_key="church_members.id", max_length=64, index=True)
    provider: str = Field(max_length=32)
    external_id: str = Field(max_length=128, index=True)
    last_sync_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"MemberIntegration(member={self.church_member_id}, provider={self.provider}, external={self.external_id})"


class MemberNote(Base, table=True):
    """Table: member_notes"""

    __tablename__ = "member_notes"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    organization_id: str = Field(foreign_key="organizations.id", max_length=64, index=True)
    church_member_id: str = Field(foreign_key="church_members.id", max_length=64, index=True)
    content: str = Field(sa_type=Text)
    created_by: str = Field(foreign_key="users.id", max_length=64)

    created_at: datetime = Field(default_factory=utc_now)
