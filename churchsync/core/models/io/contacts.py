"""
Contact management I/O models.

Contacts are church members edited directly by staff rather than created
from a connect card.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from churchsync.core.models.domain.enums import MemberType

from .common import validate_optional_email


def clean_tags(tags: List[str]) -> List[str]:
    """Trim tags, drop blanks and repeated tags, keep the original order."""
    cleaned: List[str] = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned


class ContactCreate(BaseModel):
    """Schema for adding a contact by hand."""

    name: str = Field(min_length=1, max_length=200)
    email: Optional[str] = Field(default=None, max_length=320)
    phone: Optional[str] = Field(default=None, max_length=32)
    address: Optional[str] = Field(default=None, max_length=300)
    member_type: MemberType = MemberType.VISITOR
    tags: List[str] = Field(default_factory=list)
    location_id: Optional[str] = Field(default=None, description="Campus; defaults to the caller's own campus")

    check_email = field_validator("email")(validate_optional_email)
    check_tags = field_validator("tags")(clean_tags)


class ContactUpdate(BaseModel):
    """Partial update; only the fields sent are changed."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    email: Optional[str] = Field(default=None, max_length=320)
    phone: Optional[str] = Field(default=None, max_length=32)
    address: Optional[str] = Field(default=None, max_length=300)
    member_type: Optional[MemberType] = None
    tags: Optional[List[str]] = None

    check_email = field_validator("email")(validate_optional_email)

    @field_validator("tags")
    @classmethod
    def check_tags(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return None if value is None else clean_tags(value)


class NoteCreate(BaseModel):
    content: str = Field(min_length=1, max_length=2000)

    @field_validator("content")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Note content is required")
        return value


class NoteRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    church_member_id: str
    content: str
    created_by: str
    created_at: datetime


class TagsUpdate(BaseModel):
    tags: List[str]

    check_tags = field_validator("tags")(clean_tags)


class BulkContacts(BaseModel):
    contact_ids: List[str]


class BulkMemberType(BulkContacts):
    member_type: MemberType


class BulkTag(BulkContacts):
    tag: str = Field(max_length=100)


class BulkResult(BaseModel):
    count: int
    skipped: List[str] = Field(default_factory=list, description="Ids of contacts left unchanged")
