"""
Outbound integration entity models.

``GHLToken`` stores the per-organization OAuth credentials for the
GoHighLevel CRM. ``EmailLog`` records every email attempt, including the
ones skipped in dry-run mode.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Text
from sqlmodel import Field

from churchsync.core.models.domain.enums import DeliveryStatus

from ..base import Base, new_id, utc_now


class GHLToken(Base, table=True):
    """Table: ghl_tokens"""

    __tablename__ = "ghl_tokens"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    organization_id: str = Field(foreign_key="organizations.id", max_length=64, unique=True, index=True)
    access_token: str = Field(sa_type=Text)
    refresh_token: str = Field(sa_type=Text)
    expires_at: datetime
    ghl_location_id: Optional[str] = Field(default=None, max_length=128)
    scope: Optional[str] = Field(default=None, max_length=1000)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"GHLToken(organization={self.organization_id}, expires_at={self.expires_at})"


class EmailLog(Base, table=True):
    """Table: email_logs"""

    __tablename__ = "email_logs"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    organization_id: Optional[str] = Field(default=None, foreign_key="organizations.id", max_length=64, index=True)
    to_address: str = Field(max_length=320)
    subject: str = Field(max_length=300)
    status: DeliveryStatus = Field(default=DeliveryStatus.PENDING)
    error: Optional[str] = Field(default=None, sa_type=Text)
    context: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    sent_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"EmailLog(id={self.id}, to={self.to_address}, status={self.status})"
