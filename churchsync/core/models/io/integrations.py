"""
Email and CRM integration I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class EmailStats(BaseModel):
    total: int = 0
    sent: int = 0
    failed: int = 0
    skipped: int = 0


class GHLStatus(BaseModel):
    configured: bool
    has_credentials: bool
    synced_contacts: int = 0
    last_sync: Optional[datetime] = None


class GHLTokenStore(BaseModel):
    """OAuth token pair received from the CRM authorization callback."""

    access_token: str = Field(min_length=1)
    refresh_token: str = Field(min_length=1)
    expires_in: int = Field(gt=0, description="Lifetime of the access token in seconds")
    ghl_location_id: Optional[str] = None
    scope: Optional[str] = None


class GHLConnectionTest(BaseModel):
    success: bool
    dry_run: bool
    error: Optional[str] = None
