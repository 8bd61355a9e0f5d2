"""
Data export entity models.

One ``DataExport`` row is written for each generated CSV file; the file
itself lives in file storage under ``file_key``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON
from sqlmodel import Field

from churchsync.core.models.domain.enums import ExportFormat

from ..base import Base, new_id, utc_now


class DataExport(Base, table=True):
    """Table: data_exports"""

    __tablename__ = "data_exports"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    organization_id: str = Field(foreign_key="organizations.id", max_length=64, index=True)
    location_id: Optional[str] = Field(default=None, foreign_key="locations.id", max_length=64)
    format: ExportFormat
    filters: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    record_count: int = Field(default=0)
    file_name: str = Field(max_length=200)
    file_key: str = Field(max_length=500)
    file_size_bytes: int = Field(default=0)
    exported_by: Optional[str] = Field(default=None, foreign_key="users.id", max_length=64)

    exported_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"DataExport(id={self.id}, format={self.format}, records={self.record_count})"
