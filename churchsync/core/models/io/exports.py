"""
Data export and file upload I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from churchsync.core.models.domain.enums import ExportFormat


class ExportFilters(BaseModel):
    location_id: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    only_new: bool = False


class ExportRequest(BaseModel):
    format: ExportFormat = ExportFormat.GENERIC_CSV
    filters: ExportFilters = Field(default_factory=ExportFilters)


class ExportPreview(BaseModel):
    headers: List[str]
    rows: List[List[str]]
    total: int
    duplicates_skipped: int = 0
    warning: Optional[str] = None


class DataExportRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    location_id: Optional[str] = None
    format: ExportFormat
    filters: Dict[str, Any] = Field(default_factory=dict)
    record_count: int
    file_name: str
    file_key: str
    file_size_bytes: int
    exported_by: Optional[str] = None
    exported_at: datetime


class UploadRequest(BaseModel):
    file_name: str = Field(min_length=1, max_length=255)
    content_type: str = Field(min_length=1, max_length=100)
    size: int = Field(gt=0)
    is_image: bool = False


class UploadTicket(BaseModel):
    key: str
    upload_url: str
