"""
Shared response envelopes and field validators.

Every successful operation answers with ``ActionResponse``; failures are
rendered by the exception handlers as ``{"status": "error", "message": ...}``.
"""

from __future__ import annotations

import re
from typing import Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class ActionResponse(BaseModel, Generic[T]):
    """Tagged success envelope returned by every mutating and reading route."""

    status: Literal["success"] = "success"
    message: str = Field(default="", description="Human readable outcome")
    data: Optional[T] = Field(default=None, description="Operation payload")


class ErrorResponse(BaseModel):
    """Shape of every error answer, documented for OpenAPI."""

    status: Literal["error"] = "error"
    message: str
    should_refresh: Optional[bool] = None


class Page(BaseModel, Generic[T]):
    items: List[T]
    total: int
    page: int
    limit: int
    total_pages: int


def validate_optional_email(value: Optional[str]) -> Optional[str]:
    """Blank becomes None; anything else must look like an email address."""
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if not _EMAIL_PATTERN.match(value):
        raise ValueError("Invalid email address")
    return value
