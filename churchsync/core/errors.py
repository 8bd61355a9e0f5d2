"""
Domain error types.

Services raise these instead of ``HTTPException`` so the same rules can run
outside a request. The server registers a handler that turns every
``ChurchSyncError`` into the tagged ``{"status": "error", "message": ...}``
response with the class status code.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ChurchSyncError(Exception):
    """Base class for all expected, user-facing failures."""

    status_code: int = 400

    def __init__(self, message: str, *, data: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.data = data

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"status": "error", "message": self.message}
        if self.data:
            payload["data"] = self.data
        return payload


class NotFoundError(ChurchSyncError):
    status_code = 404


class PermissionDeniedError(ChurchSyncError):
    status_code = 403


class BusinessRuleError(ChurchSyncError):
    """A precondition of the operation does not hold (wrong status, empty input, ...)."""

    status_code = 400


class ConflictError(ChurchSyncError):
    """The row changed underneath the caller (optimistic lock) or would be duplicated."""

    status_code = 409

    def __init__(self, message: str, *, should_refresh: bool = False, data: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, data=data)
        self.should_refresh = should_refresh

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        payload["should_refresh"] = self.should_refresh
        return payload


class RateLimitExceededError(ChurchSyncError):
    status_code = 429


class SubscriptionInactiveError(ChurchSyncError):
    status_code = 402


class IntegrationNotConfiguredError(BusinessRuleError):
    """An operation needs an outbound integration that has no credentials."""
