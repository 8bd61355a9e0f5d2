"""Unit tests for the domain error types."""

import pytest

from churchsync.core.errors import (
    BusinessRuleError,
    ChurchSyncError,
    ConflictError,
    IntegrationNotConfiguredError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitExceededError,
    SubscriptionInactiveError,
)


@pytest.mark.parametrize(
    "error_class,status_code",
    [
        (NotFoundError, 404),
        (PermissionDeniedError, 403),
        (BusinessRuleError, 400),
        (ConflictError, 409),
        (RateLimitExceededError, 429),
        (SubscriptionInactiveError, 402),
        (IntegrationNotConfiguredError, 400),
    ],
)
def test_status_codes(error_class, status_code):
    error = error_class("nope")
    assert isinstance(error, ChurchSyncError)
    assert error.status_code == status_code
    assert str(error) == "nope"


def test_payload():
    assert NotFoundError("Volunteer not found").to_payload() == {"status": "error", "message": "Volunteer not found"}


def test_payload_with_data():
    payload = BusinessRuleError("Invalid", data={"field": "email"}).to_payload()
    assert payload["data"] == {"field": "email"}


def test_conflict_carries_refresh_hint():
    payload = ConflictError("Changed by someone else", should_refresh=True).to_payload()
    assert payload == {"status": "error", "message": "Changed by someone else", "should_refresh": True}
    assert ConflictError("dup").to_payload()["should_refresh"] is False
