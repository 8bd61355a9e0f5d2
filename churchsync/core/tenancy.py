"""
Per-request data scope.

A ``DataScope`` is built once per request from the caller's user record and
the organization addressed by the URL slug. Every query in the service layer
is filtered through it: the organization id always, the location id unless
the scope can see all campuses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional

from churchsync.core.errors import PermissionDeniedError, SubscriptionInactiveError
from churchsync.core.models.domain.enums import SubscriptionStatus, UserRole

ScopeType = Literal["platform", "agency"]

ACTIVE_SUBSCRIPTIONS = frozenset({SubscriptionStatus.ACTIVE, SubscriptionStatus.TRIAL})
EXPORT_ROLES = frozenset({UserRole.platform_admin, UserRole.church_owner, UserRole.church_admin})
STAFF_ROLES = frozenset({UserRole.user, UserRole.volunteer_leader})


@dataclass(frozen=True)
class DataScope:
    scope_type: ScopeType
    organization_id: str
    user_id: str
    role: UserRole
    location_id: Optional[str] = None
    can_see_all_organizations: bool = False
    can_edit_data: bool = True
    can_delete_data: bool = True
    can_export_data: bool = True
    can_manage_users: bool = False
    can_see_all_locations: bool = False


def build_data_scope(user: Any, organization: Any) -> DataScope:
    """Derive the data scope of ``user`` acting inside ``organization``.

    Args:
        user: Dashboard user (role, organization_id, default_location_id,
            can_see_all_locations)
        organization: Target organization (id, subscription_status)

    Raises:
        PermissionDeniedError: The user belongs to another organization.
        SubscriptionInactiveError: The organization subscription is not usable.
    """
    role = UserRole(user.role)
    if role == UserRole.platform_admin:
        return DataScope(
            scope_type="platform",
            organization_id=organization.id,
            user_id=user.id,
            role=role,
            can_see_all_organizations=True,
            can_manage_users=True,
            can_see_all_locations=True,
        )

    if user.organization_id != organization.id:
        raise PermissionDeniedError("You do not have access to this organization")

    if SubscriptionStatus(organization.subscription_status) not in ACTIVE_SUBSCRIPTIONS:
        raise SubscriptionInactiveError("Subscription is not active. Please update your billing information.")

    if role == UserRole.church_owner:
        return DataScope(
            scope_type="agency",
            organization_id=organization.id,
            user_id=user.id,
            role=role,
            can_manage_users=True,
            can_see_all_locations=True,
        )

    multi_campus = role == UserRole.church_admin and bool(user.can_see_all_locations)
    if not multi_campus and not user.default_location_id:
        raise PermissionDeniedError("Your account is not assigned to a location")

    if role == UserRole.church_admin:
        return DataScope(
            scope_type="agency",
            organization_id=organization.id,
            user_id=user.id,
            role=role,
            location_id=None if multi_campus else user.default_location_id,
            can_manage_users=True,
            can_see_all_locations=multi_campus,
        )

    # Staff and volunteer leaders work inside their own campus only
    return DataScope(
        scope_type="agency",
        organization_id=organization.id,
        user_id=user.id,
        role=role,
        location_id=user.default_location_id,
        can_delete_data=False,
        can_manage_users=False,
        can_see_all_locations=False,
    )


def location_filter(scope: DataScope) -> Dict[str, Any]:
    """Extra equality filters restricting a query to the scope's campus."""
    if scope.can_see_all_locations:
        return {}
    return {"location_id": scope.location_id}


def can_access_location(scope: DataScope, location_id: Optional[str]) -> bool:
    if scope.can_see_all_locations:
        return True
    return location_id is not None and location_id == scope.location_id


def default_location_for_new_records(scope: DataScope) -> Optional[str]:
    """Campus stamped on records created by the caller.

    Single-campus scopes get their own location; multi-campus scopes get
    ``None`` and must pick one explicitly.
    """
    if scope.can_see_all_locations:
        return None
    return scope.location_id


def require_admin(scope: DataScope) -> None:
    if not scope.can_manage_users:
        raise PermissionDeniedError("Only administrators can perform this action")


def require_delete(scope: DataScope) -> None:
    if not scope.can_delete_data:
        raise PermissionDeniedError("You do not have permission to delete data")


def require_export_role(scope: DataScope) -> None:
    if scope.role not in EXPORT_ROLES:
        raise PermissionDeniedError("Only church owners and admins can export data")


def require_location_access(scope: DataScope, location_id: Optional[str]) -> None:
    if not can_access_location(scope, location_id):
        raise PermissionDeniedError("You do not have access to this location")
