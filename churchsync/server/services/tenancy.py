"""
Request tenant resolution.

Every dashboard route addresses an organization by slug and identifies the
caller through the ``X-User-Id`` header. ``require_dashboard_access`` turns
the pair into a ``TenantContext`` carrying the organization, the user and the
derived ``DataScope``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from churchsync.core.database.entities.organizations import Organization, User
from churchsync.core.database.repositories.organizations import OrganizationRepository, UserRepository
from churchsync.core.errors import NotFoundError, PermissionDeniedError
from churchsync.core.logging_config import get_logger
from churchsync.core.rate_limit import FixedWindowRateLimiter, RateLimitTier, fingerprint, get_rate_limiter
from churchsync.core.tenancy import DataScope, build_data_scope

logger = get_logger(__name__)


@dataclass(frozen=True)
class TenantContext:
    organization: Organization
    user: User
    scope: DataScope

    @property
    def organization_id(self) -> str:
        return self.organization.id

    @property
    def user_id(self) -> str:
        return self.user.id

    def rate_limit(
        self,
        action: str,
        tier: RateLimitTier,
        limiter: Optional[FixedWindowRateLimiter] = None,
        message: Optional[str] = None,
    ) -> None:
        """Count one ``action`` for this user and organization against ``tier``."""
        limiter = limiter or get_rate_limiter()
        limiter.check(fingerprint(self.user.id, self.organization.id, action), tier, message=message)


async def require_dashboard_access(session: AsyncSession, slug: str, user_id: Optional[str]) -> TenantContext:
    """
    Resolve the organization and caller of a dashboard request.

    Args:
        session: Database session
        slug: Organization slug from the URL
        user_id: Caller identity from the request header

    Returns:
        TenantContext for the request

    Raises:
        NotFoundError: No organization has this slug.
        PermissionDeniedError: The caller is unknown or belongs elsewhere.
        SubscriptionInactiveError: The organization cannot be used.
    """
    organization = await OrganizationRepository(session).get_by_slug(slug)
    if organization is None:
        raise NotFoundError("Organization not found")

    if not user_id:
        raise PermissionDeniedError("Authentication required")
    user = await UserRepository(session).get_by_id(user_id)
    if user is None:
        logger.warning(f"Unknown user id on request to organization {slug}")
        raise PermissionDeniedError("Authentication required")

    scope = build_data_scope(user, organization)
    # Detached so a rollback inside a service leaves them readable
    session.expunge(organization)
    session.expunge(user)
    logger.debug(f"Resolved scope for user={user.id} org={organization.id} role={scope.role.value}")
    return TenantContext(organization=organization, user=user, scope=scope)
