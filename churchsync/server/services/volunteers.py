"""
Volunteer Service.

Volunteer records are edited by several leaders at once, so field edits go
through a version-guarded UPDATE: a stale ``version`` is reported as a
conflict and the client is asked to refresh.
"""

from __future__ import annotations

import calendar
from datetime import date
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from churchsync.core.database.base import utc_now
from churchsync.core.database.entities.members import ChurchMember
from churchsync.core.database.entities.volunteers import Volunteer
from churchsync.core.database.repositories.events import EventSessionRepository
from churchsync.core.database.repositories.onboarding import BackgroundCheckConfigRepository
from churchsync.core.database.repositories.organizations import LocationRepository
from churchsync.core.database.repositories.volunteers import VolunteerRepository
from churchsync.core.errors import BusinessRuleError, ConflictError, NotFoundError
from churchsync.core.logging_config import get_logger
from churchsync.core.models.domain.enums import (
    BackgroundCheckStatus,
    VolunteerCategoryType,
    VolunteerPoolScope,
    VolunteerStatus,
)
from churchsync.core.models.io.common import ActionResponse
from churchsync.core.models.io.events import AvailableVolunteer
from churchsync.core.models.io.volunteers import (
    BackgroundCheckConfirmed,
    BackgroundCheckRequested,
    BackgroundCheckStatusUpdate,
    VolunteerDeactivate,
    VolunteerProcess,
    VolunteerRead,
    VolunteerUpdate,
)
from churchsync.core.rate_limit import FixedWindowRateLimiter, RateLimitTier, get_rate_limiter
from churchsync.core.tenancy import can_access_location, location_filter, require_admin, require_location_access
from churchsync.integrations.email import BackgroundCheckBlock, EmailService, background_check_request_email

from .onboarding import background_check_confirmation_url, new_confirmation_token
from .tenancy import TenantContext

logger = get_logger(__name__)

CONFLICT_MESSAGE = "This volunteer was modified by another user. Please refresh and try again."
AVAILABLE_LIMIT = 50
DEFAULT_VALIDITY_MONTHS = 24


def add_months(start: date, months: int) -> date:
    """Same day ``months`` later, clamped to the last day of the month."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def to_volunteer_read(
    volunteer: Volunteer, member: ChurchMember, categories: List[VolunteerCategoryType]
) -> VolunteerRead:
    return VolunteerRead(
        id=volunteer.id,
        church_member_id=member.id,
        name=member.name,
        email=member.email,
        phone=member.phone,
        location_id=volunteer.location_id,
        status=volunteer.status,
        categories=categories,
        start_date=volunteer.start_date,
        end_date=volunteer.end_date,
        inactive_reason=volunteer.inactive_reason,
        notes=volunteer.notes,
        last_served_date=volunteer.last_served_date,
        background_check_status=volunteer.background_check_status,
        background_check_date=volunteer.background_check_date,
        background_check_expiry=volunteer.background_check_expiry,
        bg_check_confirmed_at=volunteer.bg_check_confirmed_at,
        ready_for_export=volunteer.ready_for_export,
        version=volunteer.version,
    )


class VolunteerService:
    """Volunteer lifecycle, background checks and availability."""

    def __init__(
        self,
        session: AsyncSession,
        email: Optional[EmailService] = None,
        limiter: Optional[FixedWindowRateLimiter] = None,
    ) -> None:
        self.session = session
        self.email = email or EmailService(session)
        self.limiter = limiter
        self.volunteers = VolunteerRepository(session)
        self.locations = LocationRepository(session)
        self.bg_configs = BackgroundCheckConfigRepository(session)
        self.event_sessions = EventSessionRepository(session)

    async def _load(self, tenant: TenantContext, volunteer_id: str, missing: str = "Volunteer not found"):
        row = await self.volunteers.get_with_member(volunteer_id, tenant.organization_id)
        if row is None or not can_access_location(tenant.scope, row[0].location_id):
            raise NotFoundError(missing)
        return row

    async def _read(self, tenant: TenantContext, volunteer_id: str) -> VolunteerRead:
        volunteer, member = await self._load(tenant, volunteer_id)
        categories = await self.volunteers.categories_for([volunteer.id])
        return to_volunteer_read(volunteer, member, categories[volunteer.id])

    async def list_volunteers(
        self,
        tenant: TenantContext,
        status: Optional[VolunteerStatus] = None,
        category: Optional[VolunteerCategoryType] = None,
        search: Optional[str] = None,
    ) -> ActionResponse[List[VolunteerRead]]:
        rows = await self.volunteers.list_with_members(
            tenant.organization_id, location_filter(tenant.scope), status=status, category=category, search=search
        )
        categories = await self.volunteers.categories_for(v.id for v, _ in rows)
        return ActionResponse(data=[to_volunteer_read(v, m, categories[v.id]) for v, m in rows])

    async def get_volunteer(self, tenant: TenantContext, volunteer_id: str) -> ActionResponse[VolunteerRead]:
        return ActionResponse(data=await self._read(tenant, volunteer_id))

    async def update_volunteer(
        self, tenant: TenantContext, volunteer_id: str, payload: VolunteerUpdate
    ) -> ActionResponse[VolunteerRead]:
        """
        Update volunteer fields under optimistic locking.

        Raises:
            NotFoundError: The volunteer does not exist in the organization.
            ConflictError: ``payload.version`` is stale (``should_refresh``).
        """
        tenant.rate_limit("volunteer_update", RateLimitTier.ASSIGNMENT)
        await self._load(tenant, volunteer_id, missing="Unable to update volunteer")

        values = payload.model_dump(exclude_unset=True, exclude={"version"})
        if values.get("location_id"):
            require_location_access(tenant.scope, values["location_id"])
            if await self.locations.get_active(values["location_id"], tenant.organization_id) is None:
                raise BusinessRuleError("Location not found or inactive")

        updated = await self.volunteers.update_with_version(
            volunteer_id, tenant.organization_id, payload.version, values
        )
        if updated == 0:
            await self.session.rollback()
            if await self.volunteers.get_in_organization(volunteer_id, tenant.organization_id) is None:
                raise NotFoundError("Unable to update volunteer")
            logger.info(f"Version conflict updating volunteer {volunteer_id} (expected v{payload.version})")
            raise ConflictError(CONFLICT_MESSAGE, should_refresh=True)
        await self.session.commit()
        return ActionResponse(message="Volunteer updated", data=await self._read(tenant, volunteer_id))

    async def process_volunteer(
        self, tenant: TenantContext, volunteer_id: str, payload: VolunteerProcess
    ) -> ActionResponse[VolunteerRead]:
        """Activate a pending volunteer and set their ministries in one transaction."""
        tenant.rate_limit("volunteer_process", RateLimitTier.STANDARD)
        if not payload.categories:
            raise BusinessRuleError("Select at least one ministry category")
        volunteer, member = await self._load(tenant, volunteer_id)
        if volunteer.status != VolunteerStatus.PENDING_APPROVAL:
            raise BusinessRuleError("Volunteer is not pending approval")

        volunteer.status = VolunteerStatus.ACTIVE
        if payload.background_check_status is not None:
            volunteer.background_check_status = payload.background_check_status
        volunteer.version += 1
        self.session.add(volunteer)
        await self.volunteers.replace_categories(volunteer, payload.categories)
        await self.session.commit()

        logger.info(f"Volunteer {volunteer.id} activated with {len(payload.categories)} categories")
        return ActionResponse(
            message=f"{member.name} has been processed and activated", data=await self._read(tenant, volunteer_id)
        )

    async def deactivate_volunteer(
        self, tenant: TenantContext, volunteer_id: str, payload: VolunteerDeactivate
    ) -> ActionResponse[VolunteerRead]:
        tenant.rate_limit("volunteer_status", RateLimitTier.STANDARD)
        volunteer, member = await self._load(tenant, volunteer_id)
        volunteer.status = VolunteerStatus.INACTIVE
        volunteer.end_date = utc_now().date()
        volunteer.inactive_reason = payload.reason
        volunteer.version += 1
        await self.volunteers.update(volunteer)
        return ActionResponse(message=f"{member.name} has been deactivated", data=await self._read(tenant, volunteer_id))

    async def reactivate_volunteer(self, tenant: TenantContext, volunteer_id: str) -> ActionResponse[VolunteerRead]:
        tenant.rate_limit("volunteer_status", RateLimitTier.STANDARD)
        volunteer, member = await self._load(tenant, volunteer_id)
        volunteer.status = VolunteerStatus.ACTIVE
        volunteer.end_date = None
        volunteer.inactive_reason = None
        volunteer.version += 1
        await self.volunteers.update(volunteer)
        return ActionResponse(message=f"{member.name} has been reactivated", data=await self._read(tenant, volunteer_id))

    # ------------------------------------------------------------------
    # Background checks
    # ------------------------------------------------------------------

    async def request_background_check(
        self, tenant: TenantContext, volunteer_id: str
    ) -> ActionResponse[BackgroundCheckRequested]:
        """
        Email the volunteer the provider link and a confirmation link.

        The confirmation link carries a fresh random token; opening it moves
        the check to PENDING_REVIEW.
        """
        require_admin(tenant.scope)
        tenant.rate_limit("background_check_request", RateLimitTier.STANDARD)
        volunteer, member = await self._load(tenant, volunteer_id)
        if not member.email:
            raise BusinessRuleError("Volunteer has no email address")
        config = await self.bg_configs.get_for_organization(tenant.organization_id)
        if config is None or not config.is_enabled:
            raise BusinessRuleError("Background check provider is not configured")

        volunteer.bg_check_token = new_confirmation_token()
        volunteer.bg_check_confirmed_at = None
        if volunteer.background_check_status in (BackgroundCheckStatus.NOT_STARTED, BackgroundCheckStatus.EXPIRED):
            volunteer.background_check_status = BackgroundCheckStatus.IN_PROGRESS
        volunteer.version += 1
        await self.volunteers.update(volunteer)

        confirmation_url = background_check_confirmation_url(volunteer.bg_check_token)
        rendered = background_check_request_email(
            tenant.organization.name,
            member.name,
            BackgroundCheckBlock(
                provider=config.provider,
                application_url=config.application_url,
                instructions=config.instructions,
                confirmation_url=confirmation_url,
            ),
        )
        result = await self.email.send(
            to=member.email,
            subject=rendered.subject,
            html=rendered.html,
            text=rendered.text,
            organization_id=tenant.organization_id,
            metadata={"template": "background_check_request", "volunteer_id": volunteer.id},
        )
        message = "Background check request sent" if result.success else "Background check link created, but the email failed"
        return ActionResponse(
            message=message,
            data=BackgroundCheckRequested(email_sent=result.success, confirmation_url=confirmation_url),
        )

    async def confirm_background_check(self, token: str) -> ActionResponse[BackgroundCheckConfirmed]:
        """
        Public confirmation that the volunteer submitted the background check.

        Attempts are rate limited per token prefix.

        Raises:
            RateLimitExceededError: Too many attempts for the prefix.
            NotFoundError: Unknown token.
        """
        limiter = self.limiter or get_rate_limiter()
        limiter.check(
            f"bgcheck_confirm_{token[:8]}",
            RateLimitTier.PUBLIC_TOKEN,
            message="Too many attempts. Please wait a moment and try again.",
        )
        volunteer = await self.volunteers.get_by_token(token)
        if volunteer is None:
            raise NotFoundError("Invalid or expired confirmation link.")
        member = await self.session.get(ChurchMember, volunteer.church_member_id)
        name = member.name if member else "Volunteer"

        if volunteer.bg_check_confirmed_at is not None or volunteer.background_check_status in (
            BackgroundCheckStatus.PENDING_REVIEW,
            BackgroundCheckStatus.CLEARED,
        ):
            return ActionResponse(
                message="Background check already confirmed",
                data=BackgroundCheckConfirmed(already_confirmed=True, volunteer_name=name),
            )

        volunteer.background_check_status = BackgroundCheckStatus.PENDING_REVIEW
        volunteer.bg_check_confirmed_at = utc_now()
        volunteer.version += 1
        await self.volunteers.update(volunteer)
        logger.info(f"Background check confirmed by volunteer {volunteer.id}")
        return ActionResponse(
            message="Thank you! Your background check submission has been recorded.",
            data=BackgroundCheckConfirmed(already_confirmed=False, volunteer_name=name),
        )

    async def update_background_check_status(
        self, tenant: TenantContext, volunteer_id: str, payload: BackgroundCheckStatusUpdate
    ) -> ActionResponse[VolunteerRead]:
        require_admin(tenant.scope)
        tenant.rate_limit("background_check_status", RateLimitTier.STANDARD)
        volunteer, _ = await self._load(tenant, volunteer_id)

        volunteer.background_check_status = payload.status
        if payload.status == BackgroundCheckStatus.CLEARED:
            config = await self.bg_configs.get_for_organization(tenant.organization_id)
            validity = config.validity_months if config else DEFAULT_VALIDITY_MONTHS
            today = utc_now().date()
            volunteer.background_check_date = today
            volunteer.background_check_expiry = add_months(today, validity)
        volunteer.version += 1
        await self.volunteers.update(volunteer)
        return ActionResponse(message="Background check status updated", data=await self._read(tenant, volunteer_id))

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    async def available_volunteers_for_session(
        self, tenant: TenantContext, session_id: str
    ) -> ActionResponse[List[AvailableVolunteer]]:
        """Active, unassigned volunteers matching the event's requirements."""
        row = await self.event_sessions.get_with_event(session_id, tenant.organization_id)
        if row is None or not can_access_location(tenant.scope, row[1].location_id):
            raise NotFoundError("Session not found")
        _, event = row

        location_id = event.location_id if event.volunteer_pool_scope == VolunteerPoolScope.location else None
        rows = await self.volunteers.available_for_session(
            tenant.organization_id,
            session_id,
            category=event.category,
            requires_background_check=event.requires_background_check,
            location_id=location_id,
            limit=AVAILABLE_LIMIT,
        )
        categories = await self.volunteers.categories_for(v.id for v, _ in rows)
        return ActionResponse(
            data=[
                AvailableVolunteer(
                    id=volunteer.id,
                    name=member.name,
                    email=member.email,
                    phone=member.phone,
                    last_served_date=volunteer.last_served_date,
                    background_check_status=BackgroundCheckStatus(volunteer.background_check_status).value,
                    categories=categories[volunteer.id],
                )
                for volunteer, member in rows
            ]
        )

