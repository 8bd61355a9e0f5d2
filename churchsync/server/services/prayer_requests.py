"""
Prayer Request Service.

Manual entry, connect card intake, triage, batch assignment and answering
of prayer requests. Staff see public requests plus the ones assigned to
them; administrators see every request inside their data scope.
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from churchsync.core.database.base import utc_now
from churchsync.core.database.entities.connect_cards import ConnectCard
from churchsync.core.database.entities.organizations import User
from churchsync.core.database.entities.prayer_requests import PrayerBatch, PrayerRequest
from churchsync.core.database.repositories.organizations import UserRepository
from churchsync.core.database.repositories.prayer_requests import (
    PrayerBatchRepository,
    PrayerQuery,
    PrayerRequestRepository,
)
from churchsync.core.errors import BusinessRuleError, NotFoundError, PermissionDeniedError
from churchsync.core.logging_config import get_logger
from churchsync.core.models.domain.enums import PrayerBatchStatus, PrayerStatus
from churchsync.core.models.io.common import ActionResponse, Page
from churchsync.core.models.io.prayer_requests import (
    PrayerAssign,
    PrayerBatchAssign,
    PrayerBatchDetail,
    PrayerBatchRead,
    PrayerMarkAnswered,
    PrayerPrivacyToggle,
    PrayerRequestCreate,
    PrayerRequestRead,
    PrayerRequestUpdate,
    PrayerStats,
)
from churchsync.core.rate_limit import RateLimitTier
from churchsync.core.tenancy import (
    can_access_location,
    default_location_for_new_records,
    location_filter,
    require_admin,
    require_location_access,
)
from churchsync.domain.prayer import (
    detect_prayer_category,
    group_prayers_by_category,
    has_sensitive_keywords,
    is_critical_prayer,
    prayer_display_category,
    prayer_stats,
)

from .tenancy import TenantContext

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def prayer_batch_name(at: datetime) -> str:
    """``Prayer Batch - Jan 5, 2025 9:30 AM``"""
    hour = at.hour % 12 or 12
    meridiem = "AM" if at.hour < 12 else "PM"
    return f"Prayer Batch - {at.strftime('%b')} {at.day}, {at.year} {hour}:{at.minute:02d} {meridiem}"


def _is_admin(tenant: TenantContext) -> bool:
    return tenant.scope.can_manage_users


def _visibility_user(tenant: TenantContext) -> Optional[str]:
    """User id used for staff visibility rules, None for administrators."""
    return None if _is_admin(tenant) else tenant.user_id


class PrayerRequestService:
    """Prayer request workflows for one database session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.prayers = PrayerRequestRepository(session)
        self.batches = PrayerBatchRepository(session)
        self.users = UserRepository(session)

    async def _get_scoped(self, tenant: TenantContext, prayer_id: str) -> PrayerRequest:
        prayer = await self.prayers.get_in_organization(prayer_id, tenant.organization_id)
        if prayer is None:
            raise NotFoundError("Prayer request not found")
        if not can_access_location(tenant.scope, prayer.location_id):
            raise PermissionDeniedError("Access denied")
        return prayer

    async def _team_member(self, tenant: TenantContext, user_id: str) -> User:
        user = await self.users.get_by_id(user_id)
        if user is None or user.organization_id != tenant.organization_id:
            raise NotFoundError("Team member not found")
        return user

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create_prayer_request(
        self, tenant: TenantContext, payload: PrayerRequestCreate
    ) -> ActionResponse[PrayerRequestRead]:
        """
        Record a manually entered prayer request.

        Privacy, category and urgency are detected from the text unless the
        caller sets them.
        """
        tenant.rate_limit("prayer_request_create", RateLimitTier.STANDARD)
        location_id = payload.location_id or default_location_for_new_records(tenant.scope)
        if payload.location_id:
            require_location_access(tenant.scope, payload.location_id)

        text = payload.request.strip()
        prayer = PrayerRequest(
            organization_id=tenant.organization_id,
            location_id=location_id,
            request=text,
            category=payload.category or detect_prayer_category(text),
            is_private=payload.is_private if payload.is_private is not None else has_sensitive_keywords(text),
            is_urgent=payload.is_urgent if payload.is_urgent is not None else is_critical_prayer(text),
            submitted_by=payload.submitted_by,
            submitter_email=payload.submitter_email,
            submitter_phone=payload.submitter_phone,
            created_by=tenant.user_id,
        )
        prayer = await self.prayers.create(prayer)
        logger.info(f"Prayer request {prayer.id} created (private={prayer.is_private}, urgent={prayer.is_urgent})")
        return ActionResponse(message="Prayer request created successfully", data=PrayerRequestRead.model_validate(prayer))

    async def create_prayer_from_connect_card(self, card: ConnectCard) -> Optional[PrayerRequest]:
        """Create the PENDING prayer request of a connect card.

        Returns None when the card has no prayer text or already has one.
        """
        text = (card.prayer_request or "").strip()
        if not text:
            return None
        if await self.prayers.get_for_connect_card(card.id) is not None:
            return None

        prayer = PrayerRequest(
            organization_id=card.organization_id,
            location_id=card.location_id,
            request=text,
            category=detect_prayer_category(text),
            is_private=has_sensitive_keywords(text),
            is_urgent=is_critical_prayer(text),
            status=PrayerStatus.PENDING,
            submitted_by=card.name,
            submitter_email=card.email,
            submitter_phone=card.phone,
            connect_card_id=card.id,
            created_by=card.reviewed_by,
        )
        prayer = await self.prayers.create(prayer)
        logger.info(f"Prayer request {prayer.id} created from connect card {card.id}")
        return prayer

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def list_prayer_requests(
        self, tenant: TenantContext, query: PrayerQuery, page: int = 1, limit: int = DEFAULT_PAGE_SIZE
    ) -> ActionResponse[Page[PrayerRequestRead]]:
        page = max(page, 1)
        limit = min(max(limit, 1), MAX_PAGE_SIZE)
        if query.location_id and not can_access_location(tenant.scope, query.location_id):
            raise PermissionDeniedError("You do not have access to this location")

        items, total = await self.prayers.search(
            tenant.organization_id,
            location_filter(tenant.scope),
            _visibility_user(tenant),
            query,
            page,
            limit,
        )
        total_pages = (total + limit - 1) // limit if total else 0
        return ActionResponse(
            data=Page(
                items=[PrayerRequestRead.model_validate(item) for item in items],
                total=total,
                page=page,
                limit=limit,
                total_pages=total_pages,
            )
        )

    async def get_prayer_request(self, tenant: TenantContext, prayer_id: str) -> ActionResponse[PrayerRequestRead]:
        prayer = await self._get_scoped(tenant, prayer_id)
        if prayer.is_private and not _is_admin(tenant) and prayer.assigned_to_id != tenant.user_id:
            raise NotFoundError("Prayer request not found")
        return ActionResponse(data=PrayerRequestRead.model_validate(prayer))

    async def prayer_request_stats(self, tenant: TenantContext) -> ActionResponse[PrayerStats]:
        prayers = await self.prayers.list_visible(
            tenant.organization_id, location_filter(tenant.scope), _visibility_user(tenant)
        )
        now = utc_now()
        week_ago = now - timedelta(days=7)
        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        by_status = Counter(PrayerStatus(p.status) for p in prayers)
        stats = PrayerStats(
            total=len(prayers),
            pending=by_status[PrayerStatus.PENDING],
            assigned=by_status[PrayerStatus.ASSIGNED],
            praying=by_status[PrayerStatus.PRAYING],
            answered=by_status[PrayerStatus.ANSWERED],
            archived=by_status[PrayerStatus.ARCHIVED],
            private=sum(1 for p in prayers if p.is_private),
            urgent=sum(1 for p in prayers if p.is_urgent),
            this_week=sum(1 for p in prayers if p.created_at >= week_ago),
            answered_this_month=sum(
                1 for p in prayers if p.answered_date is not None and p.answered_date >= month_start
            ),
            by_category=dict(Counter(prayer_display_category(p) for p in prayers)),
        )
        return ActionResponse(data=stats)

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    async def update_prayer_request(
        self, tenant: TenantContext, prayer_id: str, payload: PrayerRequestUpdate
    ) -> ActionResponse[PrayerRequestRead]:
        require_admin(tenant.scope)
        tenant.rate_limit("prayer_request_update", RateLimitTier.STANDARD)
        prayer = await self._get_scoped(tenant, prayer_id)

        changes = payload.model_dump(exclude_unset=True)
        if "location_id" in changes and changes["location_id"] is not None:
            require_location_access(tenant.scope, changes["location_id"])
        for field, value in changes.items():
            setattr(prayer, field, value)
        if changes.get("status") == PrayerStatus.ANSWERED and prayer.answered_date is None:
            prayer.answered_date = utc_now()

        prayer = await self.prayers.update(prayer)
        return ActionResponse(message="Prayer request updated successfully", data=PrayerRequestRead.model_validate(prayer))

    async def delete_prayer_request(self, tenant: TenantContext, prayer_id: str) -> ActionResponse[None]:
        if not _is_admin(tenant):
            raise PermissionDeniedError("You don't have permission to delete prayer requests")
        tenant.rate_limit("prayer_request_delete", RateLimitTier.STANDARD)
        prayer = await self._get_scoped(tenant, prayer_id)
        await self.prayers.delete(prayer.id)
        logger.info(f"Prayer request {prayer_id} deleted by {tenant.user_id}")
        return ActionResponse(message="Prayer request deleted successfully")

    async def assign_prayer(
        self, tenant: TenantContext, prayer_id: str, payload: PrayerAssign
    ) -> ActionResponse[PrayerRequestRead]:
        require_admin(tenant.scope)
        tenant.rate_limit("prayer_request_assign", RateLimitTier.STANDARD)
        prayer = await self._get_scoped(tenant, prayer_id)
        await self._team_member(tenant, payload.assigned_to_id)

        prayer.assigned_to_id = payload.assigned_to_id
        prayer.status = PrayerStatus.ASSIGNED
        prayer = await self.prayers.update(prayer)
        return ActionResponse(message="Prayer request assigned successfully", data=PrayerRequestRead.model_validate(prayer))

    async def mark_answered(
        self, tenant: TenantContext, prayer_id: str, payload: PrayerMarkAnswered
    ) -> ActionResponse[PrayerRequestRead]:
        tenant.rate_limit("prayer_request_answer", RateLimitTier.STANDARD)
        prayer = await self._get_scoped(tenant, prayer_id)
        if not _is_admin(tenant) and prayer.assigned_to_id != tenant.user_id:
            raise PermissionDeniedError("You can only mark prayers assigned to you as answered")

        prayer.status = PrayerStatus.ANSWERED
        prayer.answered_date = utc_now()
        prayer.answered_notes = payload.notes
        prayer = await self.prayers.update(prayer)
        return ActionResponse(message="Prayer marked as answered successfully", data=PrayerRequestRead.model_validate(prayer))

    async def toggle_privacy(
        self, tenant: TenantContext, prayer_id: str, payload: PrayerPrivacyToggle
    ) -> ActionResponse[PrayerRequestRead]:
        if not _is_admin(tenant):
            raise PermissionDeniedError("You don't have permission to change privacy settings")
        tenant.rate_limit("prayer_request_privacy", RateLimitTier.STANDARD)
        prayer = await self._get_scoped(tenant, prayer_id)
        prayer.is_private = payload.is_private
        prayer = await self.prayers.update(prayer)
        label = "private" if payload.is_private else "public"
        return ActionResponse(message=f"Prayer request marked as {label}", data=PrayerRequestRead.model_validate(prayer))

    # ------------------------------------------------------------------
    # Batches
    # ------------------------------------------------------------------

    async def create_batch_and_assign(
        self, tenant: TenantContext, payload: PrayerBatchAssign
    ) -> ActionResponse[PrayerBatchRead]:
        """
        Group prayer requests into a new batch assigned to one team member.

        All prayers are updated and the batch is created in one transaction.

        Raises:
            BusinessRuleError: Empty selection, missing prayers or prayers
                that are already assigned.
        """
        require_admin(tenant.scope)
        tenant.rate_limit("prayer_batch_assign", RateLimitTier.BULK)
        ids = list(dict.fromkeys(payload.prayer_request_ids))
        if not ids:
            raise BusinessRuleError("Select at least one prayer request")

        assignee = await self._team_member(tenant, payload.assigned_to_id)
        prayers = await self.prayers.get_many(tenant.organization_id, ids)
        prayers = [p for p in prayers if can_access_location(tenant.scope, p.location_id)]
        if len(prayers) != len(ids):
            raise BusinessRuleError("Some prayer requests were not found")

        already_assigned = [p for p in prayers if p.assigned_to_id or p.batch_id]
        if already_assigned:
            raise BusinessRuleError(
                f"{len(already_assigned)} prayer(s) are already assigned. Please unassign them first."
            )

        locations = Counter(p.location_id for p in prayers if p.location_id)
        batch_location = locations.most_common(1)[0][0] if locations else None
        now = utc_now()
        batch = PrayerBatch(
            organization_id=tenant.organization_id,
            location_id=batch_location,
            name=prayer_batch_name(now),
            status=PrayerBatchStatus.IN_REVIEW,
            assigned_to_id=assignee.id,
            assigned_to_name=assignee.name or assignee.email,
            prayer_count=len(prayers),
            created_by=tenant.user_id,
            created_at=now,
        )
        self.session.add(batch)
        for prayer in prayers:
            prayer.batch_id = batch.id
            prayer.assigned_to_id = assignee.id
            prayer.status = PrayerStatus.ASSIGNED
            self.session.add(prayer)
        await self.session.commit()
        await self.session.refresh(batch)

        logger.info(f"Prayer batch {batch.id} created with {len(prayers)} prayers for {assignee.id}")
        return ActionResponse(
            message=f"Created batch and assigned {_plural(len(prayers), 'prayer')} to {assignee.name or assignee.email}",
            data=PrayerBatchRead.model_validate(batch),
        )

    async def list_prayer_batches(self, tenant: TenantContext) -> ActionResponse[List[PrayerBatchRead]]:
        assigned_to = None if _is_admin(tenant) else tenant.user_id
        batches = await self.batches.list_for_organization(
            tenant.organization_id, location_filter(tenant.scope), assigned_to_id=assigned_to
        )
        return ActionResponse(data=[PrayerBatchRead.model_validate(batch) for batch in batches])

    async def _get_batch(self, tenant: TenantContext, batch_id: str) -> PrayerBatch:
        batch = await self.batches.get_in_organization(batch_id, tenant.organization_id)
        if batch is None or not can_access_location(tenant.scope, batch.location_id):
            raise NotFoundError("Batch not found")
        if not _is_admin(tenant) and batch.assigned_to_id != tenant.user_id:
            raise PermissionDeniedError("Access denied")
        return batch

    async def get_prayer_batch(self, tenant: TenantContext, batch_id: str) -> ActionResponse[PrayerBatchDetail]:
        batch = await self._get_batch(tenant, batch_id)
        prayers = await self.prayers.list_for_batch(batch.id)
        groups: Dict[str, List[PrayerRequestRead]] = {
            key: [PrayerRequestRead.model_validate(p) for p in items]
            for key, items in group_prayers_by_category(prayers).items()
        }
        return ActionResponse(
            data=PrayerBatchDetail(
                batch=PrayerBatchRead.model_validate(batch),
                groups=groups,
                stats=prayer_stats(prayers),
            )
        )

    async def complete_prayer_batch(self, tenant: TenantContext, batch_id: str) -> ActionResponse[PrayerBatchRead]:
        tenant.rate_limit("prayer_batch_complete", RateLimitTier.STANDARD)
        batch = await self._get_batch(tenant, batch_id)
        if batch.status == PrayerBatchStatus.COMPLETED:
            raise BusinessRuleError("Batch is already completed")
        batch.status = PrayerBatchStatus.COMPLETED
        batch.completed_at = utc_now()
        batch = await self.batches.update(batch)
        return ActionResponse(message="Prayer batch completed", data=PrayerBatchRead.model_validate(batch))
