"""
Connect Card Service.

Scanned cards enter a per-campus daily review batch. Reviewing a card
reconciles it with a church member (matched by email), optionally enrolls the
person as a pending volunteer, and then runs the follow-up steps: prayer
request intake, batch auto-completion, leader notification, onboarding
documents and CRM sync. A failing follow-up step never fails the review.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Awaitable, Callable, List, Optional, Sequence, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from churchsync.core.database.base import utc_now
from churchsync.core.database.entities.connect_cards import ConnectCard, ConnectCardBatch
from churchsync.core.database.entities.members import ChurchMember
from churchsync.core.database.entities.organizations import User
from churchsync.core.database.entities.volunteers import Volunteer, VolunteerCategory
from churchsync.core.database.repositories.connect_cards import ConnectCardBatchRepository, ConnectCardRepository
from churchsync.core.database.repositories.members import ChurchMemberRepository
from churchsync.core.database.repositories.organizations import LocationRepository, UserRepository
from churchsync.core.database.repositories.volunteers import VolunteerRepository
from churchsync.core.errors import BusinessRuleError, NotFoundError
from churchsync.core.logging_config import get_logger
from churchsync.core.models.domain.enums import (
    BackgroundCheckStatus,
    BatchStatus,
    ConnectCardStatus,
    MemberType,
    VolunteerCategoryType,
    VolunteerOnboardingStatus,
    VolunteerStatus,
)
from churchsync.core.models.io.common import ActionResponse
from churchsync.core.models.io.connect_cards import (
    ConnectCardBatchRead,
    ConnectCardRead,
    ConnectCardReview,
    ConnectCardSave,
    ConnectCardSaved,
    DuplicateCheck,
    DuplicateMatch,
    OnboardingStatusUpdate,
)
from churchsync.core.rate_limit import RateLimitTier
from churchsync.core.tenancy import can_access_location, location_filter, require_delete
from churchsync.domain.connect_cards import (
    FIRST_VISIT,
    format_phone_number,
    format_validation_summary,
    normalize_interests,
    normalize_keywords,
    normalize_visit_status,
    validate_connect_card_data,
)
from churchsync.domain.volunteer_categories import category_label
from churchsync.integrations.email import EmailService, leader_notification_email
from churchsync.server.core.config import settings

from .ghl import GHLService
from .onboarding import OnboardingService
from .prayer_requests import PrayerRequestService
from .tenancy import TenantContext

logger = get_logger(__name__)

T = TypeVar("T")

FIRST_TIME_VISITOR = "First Time Visitor"
FIRST_VISIT_TYPES = frozenset({FIRST_VISIT, FIRST_TIME_VISITOR})


def batch_name(location_name: str, on: datetime) -> str:
    """``Main Campus - Jan 5, 2025``"""
    return f"{location_name} - {on.strftime('%b')} {on.day}, {on.year}"


def _names_match(a: Optional[str], b: Optional[str]) -> bool:
    return (a or "").strip().lower() == (b or "").strip().lower()


class ConnectCardService:
    """Connect card intake, review batches and member reconciliation."""

    def __init__(
        self,
        session: AsyncSession,
        email: Optional[EmailService] = None,
        ghl: Optional[GHLService] = None,
    ) -> None:
        self.session = session
        self.email = email or EmailService(session)
        self.ghl = ghl or GHLService(session)
        self.cards = ConnectCardRepository(session)
        self.batches = ConnectCardBatchRepository(session)
        self.members = ChurchMemberRepository(session)
        self.volunteers = VolunteerRepository(session)
        self.locations = LocationRepository(session)
        self.users = UserRepository(session)

    # ------------------------------------------------------------------
    # Batches
    # ------------------------------------------------------------------

    async def get_or_create_active_batch(self, tenant: TenantContext) -> ConnectCardBatch:
        """
        Today's PENDING batch for the caller's campus, created on demand.

        Raises:
            BusinessRuleError: The caller has no default location.
        """
        location_id = tenant.user.default_location_id
        if not location_id:
            raise BusinessRuleError("Set a default location before scanning connect cards")
        location = await self.locations.get_in_organization(location_id, tenant.organization_id)
        if location is None:
            raise BusinessRuleError("Your default location no longer exists")

        now = utc_now()
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
        batch = await self.batches.find_active(tenant.organization_id, location_id, start_of_day)
        if batch is not None:
            return batch

        batch = await self.batches.create(
            ConnectCardBatch(
                organization_id=tenant.organization_id,
                location_id=location_id,
                name=batch_name(location.name, now),
                created_by=tenant.user_id,
            )
        )
        logger.info(f"Opened connect card batch {batch.id} ({batch.name})")
        return batch

    async def list_batches(self, tenant: TenantContext) -> ActionResponse[List[ConnectCardBatchRead]]:
        batches = await self.batches.list_for_organization(tenant.organization_id, location_filter(tenant.scope))
        return ActionResponse(data=[ConnectCardBatchRead.model_validate(batch) for batch in batches])

    async def _get_batch(self, tenant: TenantContext, batch_id: str) -> ConnectCardBatch:
        batch = await self.batches.get_in_organization(batch_id, tenant.organization_id)
        if batch is None or not can_access_location(tenant.scope, batch.location_id):
            raise NotFoundError("Batch not found")
        return batch

    async def complete_batch(self, tenant: TenantContext, batch_id: str) -> ActionResponse[ConnectCardBatchRead]:
        batch = await self._get_batch(tenant, batch_id)
        batch.status = BatchStatus.COMPLETED
        batch = await self.batches.update(batch)
        return ActionResponse(message="Batch completed", data=ConnectCardBatchRead.model_validate(batch))

    async def start_new_batch(self, tenant: TenantContext) -> ActionResponse[ConnectCardBatchRead]:
        """Close the current batch of the caller's campus and open a fresh one."""
        current = await self.get_or_create_active_batch(tenant)
        current.status = BatchStatus.COMPLETED
        await self.batches.update(current)
        batch = await self.get_or_create_active_batch(tenant)
        return ActionResponse(message="New batch started", data=ConnectCardBatchRead.model_validate(batch))

    async def delete_batch(self, tenant: TenantContext, batch_id: str) -> ActionResponse[None]:
        require_delete(tenant.scope)
        batch = await self._get_batch(tenant, batch_id)
        if batch.status == BatchStatus.COMPLETED and batch.card_count > 0:
            raise BusinessRuleError("Cannot delete completed batch with cards. Archive it instead.")

        await self.cards.delete_for_batch(batch.id)
        await self.session.delete(batch)
        await self.session.commit()
        logger.info(f"Deleted connect card batch {batch_id} and its cards")
        return ActionResponse(message="Batch deleted")

    # ------------------------------------------------------------------
    # Intake
    # ------------------------------------------------------------------

    async def save_connect_card(self, tenant: TenantContext, payload: ConnectCardSave) -> ActionResponse[ConnectCardSaved]:
        """
        Save a freshly scanned card into today's review batch.

        - **payload.extracted_data**: Raw extraction (name, email, phone, ...)
        - **payload.image_key**: Storage key of the scanned image
        """
        tenant.rate_limit("connect_card_save", RateLimitTier.STANDARD)
        extracted = payload.extracted_data
        quality = validate_connect_card_data(extracted.model_dump())
        batch = await self.get_or_create_active_batch(tenant)

        now = utc_now()
        visit_type = FIRST_TIME_VISITOR if extracted.first_time_visitor else normalize_visit_status(extracted.visit_status)
        card = ConnectCard(
            organization_id=tenant.organization_id,
            location_id=tenant.user.default_location_id,
            batch_id=batch.id,
            image_key=payload.image_key,
            name=(extracted.name or "").strip() or None,
            email=(extracted.email or "").strip() or None,
            phone=format_phone_number(extracted.phone),
            address=extracted.address,
            visit_type=visit_type,
            interests=normalize_interests(extracted.interests),
            keywords=normalize_keywords(extracted.keywords),
            prayer_request=extracted.prayer_request,
            extracted_data=extracted.model_dump(mode="json"),
            validation_issues=quality.messages,
            status=ConnectCardStatus.EXTRACTED,
            scanned_by=tenant.user_id,
            scanned_at=now,
        )
        batch.card_count += 1
        self.session.add(card)
        self.session.add(batch)
        await self.session.commit()
        await self.session.refresh(card)

        logger.info(f"Connect card {card.id} saved to batch {batch.id} (needs_review={quality.needs_review})")
        return ActionResponse(
            message="Connect card saved - added to review queue",
            data=ConnectCardSaved(
                card=ConnectCardRead.model_validate(card),
                needs_review=quality.needs_review,
                issues=quality.messages,
                summary=format_validation_summary(quality),
            ),
        )

    async def check_duplicate(self, tenant: TenantContext, payload: DuplicateCheck) -> ActionResponse[DuplicateMatch]:
        phones = [p for p in dict.fromkeys([format_phone_number(payload.phone), payload.phone]) if p]
        match = await self.cards.find_duplicate(
            tenant.organization_id,
            payload.name,
            emails=[payload.email] if payload.email else [],
            phones=phones,
            exclude_id=payload.exclude_id,
        )
        return ActionResponse(
            data=DuplicateMatch(
                is_duplicate=match is not None,
                card=ConnectCardRead.model_validate(match) if match else None,
            )
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_connect_cards(
        self,
        tenant: TenantContext,
        status: Optional[ConnectCardStatus] = None,
        batch_id: Optional[str] = None,
    ) -> ActionResponse[List[ConnectCardRead]]:
        cards = await self.cards.list_for_organization(
            tenant.organization_id, location_filter(tenant.scope), status=status, batch_id=batch_id
        )
        return ActionResponse(data=[ConnectCardRead.model_validate(card) for card in cards])

    async def _get_card(self, tenant: TenantContext, card_id: str) -> ConnectCard:
        card = await self.cards.get_in_organization(card_id, tenant.organization_id)
        if card is None or not can_access_location(tenant.scope, card.location_id):
            raise NotFoundError("Connect card not found")
        return card

    async def get_connect_card(self, tenant: TenantContext, card_id: str) -> ActionResponse[ConnectCardRead]:
        return ActionResponse(data=ConnectCardRead.model_validate(await self._get_card(tenant, card_id)))

    # ------------------------------------------------------------------
    # Review / reconciliation
    # ------------------------------------------------------------------

    async def _enroll_volunteer(
        self, tenant: TenantContext, member: ChurchMember, card: ConnectCard, category: VolunteerCategoryType
    ) -> tuple[Volunteer, bool]:
        """Attach ``category`` to the member's volunteer record, creating it when missing."""
        volunteer = await self.volunteers.get_by_member(member.id)
        if volunteer is not None:
            existing = await self.volunteers.categories_for([volunteer.id])
            if category not in existing[volunteer.id]:
                self.session.add(
                    VolunteerCategory(organization_id=tenant.organization_id, volunteer_id=volunteer.id, category=category)
                )
            return volunteer, False

        volunteer = Volunteer(
            organization_id=tenant.organization_id,
            church_member_id=member.id,
            location_id=card.location_id,
            status=VolunteerStatus.PENDING_APPROVAL,
            background_check_status=BackgroundCheckStatus.NOT_STARTED,
        )
        self.session.add(volunteer)
        self.session.add(
            VolunteerCategory(organization_id=tenant.organization_id, volunteer_id=volunteer.id, category=category)
        )
        return volunteer, True

    async def update_connect_card(
        self, tenant: TenantContext, card_id: str, payload: ConnectCardReview
    ) -> ActionResponse[ConnectCardRead]:
        """
        Review a card: reconcile it with a church member and process it.

        Members are matched by email, ignoring case. A match with a different
        name is still linked, with a warning in the message.

        Args:
            tenant: Resolved request tenant
            card_id: Card being reviewed
            payload: Corrected card fields and follow-up options

        Returns:
            ActionResponse whose message lists every step that happened
        """
        tenant.rate_limit("connect_card_update", RateLimitTier.STANDARD)
        card = await self._get_card(tenant, card_id)

        leader: Optional[User] = None
        if payload.assigned_leader_id:
            leader = await self.users.get_by_id(payload.assigned_leader_id)
            if leader is None or leader.organization_id != tenant.organization_id:
                raise NotFoundError("Assigned leader not found")

        name = payload.name.strip()
        email = payload.email
        phone = format_phone_number(payload.phone)
        member_created = member_updated = name_mismatch = volunteer_created = False

        member: Optional[ChurchMember] = None
        if email:
            member = await self.members.find_by_email(tenant.organization_id, email)
            if member is not None:
                if _names_match(member.name, name):
                    if phone:
                        member.phone = phone
                    self.session.add(member)
                    member_updated = True
                else:
                    name_mismatch = True
        if member is None:
            member = ChurchMember(
                organization_id=tenant.organization_id,
                location_id=card.location_id,
                name=name,
                email=email,
                phone=phone,
                address=payload.address,
                member_type=MemberType.VISITOR if payload.visit_type in FIRST_VISIT_TYPES else MemberType.MEMBER,
            )
            self.session.add(member)
            member_created = True

        volunteer: Optional[Volunteer] = None
        if payload.volunteer_category is not None:
            volunteer, volunteer_created = await self._enroll_volunteer(tenant, member, card, payload.volunteer_category)
            card.volunteer_onboarding_status = VolunteerOnboardingStatus.INQUIRY

        card.name = name
        card.email = email
        card.phone = phone
        card.address = payload.address
        card.visit_type = payload.visit_type
        card.interests = normalize_interests(payload.interests)
        card.volunteer_category = payload.volunteer_category
        card.prayer_request = payload.prayer_request
        card.assigned_leader_id = payload.assigned_leader_id
        card.sms_automation_enabled = payload.sms_automation_enabled
        card.church_member_id = member.id
        card.status = ConnectCardStatus.PROCESSED
        card.reviewed_by = tenant.user_id
        card.reviewed_at = utc_now()
        self.session.add(card)
        await self.session.commit()
        await self.session.refresh(card)
        logger.info(
            f"Connect card {card.id} processed: member={member.id} created={member_created} "
            f"volunteer_created={volunteer_created}"
        )

        messages = ["Connect card processed successfully"]
        if member_created:
            messages.append("New member created")
        elif member_updated:
            messages.append("Existing member updated")
        if volunteer_created:
            messages.append("Volunteer added to pending queue")
        if name_mismatch:
            messages.append("Warning: Name on card differs from existing member")

        card_id, member_id = card.id, member.id
        reload = (card, member, volunteer, leader)
        await self._non_fatal(
            f"Prayer request creation for connect card {card_id}",
            reload,
            lambda: PrayerRequestService(self.session).create_prayer_from_connect_card(card),
        )
        await self._non_fatal(
            f"Batch auto-complete for connect card {card_id}", reload, lambda: self._auto_complete_batch(card)
        )

        if leader is not None and payload.volunteer_category is not None and payload.send_message_to_leader:
            notified = await self._non_fatal(
                f"Leader notification for connect card {card_id}",
                reload,
                lambda: self._notify_leader(tenant, leader, card, payload.volunteer_category),
                default=False,
            )
            if notified:
                messages.append("Leader notification sent")

        if payload.volunteer_category is not None and payload.send_background_check_info and email:
            shared = await self._non_fatal(
                f"Onboarding documents for connect card {card_id}",
                reload,
                lambda: self._send_documents(tenant, card, volunteer, payload.volunteer_category),
                default=False,
            )
            if shared:
                messages.append("Onboarding documents sent to volunteer")

        if payload.sms_automation_enabled:
            await self._non_fatal(
                f"CRM contact sync for member {member_id}", reload, lambda: self._sync_contact(tenant, member)
            )
            messages.append("SMS automation enabled")

        await self.session.refresh(card)
        return ActionResponse(message=". ".join(messages), data=ConnectCardRead.model_validate(card))

    async def _non_fatal(
        self,
        step: str,
        reload: Sequence[Optional[Any]],
        action: Callable[[], Awaitable[T]],
        default: Optional[T] = None,
    ) -> Optional[T]:
        """
        Run a follow-up step whose failure must not fail the review.

        On failure the transaction is rolled back and the ``reload`` objects,
        expired by the rollback, are loaded again for the next steps.
        """
        try:
            return await action()
        except Exception:
            await self.session.rollback()
            logger.warning(f"{step} failed", exc_info=True)
            for obj in reload:
                if obj is not None:
                    await self.session.refresh(obj)
            return default

    async def _auto_complete_batch(self, card: ConnectCard) -> None:
        if not card.batch_id:
            return
        batch = await self.batches.get_by_id(card.batch_id)
        if batch is None or batch.status == BatchStatus.COMPLETED:
            return
        if await self.cards.count_unprocessed_in_batch(batch.id) == 0:
            batch.status = BatchStatus.COMPLETED
            await self.batches.update(batch)
            logger.info(f"Connect card batch {batch.id} auto-completed")

    async def _notify_leader(
        self, tenant: TenantContext, leader: User, card: ConnectCard, category: VolunteerCategoryType
    ) -> bool:
        if not leader.email:
            return False
        rendered = leader_notification_email(
            church_name=tenant.organization.name,
            leader_name=leader.name or "Ministry Leader",
            volunteer_name=card.name or "New Volunteer",
            volunteer_email=card.email,
            volunteer_phone=card.phone,
            category_label=category_label(category),
            dashboard_url=f"{settings.public_base_url}/church/{tenant.organization.slug}/admin/volunteer",
        )
        result = await self.email.send(
            to=leader.email,
            subject=rendered.subject,
            html=rendered.html,
            text=rendered.text,
            organization_id=tenant.organization_id,
            metadata={"template": "leader_notification", "connect_card_id": card.id},
        )
        return result.success

    async def _send_documents(
        self,
        tenant: TenantContext,
        card: ConnectCard,
        volunteer: Optional[Volunteer],
        category: VolunteerCategoryType,
    ) -> bool:
        delivery = await OnboardingService(self.session, email=self.email).send_onboarding_documents(
            tenant.organization, card.name or "Volunteer", card.email, category, volunteer
        )
        if not delivery.sent:
            return False
        card.volunteer_onboarding_status = (
            VolunteerOnboardingStatus.READY if delivery.ready_for_export else VolunteerOnboardingStatus.DOCUMENTS_SHARED
        )
        self.session.add(card)
        await self.session.commit()
        return True

    async def _sync_contact(self, tenant: TenantContext, member: ChurchMember) -> None:
        await self.session.refresh(member)
        await self.ghl.sync_contact(tenant.organization_id, member, tags=["connect-card"])

    # ------------------------------------------------------------------
    # Other card updates
    # ------------------------------------------------------------------

    async def update_onboarding_status(
        self, tenant: TenantContext, card_id: str, payload: OnboardingStatusUpdate
    ) -> ActionResponse[ConnectCardRead]:
        tenant.rate_limit("connect_card_onboarding_status", RateLimitTier.ASSIGNMENT)
        card = await self._get_card(tenant, card_id)
        card.volunteer_onboarding_status = payload.status
        card = await self.cards.update(card)
        return ActionResponse(message="Onboarding status updated", data=ConnectCardRead.model_validate(card))

    async def delete_connect_card(self, tenant: TenantContext, card_id: str) -> ActionResponse[None]:
        require_delete(tenant.scope)
        tenant.rate_limit("connect_card_delete", RateLimitTier.STANDARD)
        card = await self._get_card(tenant, card_id)
        if card.batch_id:
            batch = await self.batches.get_by_id(card.batch_id)
            if batch is not None and batch.card_count > 0:
                batch.card_count -= 1
                self.session.add(batch)
        await self.session.delete(card)
        await self.session.commit()
        logger.info(f"Connect card {card_id} deleted by {tenant.user_id}")
        return ActionResponse(message="Connect card deleted")
