"""
Volunteer Event Service.

Events move DRAFT -> PUBLISHED -> (IN_PROGRESS) -> COMPLETED, or end as
CANCELLED / ARCHIVED. Volunteers are assigned directly or invited by SMS;
``slots_filled`` on a session counts every assignment that still holds a
slot, so declining or removing one frees it again.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from churchsync.core.database.base import utc_now
from churchsync.core.database.entities.events import EventAssignment, EventResource, EventSession, VolunteerEvent
from churchsync.core.database.entities.members import ChurchMember
from churchsync.core.database.repositories.events import (
    EventAssignmentRepository,
    EventResourceRepository,
    EventSessionRepository,
    VolunteerEventRepository,
)
from churchsync.core.database.repositories.members import MemberIntegrationRepository
from churchsync.core.database.repositories.organizations import LocationRepository
from churchsync.core.database.repositories.volunteers import VolunteerRepository
from churchsync.core.errors import BusinessRuleError, IntegrationNotConfiguredError, NotFoundError
from churchsync.core.logging_config import get_logger
from churchsync.core.models.domain.enums import AssignmentStatus, EventStatus, EventType
from churchsync.core.models.io.common import ActionResponse
from churchsync.core.models.io.events import (
    BulkAssignResult,
    CommonResourcesCreate,
    EventAssignmentRead,
    EventCreate,
    EventDetail,
    EventRead,
    EventResourceRead,
    EventSessionInput,
    EventSessionRead,
    EventUpdate,
    InboundSmsResult,
    InviteResult,
    ResourceCreate,
    ResourceUpdate,
)
from churchsync.core.monitoring import log_notification
from churchsync.core.rate_limit import RateLimitTier
from churchsync.core.tenancy import (
    can_access_location,
    default_location_for_new_records,
    location_filter,
    require_location_access,
)
from churchsync.integrations.ghl import PROVIDER, extract_message_from_payload, parse_response_fuzzy
from churchsync.integrations.ghl.sms import (
    event_invitation,
    first_name_of,
    format_event_date,
    render_confirmation_message,
)

from .ghl import GHLService
from .tenancy import TenantContext

logger = get_logger(__name__)

OPEN_STATUSES = frozenset({EventStatus.PUBLISHED, EventStatus.IN_PROGRESS})
DELETABLE_STATUSES = frozenset({EventStatus.DRAFT, EventStatus.CANCELLED})
MAX_BATCH = 20
SMS_NOT_CONFIGURED = "SMS integration not configured. Please set up GHL in settings."


def _check_batch_size(volunteer_ids: List[str], verb: str) -> List[str]:
    ids = list(dict.fromkeys(volunteer_ids))
    if not ids:
        raise BusinessRuleError("No volunteers selected")
    if len(ids) > MAX_BATCH:
        raise BusinessRuleError(f"Maximum {MAX_BATCH} volunteers can be {verb} at once")
    return ids


def _new_session(event: VolunteerEvent, data: EventSessionInput) -> EventSession:
    return EventSession(
        event_id=event.id,
        organization_id=event.organization_id,
        name=data.name,
        session_date=data.session_date,
        start_time=data.start_time,
        end_time=data.end_time,
        slots_needed=data.slots_needed,
    )


class EventService:
    """Events, their resource checklist and volunteer assignments."""

    def __init__(self, session: AsyncSession, ghl: Optional[GHLService] = None) -> None:
        self.session = session
        self.ghl = ghl or GHLService(session)
        self.events = VolunteerEventRepository(session)
        self.sessions = EventSessionRepository(session)
        self.resources = EventResourceRepository(session)
        self.assignments = EventAssignmentRepository(session)
        self.volunteers = VolunteerRepository(session)
        self.locations = LocationRepository(session)

    async def _get_event(self, tenant: TenantContext, event_id: str) -> VolunteerEvent:
        event = await self.events.get_in_organization(event_id, tenant.organization_id)
        if event is None or not can_access_location(tenant.scope, event.location_id):
            raise NotFoundError("Event not found")
        return event

    async def _open_session(self, tenant: TenantContext, session_id: str) -> Tuple[EventSession, VolunteerEvent]:
        row = await self.sessions.get_with_event(session_id, tenant.organization_id)
        if row is None or not can_access_location(tenant.scope, row[1].location_id):
            raise NotFoundError("Session not found or event not active")
        if row[1].status not in OPEN_STATUSES:
            raise BusinessRuleError("Session not found or event not active")
        return row

    async def _check_location(self, tenant: TenantContext, location_id: Optional[str]) -> None:
        if location_id is None:
            return
        require_location_access(tenant.scope, location_id)
        if await self.locations.get_active(location_id, tenant.organization_id) is None:
            raise BusinessRuleError("Location not found or inactive")

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    async def create_event(self, tenant: TenantContext, payload: EventCreate) -> ActionResponse[EventDetail]:
        """Create a DRAFT event together with its sessions in one transaction."""
        tenant.rate_limit("create_event", RateLimitTier.BULK)
        location_id = payload.location_id or default_location_for_new_records(tenant.scope)
        await self._check_location(tenant, location_id)

        event = VolunteerEvent(
            organization_id=tenant.organization_id,
            location_id=location_id,
            name=payload.name,
            description=payload.description,
            event_type=payload.event_type,
            status=EventStatus.DRAFT,
            category=payload.category,
            requires_background_check=payload.requires_background_check,
            volunteer_pool_scope=payload.volunteer_pool_scope,
            confirmation_message=payload.confirmation_message,
            leader_name=payload.leader_name,
            created_by=tenant.user_id,
        )
        self.session.add(event)
        for data in payload.sessions:
            self.session.add(_new_session(event, data))
        await self.session.commit()

        logger.info(f"Event {event.id} created with {len(payload.sessions)} sessions")
        return ActionResponse(message="Event created successfully", data=await self._detail(event))

    async def update_event(
        self, tenant: TenantContext, event_id: str, payload: EventUpdate
    ) -> ActionResponse[EventDetail]:
        tenant.rate_limit("update_event", RateLimitTier.BULK)
        event = await self._get_event(tenant, event_id)
        values = payload.model_dump(exclude_unset=True, exclude={"sessions"})
        if "location_id" in values:
            await self._check_location(tenant, values["location_id"])
        if payload.sessions is not None and event.status != EventStatus.DRAFT:
            raise BusinessRuleError("Sessions can only be changed while the event is a draft")
        if payload.sessions is not None and not payload.sessions:
            raise BusinessRuleError("Event must have at least one session")

        for field, value in values.items():
            setattr(event, field, value)
        self.session.add(event)
        if payload.sessions is not None:
            await self.sessions.delete_for_event(event.id)
            for data in payload.sessions:
                self.session.add(_new_session(event, data))
        await self.session.commit()
        return ActionResponse(message="Event updated successfully", data=await self._detail(event))

    async def publish_event(self, tenant: TenantContext, event_id: str) -> ActionResponse[EventRead]:
        tenant.rate_limit("publish_event", RateLimitTier.BULK)
        event = await self._get_event(tenant, event_id)
        if event.status != EventStatus.DRAFT:
            raise BusinessRuleError("Only draft events can be published")
        if not await self.sessions.list_for_event(event.id):
            raise BusinessRuleError("Event must have at least one session to publish")

        event.status = EventStatus.PUBLISHED
        event = await self.events.update(event)
        logger.info(f"Event {event.id} published")
        return ActionResponse(message="Event published successfully", data=EventRead.model_validate(event))

    async def cancel_event(self, tenant: TenantContext, event_id: str) -> ActionResponse[EventRead]:
        tenant.rate_limit("cancel_event", RateLimitTier.BULK)
        event = await self._get_event(tenant, event_id)
        if event.status == EventStatus.CANCELLED:
            raise BusinessRuleError("Event is already cancelled")
        if event.status == EventStatus.COMPLETED:
            raise BusinessRuleError("Cannot cancel a completed event")

        event.status = EventStatus.CANCELLED
        event = await self.events.update(event)
        logger.info(f"Event {event.id} cancelled")
        return ActionResponse(message="Event cancelled successfully", data=EventRead.model_validate(event))

    async def delete_event(self, tenant: TenantContext, event_id: str) -> ActionResponse[None]:
        """
        Delete a draft or cancelled event.

        Events that ever had an assignment are archived so volunteer history
        survives.
        """
        tenant.rate_limit("delete_event", RateLimitTier.BULK)
        event = await self._get_event(tenant, event_id)
        if event.status not in DELETABLE_STATUSES:
            raise BusinessRuleError("Only draft or cancelled events can be deleted. Consider cancelling first.")

        if await self.assignments.count_for_event(event.id) > 0:
            event.status = EventStatus.ARCHIVED
            await self.events.update(event)
            logger.info(f"Event {event.id} archived instead of deleted")
            return ActionResponse(message="Event archived (has volunteer history)")

        await self.resources.delete_for_event(event.id)
        await self.sessions.delete_for_event(event.id)
        await self.session.delete(event)
        await self.session.commit()
        logger.info(f"Event {event_id} deleted")
        return ActionResponse(message="Event deleted successfully")

    async def list_events(
        self,
        tenant: TenantContext,
        status: Optional[EventStatus] = None,
        event_type: Optional[EventType] = None,
    ) -> ActionResponse[List[EventRead]]:
        events = await self.events.list_for_organization(
            tenant.organization_id, location_filter(tenant.scope), status=status, event_type=event_type
        )
        return ActionResponse(data=[EventRead.model_validate(event) for event in events])

    async def get_event(self, tenant: TenantContext, event_id: str) -> ActionResponse[EventDetail]:
        event = await self._get_event(tenant, event_id)
        return ActionResponse(data=await self._detail(event))

    async def _detail(self, event: VolunteerEvent) -> EventDetail:
        sessions = await self.sessions.list_for_event(event.id)
        resources = await self.resources.list_for_event(event.id)
        assignments = await self.assignments.list_for_event(event.id)
        return EventDetail(
            event=EventRead.model_validate(event),
            sessions=[EventSessionRead.model_validate(s) for s in sessions],
            resources=[EventResourceRead.model_validate(r) for r in resources],
            assignments=[
                EventAssignmentRead(
                    id=assignment.id,
                    session_id=assignment.session_id,
                    volunteer_id=assignment.volunteer_id,
                    volunteer_name=member.name,
                    status=assignment.status,
                    invited_at=assignment.invited_at,
                    responded_at=assignment.responded_at,
                )
                for assignment, _, member in assignments
            ],
        )

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    async def _get_resource(self, tenant: TenantContext, resource_id: str) -> EventResource:
        resource = await self.resources.get_in_organization(resource_id, tenant.organization_id)
        if resource is None:
            raise NotFoundError("Resource not found")
        await self._get_event(tenant, resource.event_id)
        return resource

    async def add_resource(
        self, tenant: TenantContext, event_id: str, payload: ResourceCreate
    ) -> ActionResponse[EventResourceRead]:
        tenant.rate_limit("event_resource", RateLimitTier.ASSIGNMENT)
        event = await self._get_event(tenant, event_id)
        resource = await self.resources.create(
            EventResource(
                event_id=event.id,
                organization_id=tenant.organization_id,
                name=payload.name.strip(),
                quantity=payload.quantity,
                notes=payload.notes,
                sort_order=await self.resources.max_sort_order(event.id) + 1,
            )
        )
        return ActionResponse(message="Resource added", data=EventResourceRead.model_validate(resource))

    async def add_common_resources(
        self, tenant: TenantContext, event_id: str, payload: CommonResourcesCreate
    ) -> ActionResponse[List[EventResourceRead]]:
        """Add the named resources, skipping names the event already lists."""
        tenant.rate_limit("event_resource", RateLimitTier.ASSIGNMENT)
        event = await self._get_event(tenant, event_id)
        existing = {r.name.strip().lower() for r in await self.resources.list_for_event(event.id)}
        next_order = await self.resources.max_sort_order(event.id) + 1

        added: List[EventResource] = []
        for name in payload.names:
            name = name.strip()
            if not name or name.lower() in existing:
                continue
            existing.add(name.lower())
            resource = EventResource(
                event_id=event.id,
                organization_id=tenant.organization_id,
                name=name[:100],
                sort_order=next_order + len(added),
            )
            self.session.add(resource)
            added.append(resource)
        await self.session.commit()
        return ActionResponse(
            message=f"Added {len(added)} resources",
            data=[EventResourceRead.model_validate(r) for r in added],
        )

    async def update_resource(
        self, tenant: TenantContext, resource_id: str, payload: ResourceUpdate
    ) -> ActionResponse[EventResourceRead]:
        tenant.rate_limit("event_resource", RateLimitTier.ASSIGNMENT)
        resource = await self._get_resource(tenant, resource_id)
        values = payload.model_dump(exclude_unset=True)
        for field, value in values.items():
            setattr(resource, field, value)
        resource = await self.resources.update(resource)

        message = "Resource updated"
        if set(values) == {"status"}:
            message = f"Status updated to {resource.status.value}"
        return ActionResponse(message=message, data=EventResourceRead.model_validate(resource))

    async def delete_resource(self, tenant: TenantContext, resource_id: str) -> ActionResponse[None]:
        tenant.rate_limit("event_resource", RateLimitTier.ASSIGNMENT)
        resource = await self._get_resource(tenant, resource_id)
        await self.resources.delete(resource.id)
        return ActionResponse(message="Resource deleted")

    # ------------------------------------------------------------------
    # Assignments
    # ------------------------------------------------------------------

    async def assign_volunteer(
        self, tenant: TenantContext, session_id: str, volunteer_id: str
    ) -> ActionResponse[EventAssignmentRead]:
        tenant.rate_limit("assign_volunteer", RateLimitTier.ASSIGNMENT)
        event_session, event = await self._open_session(tenant, session_id)
        rows = await self.volunteers.list_active_by_ids(tenant.organization_id, [volunteer_id])
        if not rows:
            raise NotFoundError("Volunteer not found or not active")
        volunteer, member = rows[0]
        if await self.assignments.find(session_id, volunteer_id) is not None:
            raise BusinessRuleError("Volunteer is already assigned to this session")

        assignment = EventAssignment(
            organization_id=tenant.organization_id,
            event_id=event.id,
            session_id=event_session.id,
            volunteer_id=volunteer.id,
            status=AssignmentStatus.ASSIGNED,
            assigned_by=tenant.user_id,
        )
        self.session.add(assignment)
        await self.sessions.adjust_slots(event_session.id, 1)
        await self.session.commit()

        return ActionResponse(
            message=f"{member.name or 'Volunteer'} assigned successfully",
            data=EventAssignmentRead(
                id=assignment.id,
                session_id=assignment.session_id,
                volunteer_id=volunteer.id,
                volunteer_name=member.name,
                status=assignment.status,
            ),
        )

    async def remove_assignment(self, tenant: TenantContext, assignment_id: str) -> ActionResponse[None]:
        """Remove an assignment and release its slot."""
        tenant.rate_limit("remove_assignment", RateLimitTier.ASSIGNMENT)
        assignment = await self.assignments.get_in_organization(assignment_id, tenant.organization_id)
        if assignment is None:
            raise NotFoundError("Assignment not found")
        await self._get_event(tenant, assignment.event_id)
        member_name = "Volunteer"
        volunteer = await self.volunteers.get_by_id(assignment.volunteer_id)
        if volunteer is not None:
            member = await self.session.get(ChurchMember, volunteer.church_member_id)
            member_name = member.name if member else member_name

        # A declined invitation already gave its slot back
        holds_slot = assignment.status != AssignmentStatus.DECLINED
        session_id = assignment.session_id
        await self.session.delete(assignment)
        if holds_slot:
            await self.sessions.adjust_slots(session_id, -1)
        await self.session.commit()
        return ActionResponse(message=f"{member_name} removed from session")

    async def bulk_assign(
        self, tenant: TenantContext, session_id: str, volunteer_ids: List[str]
    ) -> ActionResponse[BulkAssignResult]:
        tenant.rate_limit("bulk_assign", RateLimitTier.ASSIGNMENT)
        ids = _check_batch_size(volunteer_ids, "assigned")
        event_session, event = await self._open_session(tenant, session_id)

        already = await self.assignments.assigned_volunteer_ids(session_id)
        candidates = [volunteer_id for volunteer_id in ids if volunteer_id not in already]
        if not candidates:
            raise BusinessRuleError("All selected volunteers are already assigned")
        rows = await self.volunteers.list_active_by_ids(tenant.organization_id, candidates)
        if not rows:
            raise BusinessRuleError("No valid volunteers to assign")

        for volunteer, _ in rows:
            self.session.add(
                EventAssignment(
                    organization_id=tenant.organization_id,
                    event_id=event.id,
                    session_id=event_session.id,
                    volunteer_id=volunteer.id,
                    status=AssignmentStatus.ASSIGNED,
                    assigned_by=tenant.user_id,
                )
            )
        await self.sessions.adjust_slots(event_session.id, len(rows))
        await self.session.commit()

        result = BulkAssignResult(
            assigned=len(rows),
            skipped=len(ids) - len(candidates),
            failed=len(candidates) - len(rows),
        )
        message = f"{result.assigned} volunteer(s) assigned"
        if result.skipped:
            message += f", {result.skipped} skipped"
        return ActionResponse(message=message, data=result)

    async def invite_volunteers(
        self, tenant: TenantContext, session_id: str, volunteer_ids: List[str]
    ) -> ActionResponse[InviteResult]:
        """
        Invite volunteers to a session by SMS.

        Each invitation is committed on its own so one failing volunteer does
        not undo the others. Volunteers without a phone number, or whose
        contact cannot be synced to the CRM, are invited without an SMS.

        Raises:
            IntegrationNotConfiguredError: The organization has no CRM credentials.
        """
        tenant.rate_limit("invite_volunteers", RateLimitTier.ASSIGNMENT)
        ids = _check_batch_size(volunteer_ids, "invited")
        if not await self.ghl.is_configured(tenant.organization_id):
            raise IntegrationNotConfiguredError(SMS_NOT_CONFIGURED)
        event_session, event = await self._open_session(tenant, session_id)

        already = await self.assignments.assigned_volunteer_ids(session_id)
        candidates = [volunteer_id for volunteer_id in ids if volunteer_id not in already]
        if not candidates:
            raise BusinessRuleError("All selected volunteers are already assigned or invited")
        rows = await self.volunteers.list_active_by_ids(tenant.organization_id, candidates)
        if not rows:
            raise BusinessRuleError("No valid volunteers to invite")

        event_id = event.id
        event_name = event.name
        event_date = format_event_date(event_session.session_date, event_session.start_time)
        result = InviteResult()
        invitees = []
        for volunteer, member in rows:
            # Detached so a rollback for one invitee leaves the others readable
            self.session.expunge(member)
            invitees.append((volunteer.id, member))
        async with await self.ghl.client(tenant.organization_id) as client:
            for volunteer_id, member in invitees:
                phone = member.phone
                invited = False
                try:
                    self.session.add(
                        EventAssignment(
                            organization_id=tenant.organization_id,
                            event_id=event_id,
                            session_id=session_id,
                            volunteer_id=volunteer_id,
                            status=AssignmentStatus.INVITED,
                            assigned_by=tenant.user_id,
                            invited_at=utc_now(),
                        )
                    )
                    await self.sessions.adjust_slots(session_id, 1)
                    await self.session.commit()
                    invited = True
                    result.invited += 1

                    if not phone:
                        result.sms_skipped += 1
                        continue
                    synced = await self.ghl.sync_contact(tenant.organization_id, member, client=client)
                    if not synced.success or not synced.contact_id:
                        result.sms_skipped += 1
                        continue
                    sms = await client.send_sms(
                        synced.contact_id, event_invitation(first_name_of(member.name), event_name, event_date)
                    )
                    log_notification("sms", sms.status.value, tenant.organization_id, template="event_invitation")
                except Exception:
                    await self.session.rollback()
                    if invited:
                        logger.warning(f"Invitation SMS to volunteer {volunteer_id} failed", exc_info=True)
                        result.sms_failed += 1
                    else:
                        logger.warning(
                            f"Failed to invite volunteer {volunteer_id} to session {session_id}", exc_info=True
                        )
                        result.failed += 1

        message = f"{result.invited} volunteer(s) invited"
        if result.sms_skipped:
            message += f" ({result.sms_skipped} without phone)"
        if result.sms_failed:
            message += f", {result.sms_failed} SMS failed"
        if result.failed:
            message += f", {result.failed} failed"
        return ActionResponse(message=message, data=result)

    # ------------------------------------------------------------------
    # Inbound SMS
    # ------------------------------------------------------------------

    async def process_inbound_sms(self, payload: Mapping[str, Any]) -> ActionResponse[InboundSmsResult]:
        """
        Apply a volunteer's YES/NO reply to their most recent invitation.

        Replies that cannot be matched to a member, a volunteer or a pending
        invitation are acknowledged without changes.

        Raises:
            BusinessRuleError: The payload has no ``contactId``.
        """
        contact_id = payload.get("contactId")
        if not contact_id:
            raise BusinessRuleError("Missing contactId")
        message = extract_message_from_payload(payload)
        if not message:
            return ActionResponse(message="Empty message ignored", data=InboundSmsResult(action="ignored"))

        reply = parse_response_fuzzy(message)
        if reply is None:
            logger.info(f"Unrecognized SMS reply from contact {contact_id}")
            return ActionResponse(
                message="Unrecognized response, no action taken", data=InboundSmsResult(action="ignored")
            )

        link = await MemberIntegrationRepository(self.session).find_by_external_id(PROVIDER, str(contact_id))
        if link is None:
            return ActionResponse(message="Contact not found in system", data=InboundSmsResult(action="no_member"))
        volunteer = await self.volunteers.get_by_member(link.church_member_id)
        if volunteer is None:
            return ActionResponse(message="Contact is not a volunteer", data=InboundSmsResult(action="not_volunteer"))
        assignment = await self.assignments.latest_invitation(volunteer.id)
        if assignment is None:
            return ActionResponse(
                message="No pending invitation found",
                data=InboundSmsResult(action="no_invite", volunteer_id=volunteer.id),
            )

        assignment.responded_at = utc_now()
        if reply == "NO":
            assignment.status = AssignmentStatus.DECLINED
            self.session.add(assignment)
            await self.sessions.adjust_slots(assignment.session_id, -1)
            await self.session.commit()
            logger.info(f"Volunteer {volunteer.id} declined assignment {assignment.id}")
            return ActionResponse(
                message="Response processed: DECLINED",
                data=InboundSmsResult(
                    action="declined",
                    volunteer_id=volunteer.id,
                    assignment_id=assignment.id,
                    new_status=AssignmentStatus.DECLINED,
                ),
            )

        assignment.status = AssignmentStatus.CONFIRMED
        self.session.add(assignment)
        await self.session.commit()
        logger.info(f"Volunteer {volunteer.id} confirmed assignment {assignment.id}")
        data = InboundSmsResult(
            action="confirmed",
            volunteer_id=volunteer.id,
            assignment_id=assignment.id,
            new_status=AssignmentStatus.CONFIRMED,
        )
        await self._send_confirmation(assignment, str(contact_id))
        return ActionResponse(message="Response processed: CONFIRMED", data=data)

    async def _send_confirmation(self, assignment: EventAssignment, contact_id: str) -> None:
        organization_id = assignment.organization_id
        assignment_id = assignment.id
        try:
            event_session = await self.sessions.get_by_id(assignment.session_id)
            event = await self.events.get_by_id(assignment.event_id)
            volunteer = await self.volunteers.get_by_id(assignment.volunteer_id)
            member = await self.session.get(ChurchMember, volunteer.church_member_id) if volunteer else None
            text = render_confirmation_message(
                event.confirmation_message,
                first_name_of(member.name if member else None),
                event.name,
                format_event_date(event_session.session_date, event_session.start_time),
                event.leader_name,
            )
            async with await self.ghl.client(organization_id) as client:
                sms = await client.send_sms(contact_id, text)
            log_notification("sms", sms.status.value, organization_id, template="event_confirmation")
        except Exception:
            await self.session.rollback()
            logger.warning(f"Failed to send confirmation SMS for assignment {assignment_id}", exc_info=True)

