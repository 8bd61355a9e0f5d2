"""
Volunteer event endpoints.

Events hold dated sessions that volunteers are assigned or invited to by
SMS, plus a checklist of resources. Only draft events can change their
sessions; published events accept assignments and invitations.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, status

from churchsync.core.models.domain.enums import EventStatus, EventType
from churchsync.core.models.io.common import ActionResponse, ErrorResponse
from churchsync.core.models.io.events import (
    AvailableVolunteer,
    BulkAssignResult,
    CommonResourcesCreate,
    EventAssignmentRead,
    EventCreate,
    EventDetail,
    EventRead,
    EventResourceRead,
    EventUpdate,
    InviteResult,
    ResourceCreate,
    ResourceUpdate,
    VolunteerAssign,
    VolunteerBulkAssign,
)
from churchsync.server.services.deps import SessionDep, TenantDep
from churchsync.server.services.events import EventService
from churchsync.server.services.volunteers import VolunteerService

router = APIRouter(tags=["events"])

EVENT_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Event not found"}}
SESSION_CLOSED = {404: {"model": ErrorResponse, "description": "Session not found or event not active"}}


@router.get(
    "",
    response_model=ActionResponse[List[EventRead]],
    summary="List Events",
)
async def list_events(
    tenant: TenantDep,
    session: SessionDep,
    status: Optional[EventStatus] = None,
    event_type: Optional[EventType] = None,
) -> ActionResponse[List[EventRead]]:
    return await EventService(session).list_events(tenant, status=status, event_type=event_type)


@router.post(
    "",
    response_model=ActionResponse[EventDetail],
    status_code=status.HTTP_201_CREATED,
    summary="Create Event",
    description="Create a draft event with its sessions.",
    response_description="The event with its sessions.",
    responses={404: {"model": ErrorResponse, "description": "Location not found or inactive"}},
)
async def create_event(payload: EventCreate, tenant: TenantDep, session: SessionDep) -> ActionResponse[EventDetail]:
    """
    Create an event.

    - **name**: Event name (3-100 characters).
    - **event_type**: SUNDAY_SERVICE, SPECIAL_EVENT, OUTREACH and so on.
    - **location_id**: Campus; defaults to the caller's campus.
    - **category**: Ministry the event draws volunteers from.
    - **volunteer_pool_scope**: Offer volunteers from the whole organization or only the event's campus.
    - **requires_background_check**: Only offer volunteers with a cleared check.
    - **sessions**: Dated time slots with the number of volunteers needed.
    """
    return await EventService(session).create_event(tenant, payload)


@router.get(
    "/{event_id}",
    response_model=ActionResponse[EventDetail],
    summary="Get Event",
    responses=EVENT_NOT_FOUND,
)
async def get_event(event_id: str, tenant: TenantDep, session: SessionDep) -> ActionResponse[EventDetail]:
    return await EventService(session).get_event(tenant, event_id)


@router.patch(
    "/{event_id}",
    response_model=ActionResponse[EventDetail],
    summary="Update Event",
    description="Update event fields. Sessions can only be replaced while the event is a draft.",
    responses={400: {"model": ErrorResponse, "description": "Sessions changed on a non-draft event"}, **EVENT_NOT_FOUND},
)
async def update_event(
    event_id: str, payload: EventUpdate, tenant: TenantDep, session: SessionDep
) -> ActionResponse[EventDetail]:
    return await EventService(session).update_event(tenant, event_id, payload)


@router.post(
    "/{event_id}/publish",
    response_model=ActionResponse[EventRead],
    summary="Publish Event",
    responses={400: {"model": ErrorResponse, "description": "Not a draft or no sessions"}, **EVENT_NOT_FOUND},
)
async def publish_event(event_id: str, tenant: TenantDep, session: SessionDep) -> ActionResponse[EventRead]:
    return await EventService(session).publish_event(tenant, event_id)


@router.post(
    "/{event_id}/cancel",
    response_model=ActionResponse[EventRead],
    summary="Cancel Event",
    responses=EVENT_NOT_FOUND,
)
async def cancel_event(event_id: str, tenant: TenantDep, session: SessionDep) -> ActionResponse[EventRead]:
    return await EventService(session).cancel_event(tenant, event_id)


@router.delete(
    "/{event_id}",
    response_model=ActionResponse[None],
    summary="Delete Event",
    description="Delete a draft or cancelled event. Events with volunteer history are archived instead.",
    responses=EVENT_NOT_FOUND,
)
async def delete_event(event_id: str, tenant: TenantDep, session: SessionDep) -> ActionResponse[None]:
    return await EventService(session).delete_event(tenant, event_id)


# ----------------------------------------------------------------------
# Resources
# ----------------------------------------------------------------------


@router.post(
    "/{event_id}/resources",
    response_model=ActionResponse[EventResourceRead],
    status_code=status.HTTP_201_CREATED,
    summary="Add Resource",
    responses=EVENT_NOT_FOUND,
)
async def add_resource(
    event_id: str, payload: ResourceCreate, tenant: TenantDep, session: SessionDep
) -> ActionResponse[EventResourceRead]:
    return await EventService(session).add_resource(tenant, event_id, payload)


@router.post(
    "/{event_id}/resources/common",
    response_model=ActionResponse[List[EventResourceRead]],
    status_code=status.HTTP_201_CREATED,
    summary="Add Common Resources",
    description="Add several named resources at once, skipping names the event already has.",
    responses=EVENT_NOT_FOUND,
)
async def add_common_resources(
    event_id: str, payload: CommonResourcesCreate, tenant: TenantDep, session: SessionDep
) -> ActionResponse[List[EventResourceRead]]:
    return await EventService(session).add_common_resources(tenant, event_id, payload)


@router.patch(
    "/resources/{resource_id}",
    response_model=ActionResponse[EventResourceRead],
    summary="Update Resource",
    responses={404: {"model": ErrorResponse, "description": "Resource not found"}},
)
async def update_resource(
    resource_id: str, payload: ResourceUpdate, tenant: TenantDep, session: SessionDep
) -> ActionResponse[EventResourceRead]:
    return await EventService(session).update_resource(tenant, resource_id, payload)


@router.delete(
    "/resources/{resource_id}",
    response_model=ActionResponse[None],
    summary="Delete Resource",
    responses={404: {"model": ErrorResponse, "description": "Resource not found"}},
)
async def delete_resource(resource_id: str, tenant: TenantDep, session: SessionDep) -> ActionResponse[None]:
    return await EventService(session).delete_resource(tenant, resource_id)


# ----------------------------------------------------------------------
# Assignments
# ----------------------------------------------------------------------


@router.get(
    "/sessions/{session_id}/available-volunteers",
    response_model=ActionResponse[List[AvailableVolunteer]],
    summary="Available Volunteers",
    description=(
        "Active volunteers who can be offered for a session, honoring the event's pool scope, "
        "ministry and background check requirement. Least recently served first."
    ),
    responses={404: {"model": ErrorResponse, "description": "Session not found"}},
)
async def available_volunteers(
    session_id: str, tenant: TenantDep, session: SessionDep
) -> ActionResponse[List[AvailableVolunteer]]:
    return await VolunteerService(session).available_volunteers_for_session(tenant, session_id)


@router.post(
    "/sessions/{session_id}/assignments",
    response_model=ActionResponse[EventAssignmentRead],
    status_code=status.HTTP_201_CREATED,
    summary="Assign Volunteer",
    responses={
        400: {"model": ErrorResponse, "description": "Volunteer already assigned"},
        **SESSION_CLOSED,
    },
)
async def assign_volunteer(
    session_id: str, payload: VolunteerAssign, tenant: TenantDep, session: SessionDep
) -> ActionResponse[EventAssignmentRead]:
    return await EventService(session).assign_volunteer(tenant, session_id, payload.volunteer_id)


@router.post(
    "/sessions/{session_id}/assignments/bulk",
    response_model=ActionResponse[BulkAssignResult],
    summary="Bulk Assign Volunteers",
    description="Assign up to 20 volunteers at once. Volunteers already on the session are skipped.",
    responses=SESSION_CLOSED,
)
async def bulk_assign(
    session_id: str, payload: VolunteerBulkAssign, tenant: TenantDep, session: SessionDep
) -> ActionResponse[BulkAssignResult]:
    return await EventService(session).bulk_assign(tenant, session_id, payload.volunteer_ids)


@router.post(
    "/sessions/{session_id}/invitations",
    response_model=ActionResponse[InviteResult],
    summary="Invite Volunteers",
    description="Text up to 20 volunteers an invitation they can answer YES or NO.",
    response_description="Counts of invited volunteers, volunteers without a phone and failed sends.",
    responses={
        400: {"model": ErrorResponse, "description": "SMS is not configured"},
        **SESSION_CLOSED,
    },
)
async def invite_volunteers(
    session_id: str, payload: VolunteerBulkAssign, tenant: TenantDep, session: SessionDep
) -> ActionResponse[InviteResult]:
    """
    Invite volunteers by SMS.

    Each volunteer gets an INVITED assignment. Volunteers without a phone
    number are still invited but no text is sent.

    - **volunteer_ids**: Volunteers to invite (1-20).
    """
    return await EventService(session).invite_volunteers(tenant, session_id, payload.volunteer_ids)


@router.delete(
    "/assignments/{assignment_id}",
    response_model=ActionResponse[None],
    summary="Remove Assignment",
    responses={404: {"model": ErrorResponse, "description": "Assignment not found"}},
)
async def remove_assignment(assignment_id: str, tenant: TenantDep, session: SessionDep) -> ActionResponse[None]:
    return await EventService(session).remove_assignment(tenant, assignment_id)
