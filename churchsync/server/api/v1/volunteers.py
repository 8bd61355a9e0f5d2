"""
Volunteer endpoints.

Volunteers are church members enrolled in one or more ministries. Updates
use optimistic locking: clients send the ``version`` they last read and get
a 409 with ``should_refresh`` when someone else changed the record first.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter

from churchsync.core.models.domain.enums import VolunteerCategoryType, VolunteerStatus
from churchsync.core.models.io.common import ActionResponse, ErrorResponse
from churchsync.core.models.io.volunteers import (
    BackgroundCheckRequested,
    BackgroundCheckStatusUpdate,
    VolunteerDeactivate,
    VolunteerProcess,
    VolunteerRead,
    VolunteerUpdate,
)
from churchsync.server.services.deps import SessionDep, TenantDep
from churchsync.server.services.volunteers import VolunteerService

router = APIRouter(tags=["volunteers"])


@router.get(
    "",
    response_model=ActionResponse[List[VolunteerRead]],
    summary="List Volunteers",
    description="List volunteers inside the caller's data scope.",
)
async def list_volunteers(
    tenant: TenantDep,
    session: SessionDep,
    status: Optional[VolunteerStatus] = None,
    category: Optional[VolunteerCategoryType] = None,
    search: Optional[str] = None,
) -> ActionResponse[List[VolunteerRead]]:
    """
    List volunteers.

    - **status**: Only volunteers in this status.
    - **category**: Only volunteers serving in this ministry.
    - **search**: Case-insensitive match on the member's name or email.
    """
    return await VolunteerService(session).list_volunteers(tenant, status=status, category=category, search=search)


@router.get(
    "/{volunteer_id}",
    response_model=ActionResponse[VolunteerRead],
    summary="Get Volunteer",
    responses={404: {"model": ErrorResponse, "description": "Volunteer not found"}},
)
async def get_volunteer(volunteer_id: str, tenant: TenantDep, session: SessionDep) -> ActionResponse[VolunteerRead]:
    return await VolunteerService(session).get_volunteer(tenant, volunteer_id)


@router.patch(
    "/{volunteer_id}",
    response_model=ActionResponse[VolunteerRead],
    summary="Update Volunteer",
    description="Update volunteer details. Fails with 409 when the record changed since it was read.",
    responses={
        404: {"model": ErrorResponse, "description": "Volunteer not found"},
        409: {"model": ErrorResponse, "description": "Stale version, reload and retry"},
    },
)
async def update_volunteer(
    volunteer_id: str, payload: VolunteerUpdate, tenant: TenantDep, session: SessionDep
) -> ActionResponse[VolunteerRead]:
    """
    Update a volunteer.

    - **version**: The version returned by the last read.
    - **location_id**: Move the volunteer to another active campus.
    - **notes** / **start_date** / **last_served_date**: Plain field updates.
    """
    return await VolunteerService(session).update_volunteer(tenant, volunteer_id, payload)


@router.post(
    "/{volunteer_id}/process",
    response_model=ActionResponse[VolunteerRead],
    summary="Process Volunteer",
    description="Approve a pending volunteer, set their ministries and activate them.",
    responses={400: {"model": ErrorResponse, "description": "No categories or volunteer not pending"}},
)
async def process_volunteer(
    volunteer_id: str, payload: VolunteerProcess, tenant: TenantDep, session: SessionDep
) -> ActionResponse[VolunteerRead]:
    return await VolunteerService(session).process_volunteer(tenant, volunteer_id, payload)


@router.post(
    "/{volunteer_id}/deactivate",
    response_model=ActionResponse[VolunteerRead],
    summary="Deactivate Volunteer",
)
async def deactivate_volunteer(
    volunteer_id: str, payload: VolunteerDeactivate, tenant: TenantDep, session: SessionDep
) -> ActionResponse[VolunteerRead]:
    return await VolunteerService(session).deactivate_volunteer(tenant, volunteer_id, payload)


@router.post(
    "/{volunteer_id}/reactivate",
    response_model=ActionResponse[VolunteerRead],
    summary="Reactivate Volunteer",
)
async def reactivate_volunteer(volunteer_id: str, tenant: TenantDep, session: SessionDep) -> ActionResponse[VolunteerRead]:
    return await VolunteerService(session).reactivate_volunteer(tenant, volunteer_id)


@router.post(
    "/{volunteer_id}/background-check/request",
    response_model=ActionResponse[BackgroundCheckRequested],
    summary="Request Background Check",
    description="Email the volunteer the provider application link and a confirmation link. Administrators only.",
    responses={
        400: {"model": ErrorResponse, "description": "No email address or provider not configured"},
        403: {"model": ErrorResponse, "description": "Caller is not an administrator"},
    },
)
async def request_background_check(
    volunteer_id: str, tenant: TenantDep, session: SessionDep
) -> ActionResponse[BackgroundCheckRequested]:
    return await VolunteerService(session).request_background_check(tenant, volunteer_id)


@router.put(
    "/{volunteer_id}/background-check/status",
    response_model=ActionResponse[VolunteerRead],
    summary="Update Background Check Status",
    description="Record the provider's result. A cleared check gets an expiry date. Administrators only.",
)
async def update_background_check_status(
    volunteer_id: str, payload: BackgroundCheckStatusUpdate, tenant: TenantDep, session: SessionDep
) -> ActionResponse[VolunteerRead]:
    return await VolunteerService(session).update_background_check_status(tenant, volunteer_id, payload)
