"""
Prayer request endpoints.

Staff see public requests plus the ones assigned to them. Administrators see
every request in their data scope and can group requests into batches for a
prayer team member.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, status

from churchsync.core.database.repositories.prayer_requests import PrayerQuery
from churchsync.core.models.domain.enums import PrayerStatus
from churchsync.core.models.io.common import ActionResponse, ErrorResponse, Page
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
from churchsync.server.services.deps import SessionDep, TenantDep
from churchsync.server.services.prayer_requests import DEFAULT_PAGE_SIZE, PrayerRequestService

router = APIRouter(tags=["prayer-requests"])

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Prayer request not found"}}


@router.get(
    "/stats",
    response_model=ActionResponse[PrayerStats],
    summary="Prayer Statistics",
    description="Counts by status and category over the requests visible to the caller.",
)
async def prayer_request_stats(tenant: TenantDep, session: SessionDep) -> ActionResponse[PrayerStats]:
    return await PrayerRequestService(session).prayer_request_stats(tenant)


# ----------------------------------------------------------------------
# Batches
# ----------------------------------------------------------------------


@router.get(
    "/batches",
    response_model=ActionResponse[List[PrayerBatchRead]],
    summary="List Prayer Batches",
    description="Administrators see every batch; team members see the batches assigned to them.",
)
async def list_prayer_batches(tenant: TenantDep, session: SessionDep) -> ActionResponse[List[PrayerBatchRead]]:
    return await PrayerRequestService(session).list_prayer_batches(tenant)


@router.post(
    "/batches",
    response_model=ActionResponse[PrayerBatchRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create Prayer Batch",
    description="Group prayer requests into a batch assigned to one team member. Administrators only.",
    responses={
        400: {"model": ErrorResponse, "description": "No requests selected or some were not found"},
        403: {"model": ErrorResponse, "description": "Caller is not an administrator"},
    },
)
async def create_batch_and_assign(
    payload: PrayerBatchAssign, tenant: TenantDep, session: SessionDep
) -> ActionResponse[PrayerBatchRead]:
    """
    Create a prayer batch.

    - **prayer_request_ids**: Requests to include.
    - **assigned_to_id**: Team member who prays over the batch.
    """
    return await PrayerRequestService(session).create_batch_and_assign(tenant, payload)


@router.get(
    "/batches/{batch_id}",
    response_model=ActionResponse[PrayerBatchDetail],
    summary="Get Prayer Batch",
    description="The batch with its requests grouped by category.",
)
async def get_prayer_batch(batch_id: str, tenant: TenantDep, session: SessionDep) -> ActionResponse[PrayerBatchDetail]:
    return await PrayerRequestService(session).get_prayer_batch(tenant, batch_id)


@router.post(
    "/batches/{batch_id}/complete",
    response_model=ActionResponse[PrayerBatchRead],
    summary="Complete Prayer Batch",
)
async def complete_prayer_batch(batch_id: str, tenant: TenantDep, session: SessionDep) -> ActionResponse[PrayerBatchRead]:
    return await PrayerRequestService(session).complete_prayer_batch(tenant, batch_id)


# ----------------------------------------------------------------------
# Requests
# ----------------------------------------------------------------------


@router.get(
    "",
    response_model=ActionResponse[Page[PrayerRequestRead]],
    summary="List Prayer Requests",
    description="Paginated prayer requests, newest first.",
    responses={403: {"model": ErrorResponse, "description": "Caller cannot access the requested location"}},
)
async def list_prayer_requests(
    tenant: TenantDep,
    session: SessionDep,
    status: Optional[PrayerStatus] = None,
    category: Optional[str] = None,
    location_id: Optional[str] = None,
    assigned_to_id: Optional[str] = None,
    is_private: Optional[bool] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    search: Optional[str] = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
) -> ActionResponse[Page[PrayerRequestRead]]:
    query = PrayerQuery(
        status=status,
        category=category,
        location_id=location_id,
        assigned_to_id=assigned_to_id,
        is_private=is_private,
        date_from=date_from,
        date_to=date_to,
        search=search,
    )
    return await PrayerRequestService(session).list_prayer_requests(tenant, query, page=page, limit=limit)


@router.post(
    "",
    response_model=ActionResponse[PrayerRequestRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create Prayer Request",
    description="Record a prayer request entered by staff.",
)
async def create_prayer_request(
    payload: PrayerRequestCreate, tenant: TenantDep, session: SessionDep
) -> ActionResponse[PrayerRequestRead]:
    """
    Create a prayer request.

    Category, privacy and urgency are detected from the text when omitted.

    - **request**: The prayer request text.
    - **category** / **is_private** / **is_urgent**: Optional overrides.
    - **location_id**: Campus; defaults to the caller's campus.
    - **submitted_by** / **submitter_email** / **submitter_phone**: Who asked for prayer.
    """
    return await PrayerRequestService(session).create_prayer_request(tenant, payload)


@router.get(
    "/{prayer_id}",
    response_model=ActionResponse[PrayerRequestRead],
    summary="Get Prayer Request",
    responses=NOT_FOUND,
)
async def get_prayer_request(prayer_id: str, tenant: TenantDep, session: SessionDep) -> ActionResponse[PrayerRequestRead]:
    return await PrayerRequestService(session).get_prayer_request(tenant, prayer_id)


@router.patch(
    "/{prayer_id}",
    response_model=ActionResponse[PrayerRequestRead],
    summary="Update Prayer Request",
    description="Edit a prayer request. Administrators only.",
    responses=NOT_FOUND,
)
async def update_prayer_request(
    prayer_id: str, payload: PrayerRequestUpdate, tenant: TenantDep, session: SessionDep
) -> ActionResponse[PrayerRequestRead]:
    return await PrayerRequestService(session).update_prayer_request(tenant, prayer_id, payload)


@router.delete(
    "/{prayer_id}",
    response_model=ActionResponse[None],
    summary="Delete Prayer Request",
    responses=NOT_FOUND,
)
async def delete_prayer_request(prayer_id: str, tenant: TenantDep, session: SessionDep) -> ActionResponse[None]:
    return await PrayerRequestService(session).delete_prayer_request(tenant, prayer_id)


@router.post(
    "/{prayer_id}/assign",
    response_model=ActionResponse[PrayerRequestRead],
    summary="Assign Prayer Request",
    responses=NOT_FOUND,
)
async def assign_prayer(
    prayer_id: str, payload: PrayerAssign, tenant: TenantDep, session: SessionDep
) -> ActionResponse[PrayerRequestRead]:
    return await PrayerRequestService(session).assign_prayer(tenant, prayer_id, payload)


@router.post(
    "/{prayer_id}/answer",
    response_model=ActionResponse[PrayerRequestRead],
    summary="Mark Answered",
    responses=NOT_FOUND,
)
async def mark_answered(
    prayer_id: str, payload: PrayerMarkAnswered, tenant: TenantDep, session: SessionDep
) -> ActionResponse[PrayerRequestRead]:
    return await PrayerRequestService(session).mark_answered(tenant, prayer_id, payload)


@router.post(
    "/{prayer_id}/privacy",
    response_model=ActionResponse[PrayerRequestRead],
    summary="Set Privacy",
    responses=NOT_FOUND,
)
async def toggle_privacy(
    prayer_id: str, payload: PrayerPrivacyToggle, tenant: TenantDep, session: SessionDep
) -> ActionResponse[PrayerRequestRead]:
    return await PrayerRequestService(session).toggle_privacy(tenant, prayer_id, payload)
