"""
Organization endpoints.

Read the current organization with its campuses, manage campuses, and list
the dashboard users of the organization.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, status

from churchsync.core.models.io.common import ActionResponse, ErrorResponse
from churchsync.core.models.io.organizations import LocationCreate, LocationRead, OrganizationDetail, UserRead
from churchsync.server.services.deps import SessionDep, TenantDep
from churchsync.server.services.organizations import OrganizationService

router = APIRouter(tags=["organizations"])


@router.get(
    "",
    response_model=ActionResponse[OrganizationDetail],
    summary="Get Organization",
    description="Retrieve the organization addressed by the URL slug together with its active locations.",
    response_description="The organization and its locations.",
    responses={
        403: {"model": ErrorResponse, "description": "Caller does not belong to the organization"},
        404: {"model": ErrorResponse, "description": "Organization not found"},
    },
)
async def get_organization(tenant: TenantDep, session: SessionDep) -> ActionResponse[OrganizationDetail]:
    return await OrganizationService(session).get_organization(tenant)


@router.get(
    "/locations",
    response_model=ActionResponse[List[LocationRead]],
    summary="List Locations",
    description="List the campuses of the organization.",
)
async def list_locations(
    tenant: TenantDep, session: SessionDep, active_only: bool = True
) -> ActionResponse[List[LocationRead]]:
    """
    List locations.

    - **active_only**: Hide deactivated campuses (default true).
    """
    return await OrganizationService(session).list_locations(tenant, active_only=active_only)


@router.post(
    "/locations",
    response_model=ActionResponse[LocationRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create Location",
    description="Add a campus to the organization. Administrators only.",
    response_description="The created location.",
    responses={
        400: {"model": ErrorResponse, "description": "A location with the same slug exists"},
        403: {"model": ErrorResponse, "description": "Caller is not an administrator"},
    },
)
async def create_location(
    payload: LocationCreate, tenant: TenantDep, session: SessionDep
) -> ActionResponse[LocationRead]:
    """
    Create a location.

    The slug is derived from the name when omitted and must be unique inside
    the organization.

    - **name**: Display name of the campus.
    - **slug**: Optional URL slug.
    - **address**: Optional street address.
    """
    return await OrganizationService(session).create_location(tenant, payload)


@router.post(
    "/locations/{location_id}/deactivate",
    response_model=ActionResponse[LocationRead],
    summary="Deactivate Location",
    description="Mark a campus inactive. Existing records keep their location. Administrators only.",
)
async def deactivate_location(location_id: str, tenant: TenantDep, session: SessionDep) -> ActionResponse[LocationRead]:
    return await OrganizationService(session).deactivate_location(tenant, location_id)


@router.get(
    "/users",
    response_model=ActionResponse[List[UserRead]],
    summary="List Team Members",
    description="List the dashboard users of the organization, used to pick leaders and prayer team members.",
)
async def list_users(tenant: TenantDep, session: SessionDep) -> ActionResponse[List[UserRead]]:
    return await OrganizationService(session).list_users(tenant)
