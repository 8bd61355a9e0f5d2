"""
Team endpoints.

``router`` is mounted under the organization prefix and manages staff and
their invitations. ``invitations_router`` holds the acceptance route, which
is reached from the emailed link before the caller belongs to the
organization.
"""

from __future__ import annotations

from typing import Annotated, Optional

from fastapi import APIRouter, Header, status

from churchsync.core.models.io.common import ActionResponse, ErrorResponse
from churchsync.core.models.io.organizations import (
    AcceptedInvitation,
    InvitationAccept,
    InvitationCreate,
    InvitationRead,
    TeamMemberUpdate,
    TeamOverview,
    UserRead,
)
from churchsync.server.core.constant import USER_ID_HEADER
from churchsync.server.services.deps import SessionDep, TenantDep
from churchsync.server.services.team import TeamService

router = APIRouter(tags=["team"])
invitations_router = APIRouter(tags=["team"])

FORBIDDEN = {403: {"model": ErrorResponse, "description": "Caller cannot manage users"}}


@router.get("", response_model=ActionResponse[TeamOverview], summary="Get Team")
async def get_team(tenant: TenantDep, session: SessionDep) -> ActionResponse[TeamOverview]:
    """Team members and pending invitations."""
    return await TeamService(session).get_team(tenant)


@router.post(
    "/invitations",
    response_model=ActionResponse[InvitationRead],
    status_code=status.HTTP_201_CREATED,
    summary="Invite Staff",
    responses={**FORBIDDEN, 429: {"model": ErrorResponse, "description": "Too many invitations"}},
)
async def invite_staff(
    payload: InvitationCreate, tenant: TenantDep, session: SessionDep
) -> ActionResponse[InvitationRead]:
    return await TeamService(session).invite_staff(tenant, payload)


@router.post(
    "/invitations/{invitation_id}/resend",
    response_model=ActionResponse[InvitationRead],
    summary="Resend Invitation",
    responses=FORBIDDEN,
)
async def resend_invitation(
    invitation_id: str, tenant: TenantDep, session: SessionDep
) -> ActionResponse[InvitationRead]:
    return await TeamService(session).resend_invitation(tenant, invitation_id)


@router.delete(
    "/invitations/{invitation_id}",
    response_model=ActionResponse[InvitationRead],
    summary="Revoke Invitation",
    responses=FORBIDDEN,
)
async def revoke_invitation(
    invitation_id: str, tenant: TenantDep, session: SessionDep
) -> ActionResponse[InvitationRead]:
    return await TeamService(session).revoke_invitation(tenant, invitation_id)


@router.patch(
    "/members/{member_id}",
    response_model=ActionResponse[UserRead],
    summary="Update Team Member",
    responses=FORBIDDEN,
)
async def update_member(
    member_id: str, payload: TeamMemberUpdate, tenant: TenantDep, session: SessionDep
) -> ActionResponse[UserRead]:
    return await TeamService(session).update_member(tenant, member_id, payload)


@router.delete(
    "/members/{member_id}",
    response_model=ActionResponse[None],
    summary="Remove Team Member",
    responses=FORBIDDEN,
)
async def remove_member(member_id: str, tenant: TenantDep, session: SessionDep) -> ActionResponse[None]:
    return await TeamService(session).remove_member(tenant, member_id)


@invitations_router.post(
    "/accept",
    response_model=ActionResponse[AcceptedInvitation],
    summary="Accept Invitation",
    description="Join the inviting organization. The caller must be signed in with the invited email address.",
)
async def accept_invitation(
    payload: InvitationAccept,
    session: SessionDep,
    user_id: Annotated[Optional[str], Header(alias=USER_ID_HEADER)] = None,
) -> ActionResponse[AcceptedInvitation]:
    return await TeamService(session).accept_invitation(user_id, payload.token)
