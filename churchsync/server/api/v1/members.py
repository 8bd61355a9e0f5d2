"""Church member endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter

from churchsync.core.models.io.common import ActionResponse, ErrorResponse
from churchsync.core.models.io.volunteers import ChurchMemberRead
from churchsync.server.services.deps import SessionDep, TenantDep
from churchsync.server.services.members import MemberService

router = APIRouter(tags=["members"])


@router.get(
    "",
    response_model=ActionResponse[List[ChurchMemberRead]],
    summary="List Members",
    description="List church members inside the caller's data scope.",
)
async def list_members(
    tenant: TenantDep, session: SessionDep, search: Optional[str] = None
) -> ActionResponse[List[ChurchMemberRead]]:
    """
    List members.

    - **search**: Case-insensitive match on name or email.
    """
    return await MemberService(session).list_members(tenant, search=search)


@router.get(
    "/{member_id}",
    response_model=ActionResponse[ChurchMemberRead],
    summary="Get Member",
    responses={404: {"model": ErrorResponse, "description": "Member not found"}},
)
async def get_member(member_id: str, tenant: TenantDep, session: SessionDep) -> ActionResponse[ChurchMemberRead]:
    return await MemberService(session).get_member(tenant, member_id)
