"""
Church Member Service.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from churchsync.core.database.repositories.members import ChurchMemberRepository
from churchsync.core.errors import NotFoundError
from churchsync.core.models.io.common import ActionResponse
from churchsync.core.models.io.volunteers import ChurchMemberRead
from churchsync.core.tenancy import can_access_location, location_filter

from .tenancy import TenantContext

MAX_RESULTS = 200


class MemberService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.members = ChurchMemberRepository(session)

    async def list_members(
        self, tenant: TenantContext, search: Optional[str] = None
    ) -> ActionResponse[List[ChurchMemberRead]]:
        """Members in scope whose name or email contains ``search`` (case-insensitive)."""
        members = await self.members.search(
            tenant.organization_id, search=search, location_filter=location_filter(tenant.scope), limit=MAX_RESULTS
        )
        return ActionResponse(data=[ChurchMemberRead.model_validate(member) for member in members])

    async def get_member(self, tenant: TenantContext, member_id: str) -> ActionResponse[ChurchMemberRead]:
        member = await self.members.get_in_organization(member_id, tenant.organization_id)
        if member is None or not can_access_location(tenant.scope, member.location_id):
            raise NotFoundError("Member not found")
        return ActionResponse(data=ChurchMemberRead.model_validate(member))
