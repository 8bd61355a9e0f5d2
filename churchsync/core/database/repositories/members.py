"""
Church member repositories.

Data access for church members, their notes and their external CRM links.
Email lookups are case-insensitive.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from churchsync.core.models.domain.enums import MemberType

from ..entities.connect_cards import ConnectCard
from ..entities.members import ChurchMember, MemberIntegration, MemberNote
from ..entities.volunteers import Volunteer
from .base import QueryBuilder, SQLModelRepository


class ChurchMemberRepository(SQLModelRepository[ChurchMember]):
    """Repository for church member data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ChurchMember)

    async def find_by_email(self, organization_id: str, email: str) -> Optional[ChurchMember]:
        """Find a member of the organization by email, ignoring case.

        Args:
            organization_id: Tenant identifier
            email: Email address as typed on the card

        Returns:
            The oldest matching member or None
        """
        stmt = (
            select(ChurchMember)
            .where(ChurchMember.organization_id == organization_id)
            .where(func.lower(ChurchMember.email) == email.strip().lower())
            .order_by(ChurchMember.created_at)
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def search(
        self,
        organization_id: str,
        search: Optional[str] = None,
        location_filter: Optional[Dict[str, Any]] = None,
        limit: Optional[int] = None,
        member_type: Optional[MemberType] = None,
    ) -> List[ChurchMember]:
        """List members matching a name or email fragment."""
        stmt = select(ChurchMember).where(ChurchMember.organization_id == organization_id)
        if location_filter:
            stmt = QueryBuilder.apply_filters(stmt, ChurchMember, location_filter)
        if member_type is not None:
            stmt = stmt.where(ChurchMember.member_type == member_type)
        if search:
            pattern = f"%{search.strip().lower()}%"
            stmt = stmt.where(
                or_(func.lower(ChurchMember.name).like(pattern), func.lower(ChurchMember.email).like(pattern))
            )
        stmt = QueryBuilder.apply_pagination(stmt.order_by(ChurchMember.name), limit, None)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def email_taken(self, organization_id: str, email: str, exclude_id: Optional[str] = None) -> bool:
        stmt = select(func.count()).select_from(ChurchMember).where(
            (ChurchMember.organization_id == organization_id)
            & (func.lower(ChurchMember.email) == email.strip().lower())
        )
        if exclude_id is not None:
            stmt = stmt.where(ChurchMember.id != exclude_id)
        result = await self.session.execute(stmt)
        return int(result.scalar_one()) > 0

    async def list_by_ids(
        self, organization_id: str, member_ids: Sequence[str], location_filter: Optional[Dict[str, Any]] = None
    ) -> List[ChurchMember]:
        stmt = select(ChurchMember).where(
            (ChurchMember.organization_id == organization_id) & (ChurchMember.id.in_(list(member_ids)))
        )
        if location_filter:
            stmt = QueryBuilder.apply_filters(stmt, ChurchMember, location_filter)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def has_volunteer_record(self, member_id: str) -> bool:
        result = await self.session.execute(
            select(func.count()).select_from(Volunteer).where(Volunteer.church_member_id == member_id)
        )
        return int(result.scalar_one()) > 0

    async def remove(self, member: ChurchMember) -> None:
        """Delete a member with its notes and CRM links.

        Connect cards keep their data and lose the member link. Does not commit.
        """
        await self.session.execute(
            update(ConnectCard).where(ConnectCard.church_member_id == member.id).values(church_member_id=None)
        )
        await self.session.execute(delete(MemberNote).where(MemberNote.church_member_id == member.id))
        await self.session.execute(delete(MemberIntegration).where(MemberIntegration.church_member_id == member.id))
        await self.session.delete(member)


class MemberNoteRepository(SQLModelRepository[MemberNote]):
    """Repository for staff notes on members."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, MemberNote)

    async def list_for_member(self, church_member_id: str) -> List[MemberNote]:
        stmt = (
            select(MemberNote)
            .where(MemberNote.church_member_id == church_member_id)
            .order_by(MemberNote.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class MemberIntegrationRepository(SQLModelRepository[MemberIntegration]):
    """Repository for member to external contact links."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, MemberIntegration)

    async def get_for_member(self, church_member_id: str, provider: str) -> Optional[MemberIntegration]:
        stmt = select(MemberIntegration).where(
            (MemberIntegration.church_member_id == church_member_id) & (MemberIntegration.provider == provider)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by_external_id(self, provider: str, external_id: str) -> Optional[MemberIntegration]:
        stmt = (
            select(MemberIntegration)
            .where((MemberIntegration.provider == provider) & (MemberIntegration.external_id == external_id))
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def sync_summary(self, organization_id: str, provider: str) -> tuple[int, Optional[datetime]]:
        """Return the number of synced contacts and the latest sync time."""
        stmt = select(func.count(), func.max(MemberIntegration.last_sync_at)).where(
            (MemberIntegration.organization_id == organization_id) & (MemberIntegration.provider == provider)
        )
        result = await self.session.execute(stmt)
        count, last_sync = result.one()
        return int(count), last_sync
