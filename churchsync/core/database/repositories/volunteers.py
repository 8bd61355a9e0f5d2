"""
Volunteer repository.

Data access for volunteers and their ministry categories, including the
version-guarded update used for optimistic locking.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import delete, exists, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from churchsync.core.models.domain.enums import (
    BackgroundCheckStatus,
    VolunteerCategoryType,
    VolunteerStatus,
)

from ..base import utc_now
from ..entities.events import EventAssignment
from ..entities.members import ChurchMember
from ..entities.volunteers import Volunteer, VolunteerCategory
from .base import QueryBuilder, SQLModelRepository

VolunteerRow = Tuple[Volunteer, ChurchMember]


class VolunteerRepository(SQLModelRepository[Volunteer]):
    """Repository for volunteer data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Volunteer)

    async def get_with_member(self, volunteer_id: str, organization_id: str) -> Optional[VolunteerRow]:
        stmt = (
            select(Volunteer, ChurchMember)
            .join(ChurchMember, ChurchMember.id == Volunteer.church_member_id)
            .where((Volunteer.id == volunteer_id) & (Volunteer.organization_id == organization_id))
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        row = result.first()
        return (row[0], row[1]) if row else None

    async def get_by_member(self, church_member_id: str) -> Optional[Volunteer]:
        result = await self.session.execute(
            select(Volunteer).where(Volunteer.church_member_id == church_member_id).limit(1)
        )
        return result.scalar_one_or_none()

    async def get_by_token(self, token: str) -> Optional[Volunteer]:
        result = await self.session.execute(select(Volunteer).where(Volunteer.bg_check_token == token))
        return result.scalar_one_or_none()

    async def list_with_members(
        self,
        organization_id: str,
        location_filter: Optional[Dict[str, Any]] = None,
        status: Optional[VolunteerStatus] = None,
        category: Optional[VolunteerCategoryType] = None,
        search: Optional[str] = None,
    ) -> List[VolunteerRow]:
        """List volunteers with their member record, newest first."""
        stmt = (
            select(Volunteer, ChurchMember)
            .join(ChurchMember, ChurchMember.id == Volunteer.church_member_id)
            .where(Volunteer.organization_id == organization_id)
        )
        if location_filter:
            stmt = QueryBuilder.apply_filters(stmt, Volunteer, location_filter)
        if status is not None:
            stmt = stmt.where(Volunteer.status == status)
        if category is not None:
            stmt = stmt.where(
                exists().where(
                    (VolunteerCategory.volunteer_id == Volunteer.id) & (VolunteerCategory.category == category)
                )
            )
        if search:
            pattern = f"%{search.strip().lower()}%"
            stmt = stmt.where(
                or_(func.lower(ChurchMember.name).like(pattern), func.lower(ChurchMember.email).like(pattern))
            )
        result = await self.session.execute(stmt.order_by(Volunteer.created_at.desc()))
        return [(volunteer, member) for volunteer, member in result.all()]

    async def list_active_by_ids(self, organization_id: str, volunteer_ids: Iterable[str]) -> List[VolunteerRow]:
        ids = list(volunteer_ids)
        if not ids:
            return []
        stmt = (
            select(Volunteer, ChurchMember)
            .join(ChurchMember, ChurchMember.id == Volunteer.church_member_id)
            .where(Volunteer.organization_id == organization_id)
            .where(Volunteer.status == VolunteerStatus.ACTIVE)
            .where(Volunteer.id.in_(ids))
        )
        result = await self.session.execute(stmt)
        return [(volunteer, member) for volunteer, member in result.all()]

    async def update_with_version(
        self, volunteer_id: str, organization_id: str, expected_version: int, values: Dict[str, Any]
    ) -> int:
        """Apply ``values`` only when the stored version still matches.

        The version is incremented in the same statement. The caller owns the
        commit.

        Returns:
            Number of rows updated (0 or 1)
        """
        stmt = (
            update(Volunteer)
            .where(
                (Volunteer.id == volunteer_id)
                & (Volunteer.organization_id == organization_id)
                & (Volunteer.version == expected_version)
            )
            .values(**values, version=Volunteer.version + 1, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0

    async def categories_for(self, volunteer_ids: Iterable[str]) -> Dict[str, List[VolunteerCategoryType]]:
        ids = list(volunteer_ids)
        categories: Dict[str, List[VolunteerCategoryType]] = {volunteer_id: [] for volunteer_id in ids}
        if not ids:
            return categories
        result = await self.session.execute(
            select(VolunteerCategory)
            .where(VolunteerCategory.volunteer_id.in_(ids))
            .order_by(VolunteerCategory.created_at)
        )
        for row in result.scalars().all():
            categories[row.volunteer_id].append(row.category)
        return categories

    async def replace_categories(
        self, volunteer: Volunteer, categories: Iterable[VolunteerCategoryType]
    ) -> None:
        """Replace the volunteer's categories. The caller owns the commit."""
        await self.session.execute(delete(VolunteerCategory).where(VolunteerCategory.volunteer_id == volunteer.id))
        for category in dict.fromkeys(categories):
            self.session.add(
                VolunteerCategory(
                    organization_id=volunteer.organization_id,
                    volunteer_id=volunteer.id,
                    category=category,
                )
            )

    async def available_for_session(
        self,
        organization_id: str,
        session_id: str,
        category: Optional[VolunteerCategoryType] = None,
        requires_background_check: bool = False,
        location_id: Optional[str] = None,
        limit: int = 50,
    ) -> List[VolunteerRow]:
        """Active volunteers that can still be assigned to a session.

        Least recently served volunteers come first.
        """
        already_assigned = exists().where(
            (EventAssignment.session_id == session_id) & (EventAssignment.volunteer_id == Volunteer.id)
        )
        stmt = (
            select(Volunteer, ChurchMember)
            .join(ChurchMember, ChurchMember.id == Volunteer.church_member_id)
            .where(Volunteer.organization_id == organization_id)
            .where(Volunteer.status == VolunteerStatus.ACTIVE)
            .where(~already_assigned)
        )
        if category is not None:
            stmt = stmt.where(
                exists().where(
                    (VolunteerCategory.volunteer_id == Volunteer.id) & (VolunteerCategory.category == category)
                )
            )
        if requires_background_check:
            stmt = stmt.where(Volunteer.background_check_status == BackgroundCheckStatus.CLEARED)
        if location_id is not None:
            stmt = stmt.where(Volunteer.location_id == location_id)
        stmt = stmt.order_by(Volunteer.last_served_date.asc().nulls_first(), ChurchMember.name).limit(limit)
        result = await self.session.execute(stmt)
        return [(volunteer, member) for volunteer, member in result.all()]
