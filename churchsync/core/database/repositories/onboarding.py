"""
Volunteer onboarding repositories.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from churchsync.core.models.domain.enums import DocumentScope, VolunteerCategoryType

from ..entities.onboarding import BackgroundCheckConfig, MinistryRequirement, VolunteerDocument
from .base import SQLModelRepository


class VolunteerDocumentRepository(SQLModelRepository[VolunteerDocument]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, VolunteerDocument)

    async def list_for_organization(
        self,
        organization_id: str,
        scope: Optional[DocumentScope] = None,
        category: Optional[VolunteerCategoryType] = None,
    ) -> List[VolunteerDocument]:
        stmt = select(VolunteerDocument).where(VolunteerDocument.organization_id == organization_id)
        if scope is not None:
            stmt = stmt.where(VolunteerDocument.scope == scope)
        if category is not None:
            stmt = stmt.where(VolunteerDocument.category == category)
        result = await self.session.execute(stmt.order_by(VolunteerDocument.created_at))
        return list(result.scalars().all())


class MinistryRequirementRepository(SQLModelRepository[MinistryRequirement]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, MinistryRequirement)

    async def list_for_organization(self, organization_id: str) -> List[MinistryRequirement]:
        result = await self.session.execute(
            select(MinistryRequirement)
            .where(MinistryRequirement.organization_id == organization_id)
            .order_by(MinistryRequirement.sort_order)
        )
        return list(result.scalars().all())

    async def get_for_category(
        self, organization_id: str, category: VolunteerCategoryType
    ) -> Optional[MinistryRequirement]:
        result = await self.session.execute(
            select(MinistryRequirement).where(
                (MinistryRequirement.organization_id == organization_id) & (MinistryRequirement.category == category)
            )
        )
        return result.scalar_one_or_none()


class BackgroundCheckConfigRepository(SQLModelRepository[BackgroundCheckConfig]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, BackgroundCheckConfig)

    async def get_for_organization(self, organization_id: str) -> Optional[BackgroundCheckConfig]:
        result = await self.session.execute(
            select(BackgroundCheckConfig).where(BackgroundCheckConfig.organization_id == organization_id)
        )
        return result.scalar_one_or_none()
