"""
Data export repository.
"""

from __future__ import annotations

from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..entities.exports import DataExport
from .base import SQLModelRepository


class DataExportRepository(SQLModelRepository[DataExport]):
    """Repository for generated export records."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, DataExport)

    async def history(self, organization_id: str, limit: int = 50) -> List[DataExport]:
        """Most recent exports of an organization, newest first."""
        result = await self.session.execute(
            select(DataExport)
            .where(DataExport.organization_id == organization_id)
            .order_by(DataExport.exported_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
