"""
Outbound integration repositories.

Data access for stored CRM OAuth tokens and the email delivery log.
"""

from __future__ import annotations

from typing import Dict, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from churchsync.core.models.domain.enums import DeliveryStatus

from ..entities.integrations import EmailLog, GHLToken
from .base import SQLModelRepository


class GHLTokenRepository(SQLModelRepository[GHLToken]):
    """Repository for per-organization GoHighLevel tokens."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, GHLToken)

    async def get_for_organization(self, organization_id: str) -> Optional[GHLToken]:
        result = await self.session.execute(select(GHLToken).where(GHLToken.organization_id == organization_id))
        return result.scalar_one_or_none()


class EmailLogRepository(SQLModelRepository[EmailLog]):
    """Repository for email delivery records."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, EmailLog)

    async def status_counts(self, organization_id: str) -> Dict[DeliveryStatus, int]:
        """Number of email attempts per delivery status."""
        stmt = (
            select(EmailLog.status, func.count())
            .where(EmailLog.organization_id == organization_id)
            .group_by(EmailLog.status)
        )
        result = await self.session.execute(stmt)
        return {DeliveryStatus(status): int(count) for status, count in result.all()}
