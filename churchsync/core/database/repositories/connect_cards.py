"""
Connect card repositories.

Data access for connect cards and their review batches.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from churchsync.core.models.domain.enums import BatchStatus, ConnectCardStatus

from ..entities.connect_cards import ConnectCard, ConnectCardBatch
from .base import QueryBuilder, SQLModelRepository


class ConnectCardBatchRepository(SQLModelRepository[ConnectCardBatch]):
    """Repository for connect card review batches."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ConnectCardBatch)

    async def find_active(
        self, organization_id: str, location_id: Optional[str], created_since: datetime
    ) -> Optional[ConnectCardBatch]:
        """Find the newest PENDING batch of a campus created since ``created_since``."""
        stmt = (
            select(ConnectCardBatch)
            .where(ConnectCardBatch.organization_id == organization_id)
            .where(ConnectCardBatch.location_id == location_id)
            .where(ConnectCardBatch.status == BatchStatus.PENDING)
            .where(ConnectCardBatch.created_at >= created_since)
            .order_by(ConnectCardBatch.created_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_organization(
        self, organization_id: str, location_filter: Optional[Dict[str, Any]] = None
    ) -> List[ConnectCardBatch]:
        stmt = select(ConnectCardBatch).where(ConnectCardBatch.organization_id == organization_id)
        if location_filter:
            stmt = QueryBuilder.apply_filters(stmt, ConnectCardBatch, location_filter)
        result = await self.session.execute(stmt.order_by(ConnectCardBatch.created_at.desc()))
        return list(result.scalars().all())


class ConnectCardRepository(SQLModelRepository[ConnectCard]):
    """Repository for connect card data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ConnectCard)

    async def list_for_organization(
        self,
        organization_id: str,
        location_filter: Optional[Dict[str, Any]] = None,
        status: Optional[ConnectCardStatus] = None,
        batch_id: Optional[str] = None,
    ) -> List[ConnectCard]:
        stmt = select(ConnectCard).where(ConnectCard.organization_id == organization_id)
        filters: Dict[str, Any] = dict(location_filter or {})
        filters.update({"status": status, "batch_id": batch_id})
        stmt = QueryBuilder.apply_filters(stmt, ConnectCard, filters)
        result = await self.session.execute(stmt.order_by(ConnectCard.scanned_at.desc()))
        return list(result.scalars().all())

    async def find_duplicate(
        self,
        organization_id: str,
        name: str,
        emails: Iterable[str] = (),
        phones: Iterable[str] = (),
        exclude_id: Optional[str] = None,
    ) -> Optional[ConnectCard]:
        """Most recent card with the same name and a matching email or phone."""
        contact_matches = [func.lower(ConnectCard.email) == email.lower() for email in emails if email]
        contact_matches += [ConnectCard.phone == phone for phone in phones if phone]
        if not contact_matches:
            return None

        stmt = (
            select(ConnectCard)
            .where(ConnectCard.organization_id == organization_id)
            .where(func.lower(ConnectCard.name) == name.strip().lower())
            .where(or_(*contact_matches))
        )
        if exclude_id:
            stmt = stmt.where(ConnectCard.id != exclude_id)
        result = await self.session.execute(stmt.order_by(ConnectCard.scanned_at.desc()).limit(1))
        return result.scalar_one_or_none()

    async def count_unprocessed_in_batch(self, batch_id: str) -> int:
        stmt = (
            select(func.count())
            .select_from(ConnectCard)
            .where((ConnectCard.batch_id == batch_id) & (ConnectCard.status != ConnectCardStatus.PROCESSED))
        )
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def delete_for_batch(self, batch_id: str) -> None:
        """Delete every card of a batch. The caller owns the commit."""
        await self.session.execute(delete(ConnectCard).where(ConnectCard.batch_id == batch_id))

    async def list_for_export(
        self,
        organization_id: str,
        statuses: Iterable[ConnectCardStatus],
        location_id: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        only_new: bool = False,
    ) -> List[ConnectCard]:
        """Cards eligible for export, most recently scanned first."""
        stmt = (
            select(ConnectCard)
            .where(ConnectCard.organization_id == organization_id)
            .where(ConnectCard.status.in_(list(statuses)))
        )
        if location_id:
            stmt = stmt.where(ConnectCard.location_id == location_id)
        if date_from:
            stmt = stmt.where(ConnectCard.scanned_at >= date_from)
        if date_to:
            stmt = stmt.where(ConnectCard.scanned_at <= date_to)
        if only_new:
            stmt = stmt.where(ConnectCard.last_exported_at.is_(None))
        result = await self.session.execute(stmt.order_by(ConnectCard.scanned_at.desc()))
        return list(result.scalars().all())
