"""
Prayer request repositories.

Data access for prayer requests and prayer batches. Staff visibility (public
requests or requests assigned to the caller) is applied here so that lists
and statistics share one definition.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from churchsync.core.models.domain.enums import PrayerStatus

from ..entities.prayer_requests import PrayerBatch, PrayerRequest
from .base import QueryBuilder, SQLModelRepository


@dataclass
class PrayerQuery:
    """Filters accepted by ``PrayerRequestRepository.search``."""

    status: Optional[PrayerStatus] = None
    category: Optional[str] = None
    location_id: Optional[str] = None
    assigned_to_id: Optional[str] = None
    is_private: Optional[bool] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    search: Optional[str] = None


class PrayerRequestRepository(SQLModelRepository[PrayerRequest]):
    """Repository for prayer request data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, PrayerRequest)

    def _scoped(
        self,
        stmt,
        organization_id: str,
        location_filter: Optional[Dict[str, Any]],
        restrict_to_user_id: Optional[str],
        is_private: Optional[bool] = None,
    ):
        stmt = stmt.where(PrayerRequest.organization_id == organization_id)
        if location_filter:
            stmt = QueryBuilder.apply_filters(stmt, PrayerRequest, location_filter)

        if restrict_to_user_id is None:
            if is_private is not None:
                stmt = stmt.where(PrayerRequest.is_private == is_private)
            return stmt

        # Staff: public requests, or the ones assigned to them
        if is_private is True:
            return stmt.where(
                (PrayerRequest.is_private == True) & (PrayerRequest.assigned_to_id == restrict_to_user_id)  # noqa: E712
            )
        if is_private is False:
            return stmt.where(PrayerRequest.is_private == False)  # noqa: E712
        return stmt.where(
            or_(PrayerRequest.is_private == False, PrayerRequest.assigned_to_id == restrict_to_user_id)  # noqa: E712
        )

    async def search(
        self,
        organization_id: str,
        location_filter: Optional[Dict[str, Any]],
        restrict_to_user_id: Optional[str],
        query: PrayerQuery,
        page: int,
        limit: int,
    ) -> Tuple[List[PrayerRequest], int]:
        """Paginated list of prayer requests.

        Args:
            organization_id: Tenant identifier
            location_filter: Location restriction from the data scope
            restrict_to_user_id: Staff user id for visibility rules, None for admins
            query: Optional filters
            page: 1-based page number
            limit: Page size

        Returns:
            Tuple of (page items, total matching rows)
        """
        stmt = self._scoped(select(PrayerRequest), organization_id, location_filter, restrict_to_user_id, query.is_private)
        stmt = QueryBuilder.apply_filters(
            stmt,
            PrayerRequest,
            {
                "status": query.status,
                "category": query.category,
                "location_id": query.location_id,
                "assigned_to_id": query.assigned_to_id,
            },
        )
        if query.date_from:
            stmt = stmt.where(PrayerRequest.created_at >= query.date_from)
        if query.date_to:
            stmt = stmt.where(PrayerRequest.created_at <= query.date_to)
        if query.search:
            pattern = f"%{query.search.strip().lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(PrayerRequest.request).like(pattern),
                    func.lower(PrayerRequest.submitted_by).like(pattern),
                )
            )

        total_result = await self.session.execute(select(func.count()).select_from(stmt.subquery()))
        total = int(total_result.scalar_one())

        stmt = stmt.order_by(PrayerRequest.is_urgent.desc(), PrayerRequest.created_at.desc())
        stmt = QueryBuilder.apply_pagination(stmt, limit, (page - 1) * limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def list_visible(
        self,
        organization_id: str,
        location_filter: Optional[Dict[str, Any]],
        restrict_to_user_id: Optional[str],
    ) -> List[PrayerRequest]:
        """Every prayer request the caller may see, used for statistics."""
        stmt = self._scoped(select(PrayerRequest), organization_id, location_filter, restrict_to_user_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_many(self, organization_id: str, ids: Iterable[str]) -> List[PrayerRequest]:
        stmt = select(PrayerRequest).where(
            (PrayerRequest.organization_id == organization_id) & (PrayerRequest.id.in_(list(ids)))
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_for_connect_card(self, connect_card_id: str) -> Optional[PrayerRequest]:
        result = await self.session.execute(
            select(PrayerRequest).where(PrayerRequest.connect_card_id == connect_card_id).limit(1)
        )
        return result.scalar_one_or_none()

    async def list_for_batch(self, batch_id: str) -> List[PrayerRequest]:
        result = await self.session.execute(
            select(PrayerRequest)
            .where(PrayerRequest.batch_id == batch_id)
            .order_by(PrayerRequest.is_urgent.desc(), PrayerRequest.created_at)
        )
        return list(result.scalars().all())


class PrayerBatchRepository(SQLModelRepository[PrayerBatch]):
    """Repository for prayer batches."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, PrayerBatch)

    async def list_for_organization(
        self,
        organization_id: str,
        location_filter: Optional[Dict[str, Any]] = None,
        assigned_to_id: Optional[str] = None,
    ) -> List[PrayerBatch]:
        stmt = select(PrayerBatch).where(PrayerBatch.organization_id == organization_id)
        filters: Dict[str, Any] = dict(location_filter or {})
        filters["assigned_to_id"] = assigned_to_id
        stmt = QueryBuilder.apply_filters(stmt, PrayerBatch, filters)
        result = await self.session.execute(stmt.order_by(PrayerBatch.created_at.desc()))
        return list(result.scalars().all())
