"""
Tenant repositories.

Data access for organizations, their locations, dashboard users and staff
invitations.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from churchsync.core.models.domain.enums import InvitationStatus, UserRole

from ..entities.organizations import Invitation, Location, Organization, User
from .base import SQLModelRepository


class OrganizationRepository(SQLModelRepository[Organization]):
    """Repository for organization data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Organization)

    async def get_by_slug(self, slug: str) -> Optional[Organization]:
        """Get organization by its URL slug.

        Args:
            slug: Organization slug

        Returns:
            Organization instance or None
        """
        result = await self.session.execute(select(Organization).where(Organization.slug == slug))
        return result.scalar_one_or_none()


class LocationRepository(SQLModelRepository[Location]):
    """Repository for campus locations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Location)

    async def list_for_organization(self, organization_id: str, active_only: bool = False) -> List[Location]:
        stmt = select(Location).where(Location.organization_id == organization_id)
        if active_only:
            stmt = stmt.where(Location.is_active == True)  # noqa: E712
        result = await self.session.execute(stmt.order_by(Location.name))
        return list(result.scalars().all())

    async def get_active(self, location_id: str, organization_id: str) -> Optional[Location]:
        stmt = select(Location).where(
            (Location.id == location_id)
            & (Location.organization_id == organization_id)
            & (Location.is_active == True)  # noqa: E712
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()


class UserRepository(SQLModelRepository[User]):
    """Repository for dashboard users."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def list_for_organization(self, organization_id: str) -> List[User]:
        result = await self.session.execute(
            select(User).where(User.organization_id == organization_id).order_by(User.name)
        )
        return list(result.scalars().all())

    async def find_in_organization_by_email(self, organization_id: str, email: str) -> Optional[User]:
        stmt = select(User).where(
            (User.organization_id == organization_id) & (func.lower(User.email) == email.strip().lower())
        )
        result = await self.session.execute(stmt.limit(1))
        return result.scalar_one_or_none()

    async def count_with_role(self, organization_id: str, role: UserRole) -> int:
        stmt = select(func.count()).select_from(User).where(
            (User.organization_id == organization_id) & (User.role == role)
        )
        result = await self.session.execute(stmt)
        return int(result.scalar_one())


class InvitationRepository(SQLModelRepository[Invitation]):
    """Repository for staff invitations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Invitation)

    async def get_by_token(self, token: str) -> Optional[Invitation]:
        result = await self.session.execute(select(Invitation).where(Invitation.token == token))
        return result.scalar_one_or_none()

    async def find_pending(self, organization_id: str, email: str) -> Optional[Invitation]:
        stmt = select(Invitation).where(
            (Invitation.organization_id == organization_id)
            & (Invitation.email == email.strip().lower())
            & (Invitation.status == InvitationStatus.PENDING)
        )
        result = await self.session.execute(stmt.limit(1))
        return result.scalar_one_or_none()

    async def list_pending(self, organization_id: str) -> List[Invitation]:
        stmt = (
            select(Invitation)
            .where((Invitation.organization_id == organization_id) & (Invitation.status == InvitationStatus.PENDING))
            .order_by(Invitation.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
