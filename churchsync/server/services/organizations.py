"""
Organization Service.

Organization detail, campus management and the user directory of a tenant.
"""

from __future__ import annotations

import re
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from churchsync.core.database.entities.organizations import Location
from churchsync.core.database.repositories.organizations import LocationRepository, UserRepository
from churchsync.core.errors import BusinessRuleError, NotFoundError
from churchsync.core.logging_config import get_logger
from churchsync.core.models.io.common import ActionResponse
from churchsync.core.models.io.organizations import (
    LocationCreate,
    LocationRead,
    OrganizationDetail,
    OrganizationRead,
    UserRead,
)
from churchsync.core.tenancy import require_admin

from .tenancy import TenantContext

logger = get_logger(__name__)

_SLUG_SEPARATORS = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    return _SLUG_SEPARATORS.sub("-", value.lower()).strip("-")


class OrganizationService:
    """Tenant level reads and campus administration."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.locations = LocationRepository(session)
        self.users = UserRepository(session)

    async def get_organization(self, tenant: TenantContext) -> ActionResponse[OrganizationDetail]:
        locations = await self.locations.list_for_organization(tenant.organization_id, active_only=True)
        detail = OrganizationDetail(
            organization=OrganizationRead.model_validate(tenant.organization),
            locations=[LocationRead.model_validate(location) for location in locations],
        )
        return ActionResponse(data=detail)

    async def list_locations(self, tenant: TenantContext, active_only: bool = True) -> ActionResponse[List[LocationRead]]:
        locations = await self.locations.list_for_organization(tenant.organization_id, active_only=active_only)
        return ActionResponse(data=[LocationRead.model_validate(location) for location in locations])

    async def create_location(self, tenant: TenantContext, payload: LocationCreate) -> ActionResponse[LocationRead]:
        """
        Add a campus to the organization.

        Args:
            tenant: Resolved request tenant (admin only)
            payload: Campus name, optional slug and address

        Returns:
            ActionResponse with the created location
        """
        require_admin(tenant.scope)
        slug = slugify(payload.slug or payload.name)
        if not slug:
            raise BusinessRuleError("Location name must contain letters or digits")

        existing = await self.locations.list_for_organization(tenant.organization_id)
        if any(location.slug == slug for location in existing):
            raise BusinessRuleError(f"A location with slug '{slug}' already exists")

        location = await self.locations.create(
            Location(
                organization_id=tenant.organization_id,
                name=payload.name.strip(),
                slug=slug,
                address=payload.address,
            )
        )
        logger.info(f"Created location {location.id} ({location.name}) in organization {tenant.organization_id}")
        return ActionResponse(message="Location created", data=LocationRead.model_validate(location))

    async def deactivate_location(self, tenant: TenantContext, location_id: str) -> ActionResponse[LocationRead]:
        require_admin(tenant.scope)
        location = await self.locations.get_in_organization(location_id, tenant.organization_id)
        if location is None:
            raise NotFoundError("Location not found")
        location.is_active = False
        location = await self.locations.update(location)
        logger.info(f"Deactivated location {location.id} in organization {tenant.organization_id}")
        return ActionResponse(message="Location deactivated", data=LocationRead.model_validate(location))

    async def list_users(self, tenant: TenantContext) -> ActionResponse[List[UserRead]]:
        users = await self.users.list_for_organization(tenant.organization_id)
        return ActionResponse(data=[UserRead.model_validate(user) for user in users])
