"""
GoHighLevel Service.

Keeps church members in sync with GHL contacts and reports the integration
state of an organization. The ``MemberIntegration`` row written after each
successful upsert is what later maps inbound SMS replies back to a member.
"""

from __future__ import annotations

from typing import List, Optional

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from churchsync.core.database.base import utc_now
from churchsync.core.database.entities.members import ChurchMember, MemberIntegration
from churchsync.core.database.repositories.members import MemberIntegrationRepository
from churchsync.core.errors import IntegrationNotConfiguredError
from churchsync.core.logging_config import get_logger
from churchsync.core.models.io.common import ActionResponse
from churchsync.core.models.io.integrations import GHLConnectionTest, GHLStatus, GHLTokenStore
from churchsync.core.monitoring import log_notification
from churchsync.integrations.ghl import PROVIDER, ContactSyncResult, GHLClient, client_for_organization
from churchsync.integrations.ghl.tokens import has_ghl_connected, store_tokens
from churchsync.server.core.config import GHLConfig, settings

logger = get_logger(__name__)

NOT_CONFIGURED_MESSAGE = "GoHighLevel is not configured for this organization"


class GHLService:
    """CRM contact sync on top of ``GHLClient``."""

    def __init__(
        self,
        session: AsyncSession,
        config: Optional[GHLConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.session = session
        self.config = config or settings.ghl
        self.http_client = http_client
        self.integrations = MemberIntegrationRepository(session)

    async def client(self, organization_id: str) -> GHLClient:
        """Client for the organization.

        Raises:
            IntegrationNotConfiguredError: No OAuth token and no private token.
        """
        client = await client_for_organization(
            self.session, organization_id, config=self.config, http_client=self.http_client
        )
        if client is None:
            raise IntegrationNotConfiguredError(NOT_CONFIGURED_MESSAGE)
        return client

    async def is_configured(self, organization_id: str) -> bool:
        return self.config.configured or await has_ghl_connected(self.session, organization_id)

    async def sync_contact(
        self,
        organization_id: str,
        member: ChurchMember,
        tags: Optional[List[str]] = None,
        client: Optional[GHLClient] = None,
    ) -> ContactSyncResult:
        """
        Upsert a member as a GHL contact and remember the contact id.

        Args:
            organization_id: Tenant identifier
            member: Church member to push
            tags: Optional contact tags
            client: Reuse an open client (bulk callers)

        Returns:
            ContactSyncResult from the upsert
        """
        owned = client is None
        client = client or await self.client(organization_id)
        try:
            result = await client.upsert_contact(
                name=member.name,
                email=member.email,
                phone=member.phone,
                address=member.address,
                tags=tags,
            )
        finally:
            if owned:
                await client.aclose()

        log_notification("crm_contact", result.status.value, organization_id, member_id=member.id)
        if not result.success or not result.contact_id:
            logger.warning(f"GHL contact sync failed for member {member.id}: {result.error}")
            return result

        link = await self.integrations.get_for_member(member.id, PROVIDER)
        if link is None:
            link = MemberIntegration(
                organization_id=organization_id,
                church_member_id=member.id,
                provider=PROVIDER,
                external_id=result.contact_id,
            )
        link.external_id = result.contact_id
        link.last_sync_at = utc_now()
        self.session.add(link)
        await self.session.commit()
        logger.info(f"Synced member {member.id} to GHL contact {result.contact_id} (new={result.is_new})")
        return result

    async def status(self, organization_id: str) -> ActionResponse[GHLStatus]:
        synced, last_sync = await self.integrations.sync_summary(organization_id, PROVIDER)
        connected = await has_ghl_connected(self.session, organization_id)
        return ActionResponse(
            data=GHLStatus(
                configured=self.config.configured or connected,
                has_credentials=connected or bool(self.config.private_token),
                synced_contacts=synced,
                last_sync=last_sync,
            )
        )

    async def test_connection(self, organization_id: str) -> ActionResponse[GHLConnectionTest]:
        async with await self.client(organization_id) as client:
            result = await client.test_connection()
        message = "Connection successful" if result.success else "Connection failed"
        return ActionResponse(
            message=message,
            data=GHLConnectionTest(success=result.success, dry_run=result.dry_run, error=result.error),
        )

    async def store_tokens(self, organization_id: str, payload: GHLTokenStore) -> ActionResponse[None]:
        await store_tokens(self.session, organization_id, payload)
        logger.info(f"Stored GHL OAuth tokens for organization {organization_id}")
        return ActionResponse(message="GoHighLevel connected")
