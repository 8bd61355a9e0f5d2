"""Unit tests for GHLService."""

import httpx
import pytest

from churchsync.core.database.entities import ChurchMember
from churchsync.core.database.repositories.members import MemberIntegrationRepository
from churchsync.core.errors import IntegrationNotConfiguredError
from churchsync.core.models.domain.enums import DeliveryStatus
from churchsync.core.models.io.integrations import GHLTokenStore
from churchsync.integrations.ghl import PROVIDER
from churchsync.server.core.config import GHLConfig
from churchsync.server.services.ghl import GHLService

PIT = GHLConfig(private_token="pit", location_id="loc-1")
LIVE = GHLConfig(private_token="pit", location_id="loc-1", call_enabled=True, base_url="http://mock-ghl")


def mock_http(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url="http://mock-ghl", transport=httpx.MockTransport(handler))


@pytest.fixture
async def member(session, seeded):
    row = ChurchMember(
        organization_id=seeded.organization.id,
        location_id=seeded.main.id,
        name="Ruth Moab",
        email="ruth@example.com",
        phone="5551234567",
    )
    session.add(row)
    await session.commit()
    return row


class TestSyncContact:
    async def test_links_member_to_contact(self, session, seeded, member):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json={"contact": {"id": f"contact-{len(calls)}"}, "new": len(calls) == 1})

        async with mock_http(handler) as http:
            service = GHLService(session, config=LIVE, http_client=http)
            first = await service.sync_contact(seeded.organization.id, member, tags=["connect-card"])
            second = await service.sync_contact(seeded.organization.id, member)

        assert first.contact_id == "contact-1" and first.is_new is True
        assert second.contact_id == "contact-2" and second.is_new is False
        link = await MemberIntegrationRepository(session).get_for_member(member.id, PROVIDER)
        assert link.external_id == "contact-2"
        assert link.last_sync_at is not None

    async def test_failed_sync_leaves_no_link(self, session, seeded, member):
        async with mock_http(lambda request: httpx.Response(500, json={"message": "boom"})) as http:
            result = await GHLService(session, config=LIVE, http_client=http).sync_contact(
                seeded.organization.id, member
            )

        assert result.success is False
        assert result.status == DeliveryStatus.FAILED
        assert await MemberIntegrationRepository(session).get_for_member(member.id, PROVIDER) is None

    async def test_not_configured(self, session, seeded, member):
        with pytest.raises(IntegrationNotConfiguredError):
            await GHLService(session, config=GHLConfig()).sync_contact(seeded.organization.id, member)


class TestStatus:
    async def test_unconfigured_status(self, session, seeded):
        service = GHLService(session, config=GHLConfig())

        status = (await service.status(seeded.organization.id)).data

        assert status.configured is False
        assert status.has_credentials is False
        assert status.synced_contacts == 0
        assert await service.is_configured(seeded.organization.id) is False

    async def test_oauth_connection_counts(self, session, seeded, member):
        service = GHLService(session, config=GHLConfig())
        await service.store_tokens(
            seeded.organization.id,
            GHLTokenStore(access_token="a", refresh_token="r", expires_in=3600, ghl_location_id="ghl-loc"),
        )
        await GHLService(session, config=PIT).sync_contact(seeded.organization.id, member)

        status = (await service.status(seeded.organization.id)).data

        assert status.configured is True
        assert status.has_credentials is True
        assert status.synced_contacts == 1
        assert status.last_sync is not None
        assert await service.is_configured(seeded.organization.id) is True

    async def test_connection_dry_run(self, session, seeded):
        response = await GHLService(session, config=PIT).test_connection(seeded.organization.id)

        assert response.message == "Connection successful"
        assert response.data.dry_run is True

    async def test_connection_failure(self, session, seeded):
        async with mock_http(lambda request: httpx.Response(401, json={"message": "Invalid token"})) as http:
            response = await GHLService(session, config=LIVE, http_client=http).test_connection(seeded.organization.id)

        assert response.message == "Connection failed"
        assert response.data.success is False
        assert response.data.error
