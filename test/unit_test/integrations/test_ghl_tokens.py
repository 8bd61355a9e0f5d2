"""Unit tests for per-organization GHL credential handling."""

from datetime import timedelta
from urllib.parse import parse_qs

import httpx
import pytest

from churchsync.core.database.base import utc_now
from churchsync.core.database.entities import GHLToken
from churchsync.core.database.repositories import GHLTokenRepository
from churchsync.core.models.io.integrations import GHLTokenStore
from churchsync.integrations.ghl import client_for_organization, get_access_token, has_ghl_connected, store_tokens
from churchsync.server.core.config import GHLConfig

OAUTH = GHLConfig(base_url="http://mock-ghl", client_id="client", client_secret="secret")


@pytest.fixture
def org_id(seeded):
    return seeded.organization.id


async def add_token(session, org_id, expires_in: timedelta, location="ghl-loc"):
    token = GHLToken(
        organization_id=org_id,
        access_token="old-access",
        refresh_token="old-refresh",
        expires_at=utc_now() + expires_in,
        ghl_location_id=location,
    )
    session.add(token)
    await session.commit()
    return token


async def test_store_tokens_creates_then_replaces(session, org_id):
    created = await store_tokens(
        session, org_id, GHLTokenStore(access_token="a1", refresh_token="r1", expires_in=3600, ghl_location_id="loc")
    )
    updated = await store_tokens(session, org_id, GHLTokenStore(access_token="a2", refresh_token="r2", expires_in=60))

    assert updated.id == created.id
    assert updated.access_token == "a2"
    assert updated.ghl_location_id == "loc"
    assert await has_ghl_connected(session, org_id)


async def test_valid_token_is_returned_as_is(session, org_id):
    await add_token(session, org_id, timedelta(hours=1))

    assert await get_access_token(session, org_id, config=OAUTH) == "old-access"


async def test_no_token(session, org_id):
    assert await get_access_token(session, org_id, config=OAUTH) is None
    assert not await has_ghl_connected(session, org_id)


async def test_expiring_token_is_refreshed(session, org_id):
    await add_token(session, org_id, timedelta(minutes=2))
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["form"] = parse_qs(request.content.decode())
        return httpx.Response(200, json={"access_token": "new-access", "refresh_token": "new-refresh", "expires_in": 7200})

    http = httpx.AsyncClient(base_url="http://mock-ghl", transport=httpx.MockTransport(handler))
    token = await get_access_token(session, org_id, config=OAUTH, client=http)

    assert token == "new-access"
    assert seen["path"] == "/oauth/token"
    assert seen["form"]["grant_type"] == ["refresh_token"]
    assert seen["form"]["refresh_token"] == ["old-refresh"]
    stored = await GHLTokenRepository(session).get_for_organization(org_id)
    assert stored.refresh_token == "new-refresh"
    assert stored.expires_at > utc_now() + timedelta(hours=1)


async def test_refresh_failure(session, org_id):
    await add_token(session, org_id, timedelta(minutes=-1))
    http = httpx.AsyncClient(base_url="http://mock-ghl", transport=httpx.MockTransport(lambda r: httpx.Response(401)))

    assert await get_access_token(session, org_id, config=OAUTH, client=http) is None


async def test_refresh_without_client_credentials(session, org_id):
    await add_token(session, org_id, timedelta(minutes=-1))

    assert await get_access_token(session, org_id, config=GHLConfig()) is None


class TestClientForOrganization:
    async def test_not_configured(self, session, org_id):
        assert await client_for_organization(session, org_id, config=GHLConfig()) is None

    async def test_private_token(self, session, org_id):
        config = GHLConfig(private_token="pit", location_id="pit-loc")

        client = await client_for_organization(session, org_id, config=config)

        assert (client.access_token, client.location_id) == ("pit", "pit-loc")

    async def test_oauth_wins_over_private_token(self, session, org_id):
        await add_token(session, org_id, timedelta(hours=1))
        config = GHLConfig(private_token="pit", location_id="pit-loc")

        client = await client_for_organization(session, org_id, config=config)

        assert (client.access_token, client.location_id) == ("old-access", "ghl-loc")

    async def test_oauth_token_without_location_falls_back(self, session, org_id):
        await add_token(session, org_id, timedelta(hours=1), location=None)

        assert await client_for_organization(session, org_id, config=GHLConfig()) is None
