"""
Per-organization GHL credentials.

An organization either connected GHL through OAuth (a row in ``ghl_tokens``)
or the deployment uses a single private integration token from settings.
OAuth access tokens are refreshed when they are within five minutes of
expiring.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Optional

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from churchsync.core.database.base import utc_now
from churchsync.core.database.entities.integrations import GHLToken
from churchsync.core.database.repositories.integrations import GHLTokenRepository
from churchsync.core.logging_config import get_logger
from churchsync.core.models.io.integrations import GHLTokenStore
from churchsync.server.core.config import GHLConfig, settings

from .client import GHLClient

logger = get_logger(__name__)

REFRESH_MARGIN = timedelta(minutes=5)


async def _refresh(
    token: GHLToken, config: GHLConfig, client: Optional[httpx.AsyncClient]
) -> Optional[dict]:
    if not config.client_id or not config.client_secret:
        logger.error("GHL OAuth client credentials are not configured; cannot refresh token")
        return None

    form = {
        "client_id": config.client_id,
        "client_secret": config.client_secret,
        "grant_type": "refresh_token",
        "refresh_token": token.refresh_token,
    }
    http = client or httpx.AsyncClient(base_url=config.base_url, timeout=config.timeout)
    try:
        response = await http.post("/oauth/token", data=form)
    except httpx.HTTPError as e:
        logger.error(f"GHL token refresh failed: {e}")
        return None
    finally:
        if client is None:
            await http.aclose()

    if response.is_error:
        logger.error(f"GHL token refresh failed with status {response.status_code}")
        return None
    try:
        return response.json()
    except ValueError:
        logger.error("GHL token refresh returned a non-JSON body")
        return None


async def get_access_token(
    session: AsyncSession,
    organization_id: str,
    *,
    config: Optional[GHLConfig] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[str]:
    """Return a usable OAuth access token for the organization.

    Args:
        session: Database session
        organization_id: Tenant identifier
        config: GHL settings; defaults to the application settings
        client: Optional ``httpx.AsyncClient`` used for the refresh call

    Returns:
        The access token, or None when the organization has no token or the
        refresh failed
    """
    config = config or settings.ghl
    repo = GHLTokenRepository(session)
    token = await repo.get_for_organization(organization_id)
    if token is None:
        return None
    if token.expires_at - utc_now() > REFRESH_MARGIN:
        return token.access_token

    data = await _refresh(token, config, client)
    if not data or not data.get("access_token"):
        return None

    token.access_token = data["access_token"]
    token.refresh_token = data.get("refresh_token") or token.refresh_token
    token.expires_at = utc_now() + timedelta(seconds=int(data.get("expires_in", 86400)))
    await repo.update(token)
    logger.info(f"Refreshed GHL access token for organization {organization_id}")
    return token.access_token


async def has_ghl_connected(session: AsyncSession, organization_id: str) -> bool:
    return await GHLTokenRepository(session).get_for_organization(organization_id) is not None


async def store_tokens(session: AsyncSession, organization_id: str, payload: GHLTokenStore) -> GHLToken:
    """Create or replace the organization's OAuth token pair."""
    repo = GHLTokenRepository(session)
    token = await repo.get_for_organization(organization_id)
    expires_at = utc_now() + timedelta(seconds=payload.expires_in)
    if token is None:
        token = GHLToken(
            organization_id=organization_id,
            access_token=payload.access_token,
            refresh_token=payload.refresh_token,
            expires_at=expires_at,
            ghl_location_id=payload.ghl_location_id,
            scope=payload.scope,
        )
        return await repo.create(token)

    token.access_token = payload.access_token
    token.refresh_token = payload.refresh_token
    token.expires_at = expires_at
    token.ghl_location_id = payload.ghl_location_id or token.ghl_location_id
    token.scope = payload.scope or token.scope
    return await repo.update(token)


async def client_for_organization(
    session: AsyncSession,
    organization_id: str,
    *,
    config: Optional[GHLConfig] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> Optional[GHLClient]:
    """Build a client for the organization, or None when GHL is not set up.

    OAuth credentials stored for the organization win over the deployment
    wide private integration token.
    """
    config = config or settings.ghl
    token = await GHLTokenRepository(session).get_for_organization(organization_id)
    if token is not None and token.ghl_location_id:
        access_token = await get_access_token(session, organization_id, config=config, client=http_client)
        if access_token:
            return GHLClient(access_token, token.ghl_location_id, config=config, client=http_client)
    if config.configured:
        return GHLClient(config.private_token, config.location_id, config=config, client=http_client)
    return None
