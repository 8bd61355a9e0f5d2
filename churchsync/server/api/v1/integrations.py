"""
Integration endpoints.

Status and connection checks for the GoHighLevel CRM, storage of the OAuth
tokens obtained by the dashboard, and outgoing email statistics.
"""

from __future__ import annotations

from fastapi import APIRouter

from churchsync.core.models.io.common import ActionResponse, ErrorResponse
from churchsync.core.models.io.integrations import EmailStats, GHLConnectionTest, GHLStatus, GHLTokenStore
from churchsync.core.tenancy import require_admin
from churchsync.integrations.email import EmailService
from churchsync.server.services.deps import SessionDep, TenantDep
from churchsync.server.services.ghl import GHLService

router = APIRouter(tags=["integrations"])


@router.get(
    "/ghl/status",
    response_model=ActionResponse[GHLStatus],
    summary="GoHighLevel Status",
    description="Whether the CRM is configured and how many members are synced.",
)
async def ghl_status(tenant: TenantDep, session: SessionDep) -> ActionResponse[GHLStatus]:
    return await GHLService(session).status(tenant.organization_id)


@router.post(
    "/ghl/test",
    response_model=ActionResponse[GHLConnectionTest],
    summary="Test GoHighLevel Connection",
    responses={400: {"model": ErrorResponse, "description": "GoHighLevel is not configured"}},
)
async def ghl_test_connection(tenant: TenantDep, session: SessionDep) -> ActionResponse[GHLConnectionTest]:
    return await GHLService(session).test_connection(tenant.organization_id)


@router.post(
    "/ghl/tokens",
    response_model=ActionResponse[None],
    summary="Store GoHighLevel Tokens",
    description="Save the OAuth tokens of a completed GoHighLevel authorization. Administrators only.",
    responses={403: {"model": ErrorResponse, "description": "Caller is not an administrator"}},
)
async def ghl_store_tokens(payload: GHLTokenStore, tenant: TenantDep, session: SessionDep) -> ActionResponse[None]:
    """
    Store GoHighLevel OAuth tokens.

    The access token is refreshed automatically shortly before it expires.

    - **access_token** / **refresh_token**: Tokens returned by the OAuth exchange.
    - **expires_in**: Access token lifetime in seconds.
    - **ghl_location_id**: GoHighLevel sub-account the tokens belong to.
    """
    require_admin(tenant.scope)
    return await GHLService(session).store_tokens(tenant.organization_id, payload)


@router.get(
    "/email/stats",
    response_model=ActionResponse[EmailStats],
    summary="Email Statistics",
    description="Counts of sent, failed and skipped emails of the organization.",
)
async def email_stats(tenant: TenantDep, session: SessionDep) -> ActionResponse[EmailStats]:
    return ActionResponse(data=await EmailService(session).stats(tenant.organization_id))
