"""
Route dependencies.

Shared ``Annotated`` aliases for the database session, the resolved tenant
and the file storage used by the API endpoints.
"""

from typing import Annotated, Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from churchsync.core.database.session import get_session
from churchsync.integrations.storage import FileStorage, get_storage
from churchsync.server.core.constant import USER_ID_HEADER
from churchsync.server.services.tenancy import TenantContext, require_dashboard_access

SessionDep = Annotated[AsyncSession, Depends(get_session)]


async def get_tenant(
    slug: str,
    session: SessionDep,
    user_id: Annotated[Optional[str], Header(alias=USER_ID_HEADER)] = None,
) -> TenantContext:
    return await require_dashboard_access(session, slug, user_id)


TenantDep = Annotated[TenantContext, Depends(get_tenant)]
StorageDep = Annotated[FileStorage, Depends(get_storage)]
