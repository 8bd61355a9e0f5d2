"""
Public endpoints.

Links emailed to volunteers: the background check confirmation link and
onboarding document downloads. No caller identity is required.
"""

from __future__ import annotations

import mimetypes
from pathlib import PurePosixPath

from fastapi import APIRouter
from fastapi.responses import Response

from churchsync.core.models.io.common import ActionResponse, ErrorResponse
from churchsync.core.models.io.volunteers import BackgroundCheckConfirmed
from churchsync.integrations.storage import safe_file_name
from churchsync.server.services.deps import SessionDep, StorageDep
from churchsync.server.services.onboarding import OnboardingService
from churchsync.server.services.volunteers import VolunteerService

router = APIRouter(tags=["public"])


@router.get(
    "/background-check/{token}",
    response_model=ActionResponse[BackgroundCheckConfirmed],
    summary="Confirm Background Check",
    description="Volunteer confirms they submitted the background check application.",
    responses={
        404: {"model": ErrorResponse, "description": "Invalid or expired confirmation link"},
        429: {"model": ErrorResponse, "description": "Too many attempts"},
    },
)
async def confirm_background_check(token: str, session: SessionDep) -> ActionResponse[BackgroundCheckConfirmed]:
    return await VolunteerService(session).confirm_background_check(token)


@router.get(
    "/documents/{document_id}",
    response_class=Response,
    summary="Download Onboarding Document",
    responses={404: {"model": ErrorResponse, "description": "Document not found"}},
)
async def download_document(document_id: str, session: SessionDep, storage: StorageDep) -> Response:
    document, content = await OnboardingService(session, storage=storage).get_public_document(document_id)
    media_type, _ = mimetypes.guess_type(document.file_key)
    file_name = safe_file_name(document.name) + PurePosixPath(document.file_key).suffix
    return Response(
        content=content,
        media_type=media_type or "application/octet-stream",
        headers={"Content-Disposition": f'inline; filename="{file_name}"'},
    )
