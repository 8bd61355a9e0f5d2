"""
Connect card export endpoints.

Exports turn reviewed connect cards into a CSV in one of the supported
church management formats. The file is stored and can be downloaded again
from the export history.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, status
from fastapi.responses import Response

from churchsync.core.models.io.common import ActionResponse, ErrorResponse
from churchsync.core.models.io.exports import DataExportRead, ExportPreview, ExportRequest
from churchsync.server.services.deps import SessionDep, StorageDep, TenantDep
from churchsync.server.services.exports import ExportService

router = APIRouter(tags=["exports"])

EXPORT_ROLE = {403: {"model": ErrorResponse, "description": "Caller may not export data"}}


@router.post(
    "/preview",
    response_model=ActionResponse[ExportPreview],
    summary="Preview Export",
    description="Headers, the first rows and the de-duplicated total of an export, without generating a file.",
    responses=EXPORT_ROLE,
)
async def export_preview(payload: ExportRequest, tenant: TenantDep, session: SessionDep) -> ActionResponse[ExportPreview]:
    return await ExportService(session).export_preview(tenant, payload)


@router.post(
    "",
    response_model=ActionResponse[DataExportRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create Export",
    response_description="The recorded export; download it with the download endpoint.",
    responses={400: {"model": ErrorResponse, "description": "No records match the filters"}, **EXPORT_ROLE},
)
async def create_export(
    payload: ExportRequest, tenant: TenantDep, session: SessionDep, storage: StorageDep
) -> ActionResponse[DataExportRead]:
    """
    Generate an export.

    Cards sharing an email address are exported once, keeping the most recent. Exported cards
    are stamped so later exports can be limited to new cards.

    - **format**: GENERIC_CSV, PLANNING_CENTER_CSV or BREEZE_CSV.
    - **filters.location_id**: Campus to export; single-campus users always export their own campus.
    - **filters.date_from** / **filters.date_to**: Scan date range.
    - **filters.only_new**: Skip cards that were already exported.
    """
    return await ExportService(session, storage=storage).create_export(tenant, payload)


@router.get(
    "",
    response_model=ActionResponse[List[DataExportRead]],
    summary="Export History",
    responses=EXPORT_ROLE,
)
async def export_history(tenant: TenantDep, session: SessionDep) -> ActionResponse[List[DataExportRead]]:
    return await ExportService(session).export_history(tenant)


@router.get(
    "/{export_id}/download",
    response_class=Response,
    summary="Download Export",
    responses={
        200: {"content": {"text/csv": {}}, "description": "The CSV file"},
        404: {"model": ErrorResponse, "description": "Export not found"},
        **EXPORT_ROLE,
    },
)
async def download_export(export_id: str, tenant: TenantDep, session: SessionDep, storage: StorageDep) -> Response:
    export, content = await ExportService(session, storage=storage).download_export(tenant, export_id)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export.file_name}"'},
    )
