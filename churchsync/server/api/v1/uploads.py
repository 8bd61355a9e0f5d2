"""
File upload endpoints.

Uploading is two steps: request a ticket (the file type and size are
validated and a unique key is issued), then PUT the raw bytes to the
ticket's URL. The key is what documents, courses and lessons store.
"""

from __future__ import annotations

import mimetypes

from fastapi import APIRouter, Request
from fastapi.responses import Response

from churchsync.core.models.io.common import ActionResponse, ErrorResponse
from churchsync.core.models.io.exports import UploadRequest, UploadTicket
from churchsync.server.services.deps import StorageDep, TenantDep
from churchsync.server.services.uploads import UploadService

router = APIRouter(tags=["uploads"])

INVALID_FILE = {
    400: {"model": ErrorResponse, "description": "Invalid key, type or size"},
    403: {"model": ErrorResponse, "description": "Caller is not an administrator"},
}


@router.post(
    "",
    response_model=ActionResponse[UploadTicket],
    summary="Request Upload",
    description="Validate a file before uploading it and obtain its storage key and upload URL.",
    responses=INVALID_FILE,
)
async def request_upload(payload: UploadRequest, tenant: TenantDep, storage: StorageDep) -> ActionResponse[UploadTicket]:
    """
    Request an upload ticket.

    - **file_name**: Original file name; it is kept, sanitized, at the end of the key.
    - **content_type**: MIME type of the file.
    - **size**: Size in bytes.
    - **is_image**: Only accept image types.
    """
    return await UploadService(storage).request_upload(tenant, payload)


@router.put(
    "/{key}",
    response_model=ActionResponse[None],
    summary="Upload File",
    description="Store the raw request body under a key issued by the upload ticket.",
    responses=INVALID_FILE,
)
async def upload_file(key: str, request: Request, tenant: TenantDep, storage: StorageDep) -> ActionResponse[None]:
    content_type = request.headers.get("content-type", "application/octet-stream")
    return await UploadService(storage).store(tenant, key, await request.body(), content_type)


@router.get(
    "/{key}",
    response_class=Response,
    summary="Get File",
    responses={404: {"model": ErrorResponse, "description": "File not found"}},
)
async def get_file(key: str, tenant: TenantDep, storage: StorageDep) -> Response:
    content = await UploadService(storage).fetch(key)
    media_type, _ = mimetypes.guess_type(key)
    return Response(content=content, media_type=media_type or "application/octet-stream")


@router.delete(
    "/{key}",
    response_model=ActionResponse[None],
    summary="Delete File",
    responses=INVALID_FILE,
)
async def delete_file(key: str, tenant: TenantDep, storage: StorageDep) -> ActionResponse[None]:
    return await UploadService(storage).delete(tenant, key)
