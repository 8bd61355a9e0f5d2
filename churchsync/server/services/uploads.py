"""
Upload Service.

Two-step uploads: the dashboard first asks for an upload ticket (validated
content type and size, unique key) and then PUTs the bytes to the returned
URL. Stored files are addressed by that key from documents, courses and
lessons.
"""

from __future__ import annotations

import re
from typing import Optional

from churchsync.core.errors import BusinessRuleError
from churchsync.core.logging_config import get_logger
from churchsync.core.models.io.common import ActionResponse
from churchsync.core.models.io.exports import UploadRequest, UploadTicket
from churchsync.core.rate_limit import RateLimitTier
from churchsync.core.tenancy import require_admin
from churchsync.integrations.storage import FileStorage, get_storage, unique_upload_key
from churchsync.server.core.config import StorageConfig, settings
from churchsync.server.core.constant import ORG_PREFIX

from .tenancy import TenantContext

logger = get_logger(__name__)

UPLOAD_KEY_PATTERN = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}-[A-Za-z0-9._-]+$")


def upload_url(slug: str, key: str) -> str:
    return f"{settings.public_base_url}{ORG_PREFIX.format(slug=slug)}/uploads/{key}"


def validate_upload_key(key: str) -> str:
    if not UPLOAD_KEY_PATTERN.match(key):
        raise BusinessRuleError("Invalid file key")
    return key


class UploadService:
    def __init__(self, storage: Optional[FileStorage] = None, config: Optional[StorageConfig] = None) -> None:
        self.storage = storage or get_storage()
        self.config = config or settings.storage

    def _check_file(self, content_type: str, size: int, is_image: bool = False) -> None:
        content_type = content_type.split(";")[0].strip().lower()
        if content_type not in self.config.allowed_content_types:
            raise BusinessRuleError(f"File type {content_type} is not allowed")
        if is_image and not content_type.startswith("image/"):
            raise BusinessRuleError("Only image files are allowed")
        if size > self.config.max_upload_bytes:
            limit_mb = self.config.max_upload_bytes // (1024 * 1024)
            raise BusinessRuleError(f"File too large (max {limit_mb}MB)")

    async def request_upload(self, tenant: TenantContext, payload: UploadRequest) -> ActionResponse[UploadTicket]:
        """Validate an upload and hand out a unique key and the URL to PUT it to."""
        require_admin(tenant.scope)
        tenant.rate_limit("request_upload", RateLimitTier.STANDARD)
        self._check_file(payload.content_type, payload.size, payload.is_image)

        key = unique_upload_key(payload.file_name)
        return ActionResponse(
            message="Upload ready",
            data=UploadTicket(key=key, upload_url=upload_url(tenant.organization.slug, key)),
        )

    async def store(self, tenant: TenantContext, key: str, data: bytes, content_type: str) -> ActionResponse[None]:
        require_admin(tenant.scope)
        validate_upload_key(key)
        if not data:
            raise BusinessRuleError("Empty upload")
        self._check_file(content_type, len(data))
        await self.storage.put(key, data)
        logger.info(f"Stored upload {key} ({len(data)} bytes) for organization {tenant.organization_id}")
        return ActionResponse(message="File uploaded", data=None)

    async def fetch(self, key: str) -> bytes:
        return await self.storage.get(validate_upload_key(key))

    async def delete(self, tenant: TenantContext, key: str) -> ActionResponse[None]:
        require_admin(tenant.scope)
        tenant.rate_limit("delete_upload", RateLimitTier.STANDARD)
        deleted = await self.storage.delete(validate_upload_key(key))
        return ActionResponse(message="File deleted" if deleted else "File already removed")
