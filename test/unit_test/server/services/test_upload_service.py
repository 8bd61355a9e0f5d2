"""Unit tests for UploadService."""

import pytest

from churchsync.core.errors import BusinessRuleError, PermissionDeniedError
from churchsync.core.models.io.exports import UploadRequest
from churchsync.server.core.config import StorageConfig
from churchsync.server.services.uploads import UploadService, validate_upload_key

SMALL = StorageConfig(max_upload_bytes=1024 * 1024, allowed_content_types=["image/png", "application/pdf"])
KEY = "0f8fad5b-d9cb-469f-a165-70867728950e-card.png"


@pytest.mark.parametrize("key", [KEY, "0f8fad5b-d9cb-469f-a165-70867728950e-file"])
def test_valid_upload_keys(key):
    assert validate_upload_key(key) == key


@pytest.mark.parametrize("key", ["../etc/passwd", "card.png", "0f8fad5b-d9cb-469f-a165-70867728950e-", "exports/grace/x.csv"])
def test_invalid_upload_keys(key):
    with pytest.raises(BusinessRuleError, match="Invalid file key"):
        validate_upload_key(key)


class TestRequestUpload:
    async def test_ticket(self, session, seeded, tenant_for, storage):
        response = await UploadService(storage, SMALL).request_upload(
            await tenant_for(seeded.admin),
            UploadRequest(file_name="My Card (1).png", content_type="image/png; charset=binary", size=2048, is_image=True),
        )

        ticket = response.data
        assert ticket.key.endswith("-My-Card-1-.png")
        assert validate_upload_key(ticket.key) == ticket.key
        assert ticket.upload_url.endswith(f"/api/v1/orgs/grace/uploads/{ticket.key}")

    @pytest.mark.parametrize(
        "request_,message",
        [
            (UploadRequest(file_name="a.exe", content_type="application/x-msdownload", size=10), "not allowed"),
            (UploadRequest(file_name="a.pdf", content_type="application/pdf", size=10, is_image=True), "Only image"),
            (UploadRequest(file_name="a.png", content_type="image/png", size=2 * 1024 * 1024), r"max 1MB"),
        ],
    )
    async def test_rejected(self, session, seeded, tenant_for, storage, request_, message):
        with pytest.raises(BusinessRuleError, match=message):
            await UploadService(storage, SMALL).request_upload(await tenant_for(seeded.admin), request_)

    async def test_staff_cannot_upload(self, session, seeded, tenant_for, storage):
        with pytest.raises(PermissionDeniedError):
            await UploadService(storage, SMALL).request_upload(
                await tenant_for(seeded.staff), UploadRequest(file_name="a.png", content_type="image/png", size=1)
            )


class TestStoredFiles:
    async def test_store_fetch_delete(self, session, seeded, tenant_for, storage):
        service = UploadService(storage, SMALL)
        admin = await tenant_for(seeded.admin)

        await service.store(admin, KEY, b"\x89PNG", "image/png")
        assert await service.fetch(KEY) == b"\x89PNG"

        assert (await service.delete(admin, KEY)).message == "File deleted"
        assert (await service.delete(admin, KEY)).message == "File already removed"

    async def test_store_rejects_empty_and_oversized(self, session, seeded, tenant_for, storage):
        service = UploadService(storage, StorageConfig(max_upload_bytes=4, allowed_content_types=["image/png"]))
        admin = await tenant_for(seeded.admin)

        with pytest.raises(BusinessRuleError, match="Empty upload"):
            await service.store(admin, KEY, b"", "image/png")
        with pytest.raises(BusinessRuleError, match="File too large"):
            await service.store(admin, KEY, b"12345", "image/png")
