"""
API tests for the two-step file upload.
"""

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio

PNG = b"\x89PNG\r\n\x1a\nfake"


async def ticket(client: AsyncClient, seeded, **overrides):
    payload = {"file_name": "card.png", "content_type": "image/png", "size": len(PNG), "is_image": True}
    payload.update(overrides)
    return await client.post(seeded.url("/uploads"), json=payload, headers=seeded.headers(seeded.admin))


async def test_upload_fetch_delete(client: AsyncClient, seeded, storage):
    issued = await ticket(client, seeded)
    assert issued.status_code == 200
    key = issued.json()["data"]["key"]
    assert issued.json()["data"]["upload_url"].endswith(f"/api/v1/orgs/grace/uploads/{key}")
    headers = seeded.headers(seeded.admin)

    stored = await client.put(
        seeded.url(f"/uploads/{key}"), content=PNG, headers={**headers, "Content-Type": "image/png"}
    )
    assert stored.json()["message"] == "File uploaded"
    assert await storage.get(key) == PNG

    fetched = await client.get(seeded.url(f"/uploads/{key}"), headers=seeded.headers(seeded.staff))
    assert fetched.status_code == 200
    assert fetched.content == PNG
    assert fetched.headers["content-type"] == "image/png"

    deleted = await client.delete(seeded.url(f"/uploads/{key}"), headers=headers)
    assert deleted.json()["message"] == "File deleted"
    again = await client.delete(seeded.url(f"/uploads/{key}"), headers=headers)
    assert again.json()["message"] == "File already removed"


async def test_image_only_ticket_rejects_pdf(client: AsyncClient, seeded):
    response = await ticket(client, seeded, file_name="handbook.pdf", content_type="application/pdf")

    assert response.status_code == 400
    assert response.json()["message"] == "Only image files are allowed"


async def test_staff_cannot_upload(client: AsyncClient, seeded):
    response = await client.post(
        seeded.url("/uploads"),
        json={"file_name": "card.png", "content_type": "image/png", "size": 10},
        headers=seeded.headers(seeded.staff),
    )

    assert response.status_code == 403


async def test_invalid_key(client: AsyncClient, seeded):
    response = await client.put(
        seeded.url("/uploads/not-a-key"), content=PNG, headers={**seeded.headers(seeded.admin), "Content-Type": "image/png"}
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid file key"
