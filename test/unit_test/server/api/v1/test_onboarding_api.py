"""
API tests for onboarding configuration and the public document link.
"""

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def test_document_upload_and_public_download(client: AsyncClient, seeded, storage):
    await storage.put("docs/handbook.pdf", b"%PDF")
    headers = seeded.headers(seeded.admin)

    created = await client.post(
        seeded.url("/onboarding/documents"), json={"name": "Handbook", "file_key": "docs/handbook.pdf"}, headers=headers
    )
    assert created.status_code == 201
    document_id = created.json()["data"]["id"]

    listed = await client.get(seeded.url("/onboarding/documents"), headers=seeded.headers(seeded.staff))
    assert [document["name"] for document in listed.json()["data"]] == ["Handbook"]

    download = await client.get(f"/api/v1/public/documents/{document_id}")
    assert download.status_code == 200
    assert download.content == b"%PDF"
    assert download.headers["content-type"] == "application/pdf"
    assert download.headers["content-disposition"] == 'inline; filename="Handbook.pdf"'

    deleted = await client.delete(seeded.url(f"/onboarding/documents/{document_id}"), headers=headers)
    assert deleted.json()["message"] == "Document deleted successfully"
    gone = await client.get(f"/api/v1/public/documents/{document_id}")
    assert gone.status_code == 404


async def test_ministry_document_needs_category(client: AsyncClient, seeded):
    response = await client.post(
        seeded.url("/onboarding/documents"),
        json={"name": "Kids Policy", "file_key": "docs/kids.pdf", "scope": "MINISTRY_SPECIFIC"},
        headers=seeded.headers(seeded.admin),
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Ministry category is required for ministry-specific documents"


async def test_staff_cannot_add_documents(client: AsyncClient, seeded):
    response = await client.post(
        seeded.url("/onboarding/documents"),
        json={"name": "Handbook", "file_key": "docs/handbook.pdf"},
        headers=seeded.headers(seeded.staff),
    )

    assert response.status_code == 403


async def test_requirement_upsert(client: AsyncClient, seeded):
    headers = seeded.headers(seeded.admin)

    await client.put(
        seeded.url("/onboarding/requirements/KIDS_MINISTRY"), json={"background_check_required": True}, headers=headers
    )
    await client.put(
        seeded.url("/onboarding/requirements/KIDS_MINISTRY"),
        json={"background_check_required": True, "training_required": True},
        headers=headers,
    )

    response = await client.get(seeded.url("/onboarding/requirements"), headers=headers)
    requirements = response.json()["data"]
    assert len(requirements) == 1
    assert requirements[0]["category"] == "KIDS_MINISTRY"
    assert requirements[0]["training_required"] is True


async def test_background_check_config(client: AsyncClient, seeded):
    headers = seeded.headers(seeded.admin)

    saved = await client.put(
        seeded.url("/onboarding/background-check-config"),
        json={"provider": "Protect My Ministry", "application_url": "https://checks.example.com", "validity_months": 36},
        headers=headers,
    )
    fetched = await client.get(seeded.url("/onboarding/background-check-config"), headers=headers)

    assert saved.status_code == 200
    assert fetched.json()["data"]["provider"] == "Protect My Ministry"
    assert fetched.json()["data"]["validity_months"] == 36
