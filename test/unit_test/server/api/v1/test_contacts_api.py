import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def test_contact_lifecycle(client: AsyncClient, seeded):
    headers = seeded.headers(seeded.admin)

    created = await client.post(
        seeded.url("/contacts"),
        json={"name": "Ruth Moab", "email": "ruth@example.com", "tags": ["new"], "location_id": seeded.main.id},
        headers=headers,
    )
    contact_id = created.json()["data"]["id"]
    updated = await client.patch(seeded.url(f"/contacts/{contact_id}"), json={"phone": "555-0100"}, headers=headers)
    note = await client.post(seeded.url(f"/contacts/{contact_id}/notes"), json={"content": "Hi"}, headers=headers)
    notes = await client.get(seeded.url(f"/contacts/{contact_id}/notes"), headers=headers)
    tags = await client.put(seeded.url(f"/contacts/{contact_id}/tags"), json={"tags": ["choir"]}, headers=headers)
    deleted = await client.delete(seeded.url(f"/contacts/{contact_id}"), headers=headers)
    listed = await client.get(seeded.url("/contacts"), headers=headers)

    assert created.status_code == 201
    assert updated.json()["data"]["phone"] == "555-0100"
    assert note.status_code == 201
    assert [n["content"] for n in notes.json()["data"]] == ["Hi"]
    assert tags.json()["data"]["tags"] == ["choir"]
    assert deleted.json() == {"status": "success", "message": "Contact deleted successfully", "data": None}
    assert listed.json()["data"] == []


async def test_duplicate_email_is_a_business_error(client: AsyncClient, seeded):
    headers = seeded.headers(seeded.staff)
    await client.post(seeded.url("/contacts"), json={"name": "Ruth", "email": "ruth@example.com"}, headers=headers)

    response = await client.post(
        seeded.url("/contacts"), json={"name": "Ruth 2", "email": "RUTH@example.com"}, headers=headers
    )

    assert response.status_code == 400
    assert response.json() == {"status": "error", "message": "A contact with this email already exists"}


async def test_invalid_email_is_rejected(client: AsyncClient, seeded):
    response = await client.post(
        seeded.url("/contacts"), json={"name": "Ruth", "email": "not-an-email"}, headers=seeded.headers(seeded.staff)
    )

    assert response.status_code == 422


async def test_bulk_routes(client: AsyncClient, seeded):
    headers = seeded.headers(seeded.admin)
    ids = []
    for name in ("Ruth", "Boaz"):
        created = await client.post(seeded.url("/contacts"), json={"name": name}, headers=headers)
        ids.append(created.json()["data"]["id"])

    typed = await client.post(
        seeded.url("/contacts/bulk/member-type"), json={"contact_ids": ids, "member_type": "MEMBER"}, headers=headers
    )
    tagged = await client.post(seeded.url("/contacts/bulk/tags"), json={"contact_ids": ids, "tag": "youth"}, headers=headers)
    empty = await client.post(seeded.url("/contacts/bulk/delete"), json={"contact_ids": []}, headers=headers)
    deleted = await client.post(seeded.url("/contacts/bulk/delete"), json={"contact_ids": ids}, headers=headers)

    assert typed.json()["message"] == "Updated 2 contact(s)"
    assert tagged.json()["data"] == {"count": 2, "skipped": []}
    assert empty.status_code == 400
    assert empty.json()["message"] == "No contacts selected"
    assert deleted.json()["data"]["count"] == 2


async def test_staff_cannot_delete_contacts(client: AsyncClient, seeded):
    created = await client.post(seeded.url("/contacts"), json={"name": "Ruth"}, headers=seeded.headers(seeded.staff))

    response = await client.delete(
        seeded.url(f"/contacts/{created.json()['data']['id']}"), headers=seeded.headers(seeded.staff)
    )

    assert response.status_code == 403
