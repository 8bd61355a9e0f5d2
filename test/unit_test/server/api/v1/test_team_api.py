import pytest
from httpx import AsyncClient
from sqlalchemy import select

from churchsync.core.database.entities import Invitation, User
from churchsync.server.core.constant import USER_ID_HEADER

pytestmark = pytest.mark.asyncio


async def test_invite_and_accept(client: AsyncClient, session, seeded):
    invited = await client.post(
        seeded.url("/team/invitations"),
        json={"email": "new@grace.test", "role": "member", "location_id": seeded.main.id},
        headers=seeded.headers(seeded.admin),
    )
    token = (await session.execute(select(Invitation.token))).scalar_one()
    newcomer = User(name="New Person", email="new@grace.test")
    session.add(newcomer)
    await session.commit()

    accepted = await client.post(
        "/api/v1/invitations/accept", json={"token": token}, headers={USER_ID_HEADER: newcomer.id}
    )
    team = await client.get(seeded.url("/team"), headers=seeded.headers(newcomer))

    assert invited.status_code == 201
    assert invited.json()["message"] == "Invitation sent to new@grace.test"
    assert accepted.status_code == 200
    assert accepted.json()["data"] == {"organization_slug": "grace", "redirect_url": "/church/grace/admin"}
    assert "New Person" in [member["name"] for member in team.json()["data"]["members"]]
    assert team.json()["data"]["invitations"] == []


async def test_accept_requires_a_caller(client: AsyncClient):
    response = await client.post("/api/v1/invitations/accept", json={"token": "a" * 64})

    assert response.status_code == 403
    assert response.json()["message"] == "You must be signed in to accept this invitation"


async def test_staff_cannot_invite(client: AsyncClient, seeded):
    response = await client.post(
        seeded.url("/team/invitations"),
        json={"email": "new@grace.test", "location_id": seeded.main.id},
        headers=seeded.headers(seeded.staff),
    )

    assert response.status_code == 403
    assert response.json()["message"] == "You don't have permission to invite team members"


async def test_revoke_and_resend(client: AsyncClient, seeded):
    headers = seeded.headers(seeded.admin)
    invited = await client.post(
        seeded.url("/team/invitations"),
        json={"email": "new@grace.test", "location_id": seeded.main.id},
        headers=headers,
    )
    invitation_id = invited.json()["data"]["id"]

    revoked = await client.delete(seeded.url(f"/team/invitations/{invitation_id}"), headers=headers)
    resent = await client.post(seeded.url(f"/team/invitations/{invitation_id}/resend"), headers=headers)

    assert revoked.json()["data"]["status"] == "EXPIRED"
    assert resent.json()["data"]["status"] == "PENDING"


async def test_update_and_remove_member(client: AsyncClient, seeded):
    headers = seeded.headers(seeded.owner)

    updated = await client.patch(
        seeded.url(f"/team/members/{seeded.north_staff.id}"),
        json={"role": "admin", "location_id": seeded.north.id},
        headers=headers,
    )
    removed = await client.delete(seeded.url(f"/team/members/{seeded.north_staff.id}"), headers=headers)
    last_owner = await client.delete(seeded.url(f"/team/members/{seeded.owner.id}"), headers=seeded.headers(seeded.admin))

    assert updated.json()["data"]["role"] == "church_admin"
    assert updated.json()["data"]["default_location_id"] == seeded.north.id
    assert removed.json()["message"] == "Nina North has been removed from the team"
    assert last_owner.status_code == 400
