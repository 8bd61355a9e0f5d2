import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def test_members_are_scoped_and_searchable(client: AsyncClient, seeded, make_volunteer):
    main = await make_volunteer("Ruth Moab", email="ruth@example.com")
    await make_volunteer("Boaz", email="boaz@example.com", location=seeded.north)
    await make_volunteer("Naomi", email="naomi@example.com")

    scoped = await client.get(seeded.url("/members"), headers=seeded.headers(seeded.staff))
    searched = await client.get(seeded.url("/members"), params={"search": "RUTH@"}, headers=seeded.headers(seeded.admin))
    detail = await client.get(seeded.url(f"/members/{main.church_member_id}"), headers=seeded.headers(seeded.staff))

    assert sorted(member["name"] for member in scoped.json()["data"]) == ["Naomi", "Ruth Moab"]
    assert [member["name"] for member in searched.json()["data"]] == ["Ruth Moab"]
    assert detail.json()["data"]["email"] == "ruth@example.com"


async def test_member_of_other_campus_is_hidden(client: AsyncClient, seeded, make_volunteer):
    north = await make_volunteer("Boaz", location=seeded.north)

    response = await client.get(seeded.url(f"/members/{north.church_member_id}"), headers=seeded.headers(seeded.staff))

    assert response.status_code == 404
