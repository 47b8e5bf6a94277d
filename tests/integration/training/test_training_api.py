"""Integration tests for the training example endpoints."""

from uuid import uuid4

import pytest
from httpx import AsyncClient

from quotewise.modules.users.models import User


pytestmark = pytest.mark.integration

URL = "/api/training"

EXAMPLE = {
    "prompt": "How much for a 20 square metre deck?",
    "response": "Around $9,500 including materials and two days of labour.",
    "category": "decking",
    "tags": ["deck", "hardwood"],
    "quality": 5,
}


async def create(client: AsyncClient, headers: dict, **overrides) -> dict:
    response = await client.post(URL, json={**EXAMPLE, **overrides}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestCreate:
    async def test_create_stamps_company_and_author(
        self, client: AsyncClient, auth_headers, user: User
    ):
        data = await create(client, auth_headers)

        assert data["companyId"] == str(user.company_id)
        assert data["userId"] == str(user.id)
        assert data["tags"] == ["deck", "hardwood"]
        assert data["quality"] == 5

    async def test_minimal_example(self, client: AsyncClient, auth_headers):
        response = await client.post(
            URL, json={"prompt": "Paint a fence", "response": "About $800."}, headers=auth_headers
        )

        assert response.status_code == 201
        assert response.json()["tags"] == []
        assert response.json()["quality"] is None

    @pytest.mark.parametrize(
        "overrides",
        [{"prompt": ""}, {"response": ""}, {"quality": 0}, {"quality": 6}],
    )
    async def test_invalid_example(self, client: AsyncClient, auth_headers, overrides):
        response = await client.post(URL, json={**EXAMPLE, **overrides}, headers=auth_headers)

        assert response.status_code == 422

    async def test_requires_auth(self, client: AsyncClient):
        response = await client.post(URL, json=EXAMPLE)

        assert response.status_code == 401


class TestList:
    async def test_lists_own_company_only(
        self, client: AsyncClient, auth_headers, other_user: User, make_headers
    ):
        mine = await create(client, auth_headers)
        await create(client, make_headers(other_user), prompt="Someone else's question")

        response = await client.get(URL, headers=auth_headers)

        assert response.status_code == 200
        assert [e["id"] for e in response.json()] == [mine["id"]]

    async def test_filter_by_category(self, client: AsyncClient, auth_headers):
        await create(client, auth_headers)
        fencing = await create(client, auth_headers, category="fencing")

        response = await client.get(URL, params={"category": "fencing"}, headers=auth_headers)

        assert [e["id"] for e in response.json()] == [fencing["id"]]


class TestDelete:
    async def test_delete(self, client: AsyncClient, auth_headers):
        created = await create(client, auth_headers)

        deleted = await client.delete(f"{URL}/{created['id']}", headers=auth_headers)
        remaining = await client.get(URL, headers=auth_headers)

        assert deleted.status_code == 204
        assert remaining.json() == []

    async def test_other_company_cannot_delete(
        self, client: AsyncClient, auth_headers, other_user: User, make_headers
    ):
        created = await create(client, auth_headers)

        response = await client.delete(f"{URL}/{created['id']}", headers=make_headers(other_user))

        assert response.status_code == 404

    async def test_unknown_example(self, client: AsyncClient, auth_headers):
        response = await client.delete(f"{URL}/{uuid4()}", headers=auth_headers)

        assert response.status_code == 404


class TestComposedIntoChat:
    async def test_examples_reach_the_composed_prompt(self, client: AsyncClient, auth_headers):
        await create(client, auth_headers)

        response = await client.post(
            "/api/ai/compose", json={"message": "Price a deck"}, headers=auth_headers
        )

        layers = {m["layer"]: m["content"] for m in response.json()["messages"]}
        assert "Request: How much for a 20 square metre deck?" in layers["examples"]
        assert list(layers)[-1] == "user"
