"""HTTP tests for /api/v1/gadgets."""

import re

from httpx import AsyncClient

from tests.conftest import register_and_login

GADGETS = "/api/v1/gadgets"
DISPLAY_PATTERN = re.compile(r"^the-[a-z]+-[a-z]+ - (\d{1,3})% success probability$")


async def _create(client: AsyncClient, headers: dict) -> dict:
    response = await client.post(GADGETS, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def _initiate(client: AsyncClient, headers: dict, gadget_id: str) -> str:
    response = await client.post(f"{GADGETS}/{gadget_id}/self-destruct", headers=headers)
    assert response.status_code == 200, response.text
    return response.json()["confirmation_code"]


class TestAuthRequired:
    async def test_list_without_token(self, client: AsyncClient):
        response = await client.get(GADGETS)
        assert response.status_code == 401
        assert response.json()["detail"] == "Authentication token is missing"

    async def test_create_with_garbage_token(self, client: AsyncClient):
        response = await client.post(GADGETS, headers={"Authorization": "Bearer not.a.jwt"})
        assert response.status_code == 401

    async def test_session_cookie_accepted(self, client: AsyncClient):
        token = await register_and_login(client, "benji")
        response = await client.post(GADGETS, headers={"Cookie": f"auth={token}"})
        assert response.status_code == 201


class TestCreateAndList:
    async def test_create_returns_available_gadget(self, client: AsyncClient, agent_headers):
        data = await _create(client, agent_headers)
        assert data["status"] == "AVAILABLE"
        assert re.match(r"^the-[a-z]+-[a-z]+$", data["name"])
        assert data["decommissioned_at"] is None
        assert "confirmation_code" not in data

    async def test_list_includes_display_line(self, client: AsyncClient, agent_headers):
        created = await _create(client, agent_headers)

        response = await client.get(GADGETS, headers=agent_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "All gadgets fetched successfully"
        assert len(data["gadgets"]) == 1
        item = data["gadgets"][0]
        assert item["id"] == created["id"]
        match = DISPLAY_PATTERN.match(item["display"])
        assert match is not None
        assert item["display"].startswith(created["name"])
        assert 1 <= int(match.group(1)) <= 100

    async def test_filter_by_status(self, client: AsyncClient, agent_headers):
        first = await _create(client, agent_headers)
        await _create(client, agent_headers)
        await client.patch(f"{GADGETS}/{first['id']}", json={"status": "deployed"}, headers=agent_headers)

        response = await client.get(GADGETS, params={"status": "deployed"}, headers=agent_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Gadgets of type DEPLOYED fetched successfully"
        assert [g["id"] for g in data["gadgets"]] == [first["id"]]

    async def test_invalid_filter_rejected(self, client: AsyncClient, agent_headers):
        response = await client.get(GADGETS, params={"status": "destroyed"}, headers=agent_headers)
        assert response.status_code == 400
        assert "AVAILABLE, DEPLOYED" in response.json()["detail"]

    async def test_agents_only_see_their_own(self, client: AsyncClient, agent_headers, other_agent_headers):
        await _create(client, agent_headers)

        response = await client.get(GADGETS, headers=other_agent_headers)
        assert response.json()["gadgets"] == []


class TestUpdateStatus:
    async def test_deploy(self, client: AsyncClient, agent_headers):
        gadget = await _create(client, agent_headers)
        response = await client.patch(
            f"{GADGETS}/{gadget['id']}", json={"status": "Deployed"}, headers=agent_headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "DEPLOYED"

    async def test_terminal_target_rejected(self, client: AsyncClient, agent_headers):
        gadget = await _create(client, agent_headers)
        response = await client.patch(
            f"{GADGETS}/{gadget['id']}", json={"status": "DESTROYED"}, headers=agent_headers
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid status. Allowed statuses are: AVAILABLE, DEPLOYED"

    async def test_missing_status_body(self, client: AsyncClient, agent_headers):
        gadget = await _create(client, agent_headers)
        response = await client.patch(f"{GADGETS}/{gadget['id']}", json={}, headers=agent_headers)
        assert response.status_code == 422

    async def test_foreign_and_unknown_look_the_same(
        self, client: AsyncClient, agent_headers, other_agent_headers
    ):
        gadget = await _create(client, agent_headers)

        foreign = await client.patch(
            f"{GADGETS}/{gadget['id']}", json={"status": "deployed"}, headers=other_agent_headers
        )
        unknown = await client.patch(
            f"{GADGETS}/does-not-exist", json={"status": "deployed"}, headers=other_agent_headers
        )
        assert foreign.status_code == unknown.status_code == 404
        assert foreign.json() == unknown.json() == {"detail": "Gadget not found"}


class TestDecommission:
    async def test_decommission_hides_gadget(self, client: AsyncClient, agent_headers):
        gadget = await _create(client, agent_headers)

        response = await client.delete(f"{GADGETS}/{gadget['id']}", headers=agent_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "DECOMMISSIONED"
        assert data["decommissioned_at"] is not None

        listing = await client.get(GADGETS, headers=agent_headers)
        assert listing.json()["gadgets"] == []

    async def test_second_decommission_not_found(self, client: AsyncClient, agent_headers):
        gadget = await _create(client, agent_headers)
        await client.delete(f"{GADGETS}/{gadget['id']}", headers=agent_headers)

        response = await client.delete(f"{GADGETS}/{gadget['id']}", headers=agent_headers)
        assert response.status_code == 404

    async def test_other_agent_cannot_decommission(
        self, client: AsyncClient, agent_headers, other_agent_headers
    ):
        gadget = await _create(client, agent_headers)
        response = await client.delete(f"{GADGETS}/{gadget['id']}", headers=other_agent_headers)
        assert response.status_code == 404

        listing = await client.get(GADGETS, headers=agent_headers)
        assert [g["id"] for g in listing.json()["gadgets"]] == [gadget["id"]]


class TestSelfDestruct:
    async def test_initiate_returns_code(self, client: AsyncClient, agent_headers):
        gadget = await _create(client, agent_headers)

        response = await client.post(f"{GADGETS}/{gadget['id']}/self-destruct", headers=agent_headers)
        assert response.status_code == 200
        data = response.json()
        assert re.fullmatch(r"[A-Za-z0-9]{6}", data["confirmation_code"])
        assert data["id"] == gadget["id"]

        listing = await client.get(GADGETS, headers=agent_headers)
        assert listing.json()["gadgets"][0]["status"] == "AVAILABLE"

    async def test_confirm_destroys(self, client: AsyncClient, agent_headers):
        gadget = await _create(client, agent_headers)
        code = await _initiate(client, agent_headers, gadget["id"])

        response = await client.post(
            f"{GADGETS}/{gadget['id']}/self-destruct",
            json={"confirmation_code": code},
            headers=agent_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "DESTROYED"
        assert data["destroyed_at"] is not None
        assert "confirmation_code" not in data

        listing = await client.get(GADGETS, headers=agent_headers)
        assert listing.json()["gadgets"] == []

    async def test_wrong_code(self, client: AsyncClient, agent_headers):
        gadget = await _create(client, agent_headers)
        code = await _initiate(client, agent_headers, gadget["id"])
        wrong = "000000" if code != "000000" else "111111"

        response = await client.post(
            f"{GADGETS}/{gadget['id']}/self-destruct",
            json={"confirmation_code": wrong},
            headers=agent_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid confirmation code"

        listing = await client.get(GADGETS, headers=agent_headers)
        assert listing.json()["gadgets"][0]["status"] == "AVAILABLE"

    async def test_code_is_case_sensitive(self, client: AsyncClient, agent_headers):
        gadget = await _create(client, agent_headers)
        code = await _initiate(client, agent_headers, gadget["id"])
        flipped = code.swapcase()

        response = await client.post(
            f"{GADGETS}/{gadget['id']}/self-destruct",
            json={"confirmation_code": flipped},
            headers=agent_headers,
        )
        # an all-digit code has no case to flip
        assert response.status_code == (400 if flipped != code else 200)

    async def test_confirm_without_initiate(self, client: AsyncClient, agent_headers):
        gadget = await _create(client, agent_headers)
        response = await client.post(
            f"{GADGETS}/{gadget['id']}/self-destruct",
            json={"confirmation_code": "abc123"},
            headers=agent_headers,
        )
        assert response.status_code == 400

    async def test_destroyed_gadget_not_found(self, client: AsyncClient, agent_headers):
        gadget = await _create(client, agent_headers)
        code = await _initiate(client, agent_headers, gadget["id"])
        await client.post(
            f"{GADGETS}/{gadget['id']}/self-destruct",
            json={"confirmation_code": code},
            headers=agent_headers,
        )

        again = await client.post(f"{GADGETS}/{gadget['id']}/self-destruct", headers=agent_headers)
        assert again.status_code == 404
        revive = await client.patch(
            f"{GADGETS}/{gadget['id']}", json={"status": "available"}, headers=agent_headers
        )
        assert revive.status_code == 404

    async def test_other_agent_cannot_confirm(
        self, client: AsyncClient, agent_headers, other_agent_headers
    ):
        gadget = await _create(client, agent_headers)
        code = await _initiate(client, agent_headers, gadget["id"])

        response = await client.post(
            f"{GADGETS}/{gadget['id']}/self-destruct",
            json={"confirmation_code": code},
            headers=other_agent_headers,
        )
        assert response.status_code == 404

        listing = await client.get(GADGETS, headers=agent_headers)
        assert listing.json()["gadgets"][0]["status"] == "AVAILABLE"
