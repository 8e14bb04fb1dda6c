"""Integration tests for registration, login and the session cookie."""

from httpx import AsyncClient

from tests.conftest import TEST_PASSWORD, bearer, register_and_login

AUTH = "/api/v1/auth"


class TestRegistration:
    async def test_register_success(self, client: AsyncClient):
        response = await client.post(f"{AUTH}/register", json={"username": "luther", "password": TEST_PASSWORD})
        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "User registered successfully. Please login to continue"
        assert data["user"]["username"] == "luther"
        assert "password" not in data["user"]
        assert "password_hash" not in data["user"]

    async def test_duplicate_username(self, client: AsyncClient):
        body = {"username": "luther", "password": TEST_PASSWORD}
        await client.post(f"{AUTH}/register", json=body)
        response = await client.post(f"{AUTH}/register", json=body)
        assert response.status_code == 409

    async def test_weak_password(self, client: AsyncClient):
        response = await client.post(f"{AUTH}/register", json={"username": "luther", "password": "short"})
        assert response.status_code == 400
        assert "at least" in response.json()["detail"]

    async def test_missing_fields(self, client: AsyncClient):
        response = await client.post(f"{AUTH}/register", json={"username": "luther"})
        assert response.status_code == 422
        assert response.json()["detail"] == "Validation error"

    async def test_username_is_stripped(self, client: AsyncClient):
        response = await client.post(
            f"{AUTH}/register", json={"username": "  luther  ", "password": TEST_PASSWORD}
        )
        assert response.status_code == 201
        assert response.json()["user"]["username"] == "luther"


class TestLogin:
    async def test_login_sets_cookie(self, client: AsyncClient):
        await client.post(f"{AUTH}/register", json={"username": "luther", "password": TEST_PASSWORD})

        response = await client.post(f"{AUTH}/login", json={"username": "luther", "password": TEST_PASSWORD})
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Login successful"
        assert data["token_type"] == "bearer"
        assert data["expires_in"] == 12 * 60 * 60
        assert data["user"]["username"] == "luther"

        cookie = response.headers["set-cookie"]
        assert cookie.startswith(f"auth={data['access_token']}")
        assert "httponly" in cookie.lower()

    async def test_wrong_password(self, client: AsyncClient):
        await client.post(f"{AUTH}/register", json={"username": "luther", "password": TEST_PASSWORD})
        response = await client.post(f"{AUTH}/login", json={"username": "luther", "password": "WrongP@ss1"})
        assert response.status_code == 401

    async def test_unknown_user_same_error(self, client: AsyncClient):
        await client.post(f"{AUTH}/register", json={"username": "luther", "password": TEST_PASSWORD})
        wrong_password = await client.post(f"{AUTH}/login", json={"username": "luther", "password": "WrongP@ss1"})
        unknown_user = await client.post(f"{AUTH}/login", json={"username": "nobody", "password": "WrongP@ss1"})
        assert unknown_user.status_code == 401
        assert unknown_user.json() == wrong_password.json()


class TestSession:
    async def test_me_with_bearer(self, client: AsyncClient):
        token = await register_and_login(client, "luther")
        response = await client.get(f"{AUTH}/me", headers=bearer(token))
        assert response.status_code == 200
        assert response.json()["username"] == "luther"

    async def test_me_with_cookie(self, client: AsyncClient):
        token = await register_and_login(client, "luther")
        response = await client.get(f"{AUTH}/me", headers={"Cookie": f"auth={token}"})
        assert response.status_code == 200
        assert response.json()["username"] == "luther"

    async def test_me_without_token(self, client: AsyncClient):
        response = await client.get(f"{AUTH}/me")
        assert response.status_code == 401
        assert response.json()["detail"] == "Authentication token is missing"

    async def test_logout_clears_cookie(self, client: AsyncClient):
        response = await client.post(f"{AUTH}/logout")
        assert response.status_code == 200
        assert response.json() == {"status": "logged_out"}
        cookie = response.headers["set-cookie"]
        assert cookie.startswith("auth=")
        assert "max-age=0" in cookie.lower()
