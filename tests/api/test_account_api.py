"""
API tests for login and account management
"""
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from shared.auth import decode_token
from services.file_portal.core import catalog


class TestLogin:
    """Tests for POST /account/login"""

    async def test_login_success(self, client: AsyncClient, admin_credentials):
        response = await client.post("/account/login", json=admin_credentials)

        assert response.status_code == 200
        data = response.json()
        assert data["role"] == "admin"
        assert data["token_type"] == "bearer"
        claims = decode_token(data["access_token"])
        assert claims["sub"] == admin_credentials["username"]
        assert claims["role"] == "admin"

    async def test_login_ignores_username_case(self, client: AsyncClient, admin_credentials):
        payload = dict(admin_credentials, username=admin_credentials["username"].upper())
        response = await client.post("/account/login", json=payload)
        assert response.status_code == 200

    async def test_login_invalid_credentials(self, client: AsyncClient, admin_credentials):
        payload = dict(admin_credentials, password="wrongpassword")
        response = await client.post("/account/login", json=payload)
        assert response.status_code == 401

    async def test_token_works_for_me(self, client: AsyncClient, admin_credentials):
        token = (await client.post("/account/login", json=admin_credentials)).json()["access_token"]

        response = await client.get("/account/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        assert response.json()["username"] == admin_credentials["username"]

    async def test_me_requires_token(self, client: AsyncClient):
        response = await client.get("/account/me")
        assert response.status_code == 401


class TestUserManagement:
    """Tests for admin-only account endpoints"""

    async def test_admin_creates_teacher(self, client: AsyncClient, admin_auth_headers):
        response = await client.post(
            "/account/users",
            json={"username": "priya", "password": "secret123", "assigned_classes": ["VII", "VI"]},
            headers=admin_auth_headers
        )
        assert response.status_code == 201
        data = response.json()
        assert data["role"] == "teacher"
        assert data["assigned_classes"] == ["VI", "VII"]

        login = await client.post("/account/login", json={"username": "priya", "password": "secret123"})
        assert login.status_code == 200

        teachers = await client.get("/account/teachers", headers=admin_auth_headers)
        assert [t["username"] for t in teachers.json()] == ["priya"]

    async def test_duplicate_username(self, client: AsyncClient, admin_auth_headers):
        payload = {"username": "priya", "password": "secret123"}
        await client.post("/account/users", json=payload, headers=admin_auth_headers)

        response = await client.post(
            "/account/users", json=dict(payload, username="PRIYA"), headers=admin_auth_headers
        )
        assert response.status_code == 409

    async def test_short_password_rejected(self, client: AsyncClient, admin_auth_headers):
        response = await client.post(
            "/account/users", json={"username": "priya", "password": "123"}, headers=admin_auth_headers
        )
        assert response.status_code == 422

    async def test_teacher_cannot_manage_users(self, client: AsyncClient, teacher_auth_headers):
        response = await client.post(
            "/account/users", json={"username": "x", "password": "secret123"}, headers=teacher_auth_headers
        )
        assert response.status_code == 403
        assert (await client.get("/account/teachers", headers=teacher_auth_headers)).status_code == 403

    async def test_deactivate_teacher(self, client: AsyncClient, admin_auth_headers, teacher_user):
        response = await client.delete(f"/account/users/{teacher_user.id}", headers=admin_auth_headers)
        assert response.status_code == 200
        assert response.json()["is_active"] is False

        login = await client.post(
            "/account/login", json={"username": teacher_user.username, "password": "teacherpassword123"}
        )
        assert login.status_code == 401

    async def test_admin_cannot_deactivate_self(self, client: AsyncClient, admin_auth_headers, admin_user):
        response = await client.delete(f"/account/users/{admin_user.id}", headers=admin_auth_headers)
        assert response.status_code == 400


class TestDeactivatedTokens:
    """Tokens are checked against the account on every request"""

    async def test_me_refused_after_deactivation(self, client: AsyncClient, admin_auth_headers,
                                                 teacher_auth_headers, teacher_user):
        await client.delete(f"/account/users/{teacher_user.id}", headers=admin_auth_headers)

        response = await client.get("/account/me", headers=teacher_auth_headers)
        assert response.status_code == 401

    async def test_deactivated_admin_cannot_create_users(self, client: AsyncClient, db_session: AsyncSession,
                                                         admin_auth_headers, admin_user):
        await catalog.deactivate_user(db_session, admin_user.id)

        response = await client.post(
            "/account/users", json={"username": "priya", "password": "secret123"}, headers=admin_auth_headers
        )
        assert response.status_code == 401
        assert (await client.get("/account/teachers", headers=admin_auth_headers)).status_code == 401
