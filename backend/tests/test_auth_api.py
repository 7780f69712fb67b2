"""
注册与登录接口测试
"""

import pytest
from sqlalchemy import select

from core.security import decode_token, verify_password
from models import User


class TestRegister:
    """用户注册"""

    @pytest.mark.asyncio
    async def test_register(self, client, db):
        response = await client.post("/api/users", json={
            "name": "alice",
            "email": "alice@example.com",
            "password": "secret123"
        })

        assert response.status_code == 201
        assert response.json() == {"message": "Success", "user_name": "alice"}

        user = (await db.execute(select(User).where(User.email == "alice@example.com"))).scalar_one()
        assert response.headers["location"] == f"/api/users/{user.id}"
        assert user.password != "secret123"
        assert verify_password("secret123", user.password)

        cookie = response.headers["set-cookie"]
        assert cookie.startswith("TOKEN=")
        assert "HttpOnly" in cookie
        assert "Path=/" in cookie
        claims = decode_token(response.cookies["TOKEN"])
        assert claims.user_id == user.id

    @pytest.mark.asyncio
    async def test_register_then_use_cookie(self, client):
        await client.post("/api/users", json={
            "name": "alice",
            "email": "alice@example.com",
            "password": "secret123"
        })

        response = await client.get("/api/tags")
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_register_missing_field(self, client):
        response = await client.post("/api/users", json={"name": "alice", "email": "a@example.com"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, client, login_user):
        response = await client.post("/api/users", json={
            "name": "again",
            "email": login_user.email,
            "password": "x"
        })

        assert response.status_code == 422
        assert response.json()["message"] == "Unprocessable entity (email)"

    @pytest.mark.asyncio
    async def test_register_without_secret(self, client, db, settings):
        settings.set("jwt_secret", None)
        response = await client.post("/api/users", json={
            "name": "alice",
            "email": "alice@example.com",
            "password": "secret123"
        })

        assert response.status_code == 500
        result = await db.execute(select(User).where(User.email == "alice@example.com"))
        assert result.scalar_one_or_none() is None

    @pytest.mark.asyncio
    async def test_register_requires_json(self, client):
        response = await client.post("/api/users", data={"name": "alice"})
        assert response.status_code == 415


class TestLogin:
    """用户登录"""

    @pytest.mark.asyncio
    async def test_login(self, client, login_user):
        response = await client.post("/api/login", json={
            "email": login_user.email,
            "password": "password123"
        })

        assert response.status_code == 200
        assert response.json() == {"message": "Success"}
        assert decode_token(response.cookies["TOKEN"]).user_id == login_user.id

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client, login_user):
        response = await client.post("/api/login", json={
            "email": login_user.email,
            "password": "wrong"
        })

        assert response.status_code == 401
        assert "TOKEN" not in response.cookies

    @pytest.mark.asyncio
    async def test_login_unknown_email(self, client):
        response = await client.post("/api/login", json={
            "email": "nobody@example.com",
            "password": "whatever"
        })
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_login_missing_field(self, client):
        response = await client.post("/api/login", json={"email": "nobody@example.com"})
        assert response.status_code == 400
