"""Integration tests for authentication endpoints."""

from __future__ import annotations

import pytest
from fastapi import FastAPI, status
from httpx import AsyncClient
from tests.utils import login, seed_user

COOKIE = "lms_session"


class TestRegisterEndpoint:
    """Tests for POST /register."""

    @pytest.mark.asyncio
    async def test_register_success(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/register", json={"username": "ada", "password": "password123"}
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["message"] == "Registration successful"
        assert data["user"]["username"] == "ada"
        assert data["user"]["role"] == "student"
        assert "password" not in str(data)

    @pytest.mark.asyncio
    async def test_register_duplicate_username(self, async_client: AsyncClient) -> None:
        payload = {"username": "ada", "password": "password123"}
        await async_client.post("/register", json=payload)

        response = await async_client.post("/register", json=payload)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert "already taken" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_register_short_password_is_invalid_input(
        self, async_client: AsyncClient
    ) -> None:
        response = await async_client.post(
            "/register", json={"username": "ada", "password": "short"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.asyncio
    async def test_register_padded_short_username_is_invalid_input(
        self, async_client: AsyncClient
    ) -> None:
        response = await async_client.post(
            "/register", json={"username": "  a", "password": "password123"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestLoginEndpoint:
    """Tests for POST /login."""

    @pytest.mark.asyncio
    async def test_login_sets_session_cookie(self, app: FastAPI, async_client: AsyncClient) -> None:
        await seed_user(app, "ada")

        response = await login(async_client, "ada")

        assert response.json()["user"]["username"] == "ada"
        cookie = response.headers["set-cookie"].lower()
        assert COOKIE in cookie
        assert "httponly" in cookie

    @pytest.mark.asyncio
    async def test_failures_do_not_reveal_whether_user_exists(
        self, app: FastAPI, async_client: AsyncClient
    ) -> None:
        await seed_user(app, "ada")

        wrong_password = await async_client.post(
            "/login", json={"username": "ada", "password": "wrong-password"}
        )
        unknown_user = await async_client.post(
            "/login", json={"username": "nobody", "password": "wrong-password"}
        )

        assert wrong_password.status_code == unknown_user.status_code
        assert wrong_password.status_code == status.HTTP_401_UNAUTHORIZED
        assert wrong_password.json() == unknown_user.json()
        assert "set-cookie" not in wrong_password.headers

    @pytest.mark.asyncio
    async def test_login_rotates_session_identifier(
        self, app: FastAPI, async_client: AsyncClient
    ) -> None:
        await seed_user(app, "ada")
        first = (await login(async_client, "ada")).cookies[COOKIE]

        second = (await login(async_client, "ada")).cookies[COOKIE]

        assert first != second
        stale = await async_client.get("/me", headers={"Cookie": f"{COOKIE}={first}"})
        assert stale.status_code == status.HTTP_303_SEE_OTHER


class TestSessionEndpoints:
    @pytest.mark.asyncio
    async def test_me_requires_login(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/me")

        assert response.status_code == status.HTTP_303_SEE_OTHER
        assert response.headers["location"] == "/login"

    @pytest.mark.asyncio
    async def test_me_returns_current_user(self, app: FastAPI, async_client: AsyncClient) -> None:
        user = await seed_user(app, "ada")
        await login(async_client, "ada")

        response = await async_client.get("/me")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["id"] == user.user_id

    @pytest.mark.asyncio
    async def test_logout_destroys_session(self, app: FastAPI, async_client: AsyncClient) -> None:
        await seed_user(app, "ada")
        session_id = (await login(async_client, "ada")).cookies[COOKIE]

        response = await async_client.post("/logout")

        assert response.status_code == status.HTTP_303_SEE_OTHER
        assert response.headers["location"] == "/login"
        replay = await async_client.get("/me", headers={"Cookie": f"{COOKIE}={session_id}"})
        assert replay.status_code == status.HTTP_303_SEE_OTHER

    @pytest.mark.asyncio
    async def test_login_page_is_reachable(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/login")

        assert response.status_code == status.HTTP_200_OK
