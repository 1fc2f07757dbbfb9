"""Integration tests for how domain errors reach HTTP clients."""

from __future__ import annotations

import pytest
from fastapi import FastAPI, status
from httpx import AsyncClient
from lms.core.errors import ConflictError, StorageError
from lms.domain.services import CompletionEngine
from lms.infrastructure.repositories.certificates import CertificateRepository
from tests.utils import login, seed_course, seed_user


class TestStorageFailure:
    @pytest.mark.asyncio
    async def test_storage_error_is_generic_500(
        self, async_client: AsyncClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        async def failing_lookup(self: CertificateRepository, token: str) -> None:
            raise StorageError("Storage failure during certificate_details")

        monkeypatch.setattr(CertificateRepository, "get_details", failing_lookup)

        response = await async_client.get("/certificates/some-token")

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json() == {"detail": "Internal server error"}
        assert "certificate_details" not in response.text


class TestMalformedIdentifiers:
    @pytest.mark.asyncio
    async def test_non_integer_lesson_id_is_400(
        self, app: FastAPI, async_client: AsyncClient
    ) -> None:
        await seed_user(app, "ada")
        await login(async_client, "ada")

        response = await async_client.post("/lessons/abc/complete")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "Invalid input"

    @pytest.mark.asyncio
    async def test_non_integer_course_id_is_400(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/courses/not-a-number")

        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestConflict:
    @pytest.mark.asyncio
    async def test_conflict_hides_operation_names(
        self, app: FastAPI, async_client: AsyncClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        await seed_user(app, "ada")
        _, lessons = await seed_course(app, lessons=1)
        await login(async_client, "ada")

        async def conflicting(self: CompletionEngine, *, user_id: int, lesson_id: int) -> None:
            raise ConflictError("Duplicate value during completion_add")

        monkeypatch.setattr(CompletionEngine, "complete_lesson", conflicting)

        response = await async_client.post(f"/lessons/{lessons[0].lesson_id}/complete")

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json() == {"detail": "Conflict"}
