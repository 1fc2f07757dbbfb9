"""Integration tests for student-facing routes and lesson completion."""

from __future__ import annotations

import re
from datetime import datetime, timedelta

import pytest
from fastapi import FastAPI, status
from httpx import AsyncClient
from lms.core.auth import Role
from tests.utils import login, seed_course, seed_enrollment, seed_user

CERTIFICATE_LINK = re.compile(r'href="/certificates/([^"]+)"')


class TestDashboard:
    @pytest.mark.asyncio
    async def test_guest_sees_catalogue(self, app: FastAPI, async_client: AsyncClient) -> None:
        await seed_course(app, "Python Basics")
        await seed_course(app, "Databases")

        response = await async_client.get("/")

        data = response.json()
        assert data["audience"] == "guest"
        assert [c["title"] for c in data["courses"]] == ["Python Basics", "Databases"]

    @pytest.mark.asyncio
    async def test_student_sees_enrolled_courses(
        self, app: FastAPI, async_client: AsyncClient
    ) -> None:
        user = await seed_user(app, "ada")
        course, _ = await seed_course(app, "Python Basics")
        await seed_course(app, "Databases")
        await seed_enrollment(app, user.user_id, course.course_id)
        await login(async_client, "ada")

        data = (await async_client.get("/")).json()

        assert data["audience"] == "student"
        assert [c["title"] for c in data["courses"]] == ["Python Basics"]

    @pytest.mark.asyncio
    async def test_admin_is_sent_to_admin_dashboard(
        self, app: FastAPI, async_client: AsyncClient
    ) -> None:
        await seed_user(app, "root", role=Role.ADMIN)
        await login(async_client, "root")

        response = await async_client.get("/")

        assert response.status_code == status.HTTP_303_SEE_OTHER
        assert response.headers["location"] == "/admin"


class TestCourseAndLessonViews:
    @pytest.mark.asyncio
    async def test_unknown_course_is_404(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/courses/999")

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_lesson_content_only_for_signed_in_users(
        self, app: FastAPI, async_client: AsyncClient
    ) -> None:
        await seed_user(app, "ada")
        _, lessons = await seed_course(app, lessons=1)
        lesson_id = lessons[0].lesson_id

        anonymous = (await async_client.get(f"/lessons/{lesson_id}")).json()
        await login(async_client, "ada")
        signed_in = (await async_client.get(f"/lessons/{lesson_id}")).json()

        assert anonymous["content"] is None
        assert signed_in["content"] == {"video": None, "text": None, "mcq": None}


class TestCompleteLesson:
    """Tests for POST /lessons/{id}/complete."""

    @pytest.mark.asyncio
    async def test_anonymous_is_redirected_to_login(
        self, app: FastAPI, async_client: AsyncClient
    ) -> None:
        _, lessons = await seed_course(app, lessons=1)

        response = await async_client.post(f"/lessons/{lessons[0].lesson_id}/complete")

        assert response.status_code == status.HTTP_303_SEE_OTHER
        assert response.headers["location"] == "/login"

    @pytest.mark.asyncio
    async def test_returns_completed_fragment(
        self, app: FastAPI, async_client: AsyncClient
    ) -> None:
        await seed_user(app, "ada")
        course, lessons = await seed_course(app, lessons=2)
        await login(async_client, "ada")

        response = await async_client.post(f"/lessons/{lessons[0].lesson_id}/complete")

        assert response.status_code == status.HTTP_200_OK
        assert response.headers["content-type"].startswith("text/html")
        assert "Completed" in response.text
        assert CERTIFICATE_LINK.search(response.text) is None

        detail = (await async_client.get(f"/courses/{course.course_id}")).json()
        assert detail["completed_lesson_ids"] == [lessons[0].lesson_id]

    @pytest.mark.asyncio
    async def test_unknown_lesson_is_404(self, app: FastAPI, async_client: AsyncClient) -> None:
        await seed_user(app, "ada")
        await login(async_client, "ada")

        response = await async_client.post("/lessons/999/complete")

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_finishing_course_links_public_certificate(
        self, app: FastAPI, async_client: AsyncClient
    ) -> None:
        await seed_user(app, "ada")
        _, lessons = await seed_course(app, "Compilers", lessons=2)
        await login(async_client, "ada")

        await async_client.post(f"/lessons/{lessons[1].lesson_id}/complete")
        last = await async_client.post(f"/lessons/{lessons[0].lesson_id}/complete")
        again = await async_client.post(f"/lessons/{lessons[0].lesson_id}/complete")

        match = CERTIFICATE_LINK.search(last.text)
        assert match is not None
        token = match.group(1)
        assert CERTIFICATE_LINK.search(again.text).group(1) == token

        await async_client.post("/logout")
        certificate = await async_client.get(f"/certificates/{token}")

        assert certificate.status_code == status.HTTP_200_OK
        data = certificate.json()
        assert data["student_name"] == "ada"
        assert data["course_title"] == "Compilers"
        assert data["token"] == token
        assert datetime.fromisoformat(data["issued_at"]).utcoffset() == timedelta(0)

    @pytest.mark.asyncio
    async def test_unknown_certificate_is_404(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/certificates/not-a-token")

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestMCQSubmission:
    @pytest.mark.asyncio
    async def test_submission_is_graded(self, app: FastAPI, async_client: AsyncClient) -> None:
        await seed_user(app, "root", role=Role.ADMIN)
        await seed_user(app, "ada")
        _, lessons = await seed_course(app, lessons=1)
        await login(async_client, "root")
        created = await async_client.post(
            f"/admin/lessons/{lessons[0].lesson_id}/content",
            json={
                "content_type": "mcq",
                "question": "2 + 2?",
                "options": ["3", "4"],
                "correct_option_index": 1,
            },
        )
        mcq_id = created.json()["content_id"]
        await login(async_client, "ada")

        right = await async_client.post(f"/mcqs/{mcq_id}/submit", json={"option": 1})
        out_of_range = await async_client.post(f"/mcqs/{mcq_id}/submit", json={"option": 5})

        assert right.json()["is_correct"] is True
        assert out_of_range.status_code == status.HTTP_400_BAD_REQUEST
