from __future__ import annotations

from datetime import UTC, datetime, timedelta

from fastapi import FastAPI
from httpx import AsyncClient, Response
from sqlalchemy import func, select
from lms.core.auth import PasswordHasher, Role
from lms.domain import Course, Lesson, User
from lms.domain.services import AuthService, CourseService, EnrollmentService
from lms.infrastructure.db.models import CertificateModel
from lms.infrastructure.repositories import UnitOfWork

DEFAULT_PASSWORD = "password123"


class FakeClock:
    """Manually advanced UTC clock for expiry tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


async def create_user(
    uow: UnitOfWork,
    hasher: PasswordHasher,
    username: str = "student",
    *,
    password: str = DEFAULT_PASSWORD,
    role: Role = Role.STUDENT,
) -> User:
    service = AuthService(uow, hasher)
    return await service.register_user(username=username, password=password, role=role)


async def create_course(
    uow: UnitOfWork, title: str = "Python Basics", *, lessons: int = 3
) -> tuple[Course, list[Lesson]]:
    """Create a course with ``lessons`` lessons at positions 1..n."""
    service = CourseService(uow)
    course = await service.create_course(title=title, description=f"About {title}")
    created = [
        await service.create_lesson(
            course_id=course.course_id, title=f"{title} lesson {n}", position=n
        )
        for n in range(1, lessons + 1)
    ]
    return course, created


async def seed_user(
    app: FastAPI,
    username: str = "student",
    *,
    password: str = DEFAULT_PASSWORD,
    role: Role = Role.STUDENT,
) -> User:
    async with app.state.session_factory() as session:
        return await create_user(
            UnitOfWork(session),
            app.state.password_hasher,
            username,
            password=password,
            role=role,
        )


async def seed_course(
    app: FastAPI, title: str = "Python Basics", *, lessons: int = 3
) -> tuple[Course, list[Lesson]]:
    async with app.state.session_factory() as session:
        return await create_course(UnitOfWork(session), title, lessons=lessons)


async def seed_enrollment(app: FastAPI, user_id: int, course_id: int) -> None:
    async with app.state.session_factory() as session:
        await EnrollmentService(UnitOfWork(session)).enroll(user_id=user_id, course_id=course_id)


async def login(
    client: AsyncClient, username: str = "student", password: str = DEFAULT_PASSWORD
) -> Response:
    response = await client.post("/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return response


async def count_certificates(uow: UnitOfWork, user_id: int, course_id: int) -> int:
    """Number of stored certificate rows for one (user, course) pair."""
    return await uow.session.scalar(
        select(func.count(CertificateModel.id)).where(
            CertificateModel.user_id == user_id,
            CertificateModel.course_id == course_id,
        )
    )
