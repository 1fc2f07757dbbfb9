from __future__ import annotations

from dataclasses import dataclass

import structlog
from lms.core.errors import ConflictError, NotFoundError
from lms.domain import Course, User
from lms.infrastructure.repositories import UnitOfWork

logger = structlog.get_logger()


@dataclass(slots=True)
class StudentOverview:
    user: User
    enrolled_courses: list[Course]
    available_courses: list[Course]


class EnrollmentService:
    """Enrollment of students in courses and the course lists derived from it."""

    def __init__(self, uow: UnitOfWork) -> None:
        self.uow = uow

    async def enroll(self, *, user_id: int, course_id: int) -> bool:
        """Enroll the user; returns False if the enrollment already existed."""
        if await self.uow.users.get(user_id) is None:
            raise NotFoundError(f"User {user_id} not found")
        if await self.uow.courses.get_course(course_id) is None:
            raise NotFoundError(f"Course {course_id} not found")

        if await self.uow.progress.is_enrolled(user_id, course_id):
            return False
        try:
            await self.uow.progress.add_enrollment(user_id, course_id)
            await self.uow.commit()
        except ConflictError:
            await self.uow.rollback()
            return False

        await logger.ainfo("student_enrolled", user_id=user_id, course_id=course_id)
        return True

    async def enrolled_courses(self, user_id: int) -> list[Course]:
        return await self.uow.progress.enrolled_courses(user_id)

    async def student_overview(self, user_id: int) -> StudentOverview:
        user = await self.uow.users.get(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")

        enrolled = await self.uow.progress.enrolled_courses(user_id)
        enrolled_ids = {course.course_id for course in enrolled}
        available = [
            course
            for course in await self.uow.courses.list_courses()
            if course.course_id not in enrolled_ids
        ]
        return StudentOverview(user=user, enrolled_courses=enrolled, available_courses=available)
