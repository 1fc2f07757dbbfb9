from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from lms.domain import Course
from lms.infrastructure.db.models import (
    CourseModel,
    EnrollmentModel,
    LessonCompletionModel,
    LessonModel,
)

from .errors import storage_errors


class ProgressRepository:
    """Enrollment and progress store."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def is_enrolled(self, user_id: int, course_id: int) -> bool:
        with storage_errors("enrollment_exists"):
            found = await self.session.scalar(
                select(EnrollmentModel.id).where(
                    EnrollmentModel.user_id == user_id,
                    EnrollmentModel.course_id == course_id,
                )
            )
        return found is not None

    async def add_enrollment(self, user_id: int, course_id: int) -> None:
        with storage_errors("enrollment_add"):
            self.session.add(EnrollmentModel(user_id=user_id, course_id=course_id))
            await self.session.flush()

    async def enrolled_courses(self, user_id: int) -> list[Course]:
        stmt = (
            select(CourseModel)
            .join(EnrollmentModel, EnrollmentModel.course_id == CourseModel.id)
            .where(EnrollmentModel.user_id == user_id)
            .order_by(CourseModel.id)
        )
        with storage_errors("enrolled_courses"):
            models = (await self.session.scalars(stmt)).all()
        return [
            Course(course_id=model.id, title=model.title, description=model.description)
            for model in models
        ]

    async def has_completed(self, user_id: int, lesson_id: int) -> bool:
        with storage_errors("completion_exists"):
            found = await self.session.scalar(
                select(LessonCompletionModel.id).where(
                    LessonCompletionModel.user_id == user_id,
                    LessonCompletionModel.lesson_id == lesson_id,
                )
            )
        return found is not None

    async def add_completion(self, user_id: int, lesson_id: int) -> None:
        with storage_errors("completion_add"):
            self.session.add(LessonCompletionModel(user_id=user_id, lesson_id=lesson_id))
            await self.session.flush()

    async def completed_lesson_ids(self, user_id: int, course_id: int) -> set[int]:
        """Lesson ids the user completed, restricted to lessons of ``course_id``."""
        stmt = (
            select(LessonCompletionModel.lesson_id)
            .join(LessonModel, LessonModel.id == LessonCompletionModel.lesson_id)
            .where(
                LessonCompletionModel.user_id == user_id,
                LessonModel.course_id == course_id,
            )
        )
        with storage_errors("completed_lesson_ids"):
            return set((await self.session.scalars(stmt)).all())
