from __future__ import annotations

from collections.abc import Awaitable
from dataclasses import dataclass
from typing import TypeVar

import structlog
from lms.core.errors import ConflictError, InvalidInputError, NotFoundError
from lms.domain import (
    MCQ,
    Course,
    CourseProgress,
    Lesson,
    LessonContent,
    MCQSubmission,
    Text,
    Video,
)
from lms.infrastructure.repositories import UnitOfWork

logger = structlog.get_logger()

T = TypeVar("T")


class ContentExistsError(ConflictError):
    """Raised when a lesson already carries content of the requested kind."""


@dataclass(slots=True)
class LessonView:
    lesson: Lesson
    content: LessonContent | None
    is_complete: bool = False


class CourseService:
    """Course and lesson authoring plus the read models students browse."""

    def __init__(self, uow: UnitOfWork) -> None:
        self.uow = uow

    async def create_course(self, *, title: str, description: str = "") -> Course:
        title = title.strip()
        if not title:
            raise InvalidInputError("Title is required")

        course = await self.uow.courses.add_course(title=title, description=description)
        await self.uow.commit()
        await logger.ainfo("course_created", course_id=course.course_id, title=course.title)
        return course

    async def list_courses(self) -> list[Course]:
        return await self.uow.courses.list_courses()

    async def get_course(self, course_id: int) -> Course:
        course = await self.uow.courses.get_course(course_id)
        if course is None:
            raise NotFoundError(f"Course {course_id} not found")
        return course

    async def course_progress(
        self, course_id: int, *, user_id: int | None = None
    ) -> CourseProgress:
        """Course with its ordered lessons; completion ids only for a known user."""
        course = await self.get_course(course_id)
        lessons = await self.uow.courses.list_lessons(course_id)
        completed: set[int] = set()
        if user_id is not None:
            completed = await self.uow.progress.completed_lesson_ids(user_id, course_id)
        return CourseProgress(course=course, lessons=lessons, completed_lesson_ids=completed)

    async def create_lesson(self, *, course_id: int, title: str, position: int) -> Lesson:
        title = title.strip()
        if not title:
            raise InvalidInputError("Title and position are required")
        await self.get_course(course_id)

        lesson = await self.uow.courses.add_lesson(
            course_id=course_id, title=title, position=position
        )
        await self.uow.commit()
        await logger.ainfo(
            "lesson_created",
            lesson_id=lesson.lesson_id,
            course_id=course_id,
            position=position,
        )
        return lesson

    async def get_lesson(self, lesson_id: int) -> Lesson:
        lesson = await self.uow.courses.get_lesson(lesson_id)
        if lesson is None:
            raise NotFoundError(f"Lesson {lesson_id} not found")
        return lesson

    async def lesson_view(self, lesson_id: int, *, user_id: int | None = None) -> LessonView:
        """Lesson details. Content and completion state are only loaded for a user."""
        lesson = await self.get_lesson(lesson_id)
        if user_id is None:
            return LessonView(lesson=lesson, content=None)

        content = await self.uow.courses.get_content(lesson_id)
        is_complete = await self.uow.progress.has_completed(user_id, lesson_id)
        return LessonView(lesson=lesson, content=content, is_complete=is_complete)

    async def lesson_content(self, lesson_id: int) -> tuple[Lesson, LessonContent]:
        lesson = await self.get_lesson(lesson_id)
        return lesson, await self.uow.courses.get_content(lesson_id)

    async def add_video(self, *, lesson_id: int, title: str, video_url: str) -> Video:
        if not title.strip() or not video_url.strip():
            raise InvalidInputError("Title and URL are required for video")
        await self.get_lesson(lesson_id)
        insert = self.uow.courses.add_video(
            lesson_id=lesson_id, title=title.strip(), video_url=video_url.strip()
        )
        return await self._store_content("video", lesson_id, insert)

    async def add_text(self, *, lesson_id: int, title: str, content: str) -> Text:
        if not title.strip() or not content.strip():
            raise InvalidInputError("Title and content are required for text")
        await self.get_lesson(lesson_id)
        insert = self.uow.courses.add_text(
            lesson_id=lesson_id, title=title.strip(), content=content
        )
        return await self._store_content("text", lesson_id, insert)

    async def add_mcq(
        self, *, lesson_id: int, question: str, options: list[str], correct_option_index: int
    ) -> MCQ:
        if not question.strip():
            raise InvalidInputError("Question is required")
        if len(options) < 2 or any(not option.strip() for option in options):
            raise InvalidInputError("At least two non-empty options are required")
        if not 0 <= correct_option_index < len(options):
            raise InvalidInputError("Correct option index is out of range")
        await self.get_lesson(lesson_id)
        insert = self.uow.courses.add_mcq(
            lesson_id=lesson_id,
            question=question.strip(),
            options=options,
            correct_option_index=correct_option_index,
        )
        return await self._store_content("mcq", lesson_id, insert)

    async def submit_mcq(
        self, *, user_id: int, mcq_id: int, selected_option_index: int
    ) -> MCQSubmission:
        """Grade and store an answer in one transaction."""
        mcq = await self.uow.courses.get_mcq(mcq_id)
        if mcq is None:
            raise NotFoundError(f"MCQ {mcq_id} not found")
        if not 0 <= selected_option_index < len(mcq.options):
            raise InvalidInputError("Invalid option")

        submission = await self.uow.courses.add_submission(
            user_id=user_id, mcq=mcq, selected_option_index=selected_option_index
        )
        await self.uow.commit()
        await logger.ainfo(
            "mcq_submitted",
            user_id=user_id,
            mcq_id=mcq_id,
            is_correct=submission.is_correct,
        )
        return submission

    async def _store_content(self, kind: str, lesson_id: int, insert: Awaitable[T]) -> T:
        try:
            item = await insert
            await self.uow.commit()
        except ConflictError as exc:
            await self.uow.rollback()
            raise ContentExistsError(f"Lesson {lesson_id} already has {kind} content") from exc
        await logger.ainfo("lesson_content_added", lesson_id=lesson_id, kind=kind)
        return item
