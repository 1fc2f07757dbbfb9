from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from lms.domain import MCQ, Course, Lesson, LessonContent, MCQSubmission, Text, Video
from lms.infrastructure.db.models import (
    CourseModel,
    LessonModel,
    MCQModel,
    MCQSubmissionModel,
    TextModel,
    VideoModel,
)

from .errors import storage_errors

if TYPE_CHECKING:
    from sqlalchemy import Select


def _to_course(model: CourseModel) -> Course:
    return Course(course_id=model.id, title=model.title, description=model.description)


def _to_lesson(model: LessonModel) -> Lesson:
    return Lesson(
        lesson_id=model.id,
        course_id=model.course_id,
        title=model.title,
        position=model.position,
    )


def _to_mcq(model: MCQModel) -> MCQ:
    return MCQ(
        mcq_id=model.id,
        lesson_id=model.lesson_id,
        question=model.question,
        options=list(model.options),
        correct_option_index=model.correct_option_index,
    )


class CourseRepository:
    """Content store: courses, lessons and per-lesson content."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # --- courses ---

    async def add_course(self, *, title: str, description: str) -> Course:
        model = CourseModel(title=title, description=description)
        with storage_errors("course_add"):
            self.session.add(model)
            await self.session.flush()
        return _to_course(model)

    async def get_course(self, course_id: int) -> Course | None:
        with storage_errors("course_get"):
            model = await self.session.get(CourseModel, course_id)
        return _to_course(model) if model is not None else None

    async def list_courses(self) -> list[Course]:
        with storage_errors("course_list"):
            result = await self.session.scalars(select(CourseModel).order_by(CourseModel.id))
            models = result.all()
        return [_to_course(model) for model in models]

    # --- lessons ---

    async def add_lesson(self, *, course_id: int, title: str, position: int) -> Lesson:
        model = LessonModel(course_id=course_id, title=title, position=position)
        with storage_errors("lesson_add"):
            self.session.add(model)
            await self.session.flush()
        return _to_lesson(model)

    async def get_lesson(self, lesson_id: int) -> Lesson | None:
        with storage_errors("lesson_get"):
            model = await self.session.get(LessonModel, lesson_id)
        return _to_lesson(model) if model is not None else None

    async def list_lessons(self, course_id: int) -> list[Lesson]:
        stmt: Select[tuple[LessonModel]] = (
            select(LessonModel)
            .where(LessonModel.course_id == course_id)
            .order_by(LessonModel.position, LessonModel.id)
        )
        with storage_errors("lesson_list"):
            models = (await self.session.scalars(stmt)).all()
        return [_to_lesson(model) for model in models]

    async def lesson_ids_for_course(self, course_id: int) -> set[int]:
        with storage_errors("lesson_ids_for_course"):
            rows = await self.session.scalars(
                select(LessonModel.id).where(LessonModel.course_id == course_id)
            )
            return set(rows.all())

    # --- content ---

    async def add_video(self, *, lesson_id: int, title: str, video_url: str) -> Video:
        model = VideoModel(lesson_id=lesson_id, title=title, video_url=video_url)
        with storage_errors("video_add"):
            self.session.add(model)
            await self.session.flush()
        return Video(video_id=model.id, lesson_id=lesson_id, title=title, video_url=video_url)

    async def add_text(self, *, lesson_id: int, title: str, content: str) -> Text:
        model = TextModel(lesson_id=lesson_id, title=title, content=content)
        with storage_errors("text_add"):
            self.session.add(model)
            await self.session.flush()
        return Text(text_id=model.id, lesson_id=lesson_id, title=title, content=content)

    async def add_mcq(
        self, *, lesson_id: int, question: str, options: list[str], correct_option_index: int
    ) -> MCQ:
        model = MCQModel(
            lesson_id=lesson_id,
            question=question,
            options=options,
            correct_option_index=correct_option_index,
        )
        with storage_errors("mcq_add"):
            self.session.add(model)
            await self.session.flush()
        return _to_mcq(model)

    async def get_mcq(self, mcq_id: int) -> MCQ | None:
        with storage_errors("mcq_get"):
            model = await self.session.get(MCQModel, mcq_id)
        return _to_mcq(model) if model is not None else None

    async def get_content(self, lesson_id: int) -> LessonContent:
        """Load every content kind for a lesson; missing kinds stay ``None``."""
        with storage_errors("lesson_content_get"):
            video = await self.session.scalar(
                select(VideoModel).where(VideoModel.lesson_id == lesson_id)
            )
            text = await self.session.scalar(
                select(TextModel).where(TextModel.lesson_id == lesson_id)
            )
            mcq = await self.session.scalar(select(MCQModel).where(MCQModel.lesson_id == lesson_id))

        return LessonContent(
            video=(
                Video(
                    video_id=video.id,
                    lesson_id=video.lesson_id,
                    title=video.title,
                    video_url=video.video_url,
                )
                if video is not None
                else None
            ),
            text=(
                Text(
                    text_id=text.id,
                    lesson_id=text.lesson_id,
                    title=text.title,
                    content=text.content,
                )
                if text is not None
                else None
            ),
            mcq=_to_mcq(mcq) if mcq is not None else None,
        )

    async def add_submission(
        self, *, user_id: int, mcq: MCQ, selected_option_index: int
    ) -> MCQSubmission:
        model = MCQSubmissionModel(
            user_id=user_id,
            mcq_id=mcq.mcq_id,
            selected_option_index=selected_option_index,
            is_correct=selected_option_index == mcq.correct_option_index,
        )
        with storage_errors("mcq_submission_add"):
            self.session.add(model)
            await self.session.flush()
        return MCQSubmission(
            submission_id=model.id,
            user_id=user_id,
            mcq_id=mcq.mcq_id,
            lesson_id=mcq.lesson_id,
            selected_option_index=selected_option_index,
            is_correct=model.is_correct,
            submitted_at=model.submitted_at,
        )
