"""Pydantic schemas for courses, lessons, lesson content and enrollment."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, Field
from lms.domain import MCQ, Course, Lesson, LessonContent


class CourseItem(BaseModel):
    id: int
    title: str
    description: str = ""

    @classmethod
    def from_domain(cls, course: Course) -> CourseItem:
        return cls(id=course.course_id, title=course.title, description=course.description)


class LessonItem(BaseModel):
    id: int
    course_id: int
    title: str
    position: int
    is_complete: bool = False

    @classmethod
    def from_domain(cls, lesson: Lesson, *, is_complete: bool = False) -> LessonItem:
        return cls(
            id=lesson.lesson_id,
            course_id=lesson.course_id,
            title=lesson.title,
            position=lesson.position,
            is_complete=is_complete,
        )


class DashboardResponse(BaseModel):
    """Guests see the full catalogue; students see their enrollments."""

    audience: Literal["guest", "student"]
    courses: list[CourseItem]


class CourseDetailResponse(BaseModel):
    course: CourseItem
    lessons: list[LessonItem]
    completed_lesson_ids: list[int] = Field(default_factory=list)


class VideoItem(BaseModel):
    id: int
    title: str
    video_url: str


class TextItem(BaseModel):
    id: int
    title: str
    content: str


class MCQItem(BaseModel):
    """Question as shown to students; the answer key is withheld."""

    id: int
    question: str
    options: list[str]

    @classmethod
    def from_domain(cls, mcq: MCQ) -> MCQItem:
        return cls(id=mcq.mcq_id, question=mcq.question, options=mcq.options)


class AdminMCQItem(MCQItem):
    correct_option_index: int

    @classmethod
    def from_domain(cls, mcq: MCQ) -> AdminMCQItem:
        return cls(
            id=mcq.mcq_id,
            question=mcq.question,
            options=mcq.options,
            correct_option_index=mcq.correct_option_index,
        )


class LessonContentResponse(BaseModel):
    """Each content kind is independently present or ``null``."""

    video: VideoItem | None = None
    text: TextItem | None = None
    mcq: MCQItem | None = None

    @classmethod
    def from_domain(
        cls, content: LessonContent, *, include_answers: bool = False
    ) -> LessonContentResponse:
        mcq_schema = AdminMCQItem if include_answers else MCQItem
        return cls(
            video=(
                VideoItem(
                    id=content.video.video_id,
                    title=content.video.title,
                    video_url=content.video.video_url,
                )
                if content.video
                else None
            ),
            text=(
                TextItem(
                    id=content.text.text_id,
                    title=content.text.title,
                    content=content.text.content,
                )
                if content.text
                else None
            ),
            mcq=mcq_schema.from_domain(content.mcq) if content.mcq else None,
        )


class LessonDetailResponse(BaseModel):
    lesson: LessonItem
    content: LessonContentResponse | None = None
    is_complete: bool = False


# --- Admin requests ---


class CourseCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(default="", max_length=10_000)


class LessonCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    position: int = Field(..., ge=0)


class VideoContentCreate(BaseModel):
    content_type: Literal["video"]
    title: str = Field(..., min_length=1, max_length=255)
    video_url: str = Field(..., min_length=1, max_length=2048)


class TextContentCreate(BaseModel):
    content_type: Literal["text"]
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)


class MCQContentCreate(BaseModel):
    content_type: Literal["mcq"]
    question: str = Field(..., min_length=1)
    options: list[str] = Field(..., min_length=2, max_length=10)
    correct_option_index: int = Field(..., ge=0)


ContentCreate = Annotated[
    VideoContentCreate | TextContentCreate | MCQContentCreate,
    Field(discriminator="content_type"),
]


class ContentCreatedResponse(BaseModel):
    lesson_id: int
    content_type: str
    content_id: int


class AdminLessonResponse(BaseModel):
    lesson: LessonItem
    content: LessonContentResponse


class AdminDashboardResponse(BaseModel):
    message: str = Field(default="Welcome to the Admin Dashboard")
    course_count: int
    user_count: int


# --- Student actions ---


class MCQSubmitRequest(BaseModel):
    option: int = Field(..., ge=0, description="Index of the selected option")


class MCQSubmitResponse(BaseModel):
    submission_id: int
    mcq_id: int
    lesson_id: int
    is_correct: bool
    submitted_at: datetime


# --- Enrollment ---


class EnrollRequest(BaseModel):
    course_id: int = Field(..., ge=1)


class EnrollResponse(BaseModel):
    user_id: int
    course_id: int
    created: bool = Field(..., description="False when the user was already enrolled")
