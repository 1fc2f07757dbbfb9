from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from lms.core.auth import Role


@dataclass(slots=True)
class User:
    """Represents a registered account. The credential hash never leaves the store."""

    user_id: int
    username: str
    role: Role
    created_at: datetime | None = None


@dataclass(slots=True)
class Course:
    course_id: int
    title: str
    description: str = ""


@dataclass(slots=True)
class Lesson:
    lesson_id: int
    course_id: int
    title: str
    position: int


@dataclass(slots=True)
class Video:
    video_id: int
    lesson_id: int
    title: str
    video_url: str


@dataclass(slots=True)
class Text:
    text_id: int
    lesson_id: int
    title: str
    content: str


@dataclass(slots=True)
class MCQ:
    mcq_id: int
    lesson_id: int
    question: str
    options: list[str]
    correct_option_index: int


@dataclass(slots=True)
class LessonContent:
    """Per-kind optional content of a lesson; ``None`` means the kind is absent."""

    video: Video | None = None
    text: Text | None = None
    mcq: MCQ | None = None


@dataclass(slots=True)
class MCQSubmission:
    submission_id: int
    user_id: int
    mcq_id: int
    lesson_id: int
    selected_option_index: int
    is_correct: bool
    submitted_at: datetime


@dataclass(slots=True)
class Certificate:
    certificate_id: int
    user_id: int
    course_id: int
    token: str
    issued_at: datetime


@dataclass(slots=True)
class CertificateDetails:
    """Public view of a certificate resolved by token."""

    token: str
    issued_at: datetime
    user_id: int
    course_id: int
    student_name: str
    course_title: str


@dataclass(slots=True)
class CertificateIssue:
    """Outcome of an issuance attempt. ``created`` is False when one already existed."""

    certificate: Certificate
    created: bool


@dataclass(slots=True)
class LessonCompletionResult:
    lesson_id: int
    course_id: int
    newly_completed: bool
    course_complete: bool
    certificate: Certificate | None = None
    certificate_created: bool = False


@dataclass(slots=True)
class CourseProgress:
    course: Course
    lessons: list[Lesson]
    completed_lesson_ids: set[int] = field(default_factory=set)
