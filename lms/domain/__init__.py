from lms.domain.models import (
    MCQ,
    Certificate,
    CertificateDetails,
    CertificateIssue,
    Course,
    CourseProgress,
    Lesson,
    LessonCompletionResult,
    LessonContent,
    MCQSubmission,
    Text,
    User,
    Video,
)

__all__ = [
    "MCQ",
    "Certificate",
    "CertificateDetails",
    "CertificateIssue",
    "Course",
    "CourseProgress",
    "Lesson",
    "LessonCompletionResult",
    "LessonContent",
    "MCQSubmission",
    "Text",
    "User",
    "Video",
]
