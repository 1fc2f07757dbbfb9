"""Domain services."""

from lms.domain.services.access import AccessGate, AccessLevel, AccessState
from lms.domain.services.auth_service import AuthService, UserExistsError
from lms.domain.services.completion import CompletionEngine
from lms.domain.services.courses import ContentExistsError, CourseService, LessonView
from lms.domain.services.enrollment import EnrollmentService, StudentOverview

__all__ = [
    "AccessGate",
    "AccessLevel",
    "AccessState",
    "AuthService",
    "CompletionEngine",
    "ContentExistsError",
    "CourseService",
    "EnrollmentService",
    "LessonView",
    "StudentOverview",
    "UserExistsError",
]
