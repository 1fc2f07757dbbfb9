"""Student-facing routes: catalogue, course and lesson views, progress actions."""

from __future__ import annotations

from html import escape

from fastapi import APIRouter, Depends, status
from fastapi.responses import HTMLResponse, RedirectResponse
from lms.api.deps import (
    get_access_state,
    get_completion_engine,
    get_course_service,
    get_enrollment_service,
    require_authentication,
)
from lms.api.schemas.courses import (
    CourseDetailResponse,
    CourseItem,
    DashboardResponse,
    LessonContentResponse,
    LessonDetailResponse,
    LessonItem,
    MCQSubmitRequest,
    MCQSubmitResponse,
)
from lms.core.auth import SessionClaims
from lms.domain import LessonCompletionResult
from lms.domain.services import (
    AccessLevel,
    AccessState,
    CompletionEngine,
    CourseService,
    EnrollmentService,
)

router = APIRouter(tags=["Learning"])


@router.get("/", response_model=None, summary="Dashboard")
async def dashboard(
    state: AccessState = Depends(get_access_state),
    courses: CourseService = Depends(get_course_service),
    enrollment: EnrollmentService = Depends(get_enrollment_service),
) -> DashboardResponse | RedirectResponse:
    """Guests get the catalogue, students their enrollments, admins go to /admin."""
    if state.level is AccessLevel.ADMIN:
        return RedirectResponse("/admin", status_code=status.HTTP_303_SEE_OTHER)

    if state.level is AccessLevel.STUDENT and state.claims is not None:
        enrolled = await enrollment.enrolled_courses(state.claims.user_id)
        return DashboardResponse(
            audience="student",
            courses=[CourseItem.from_domain(course) for course in enrolled],
        )

    catalogue = await courses.list_courses()
    return DashboardResponse(
        audience="guest",
        courses=[CourseItem.from_domain(course) for course in catalogue],
    )


@router.get("/courses/{course_id}", response_model=CourseDetailResponse)
async def show_course(
    course_id: int,
    state: AccessState = Depends(get_access_state),
    courses: CourseService = Depends(get_course_service),
) -> CourseDetailResponse:
    user_id = state.claims.user_id if state.claims else None
    progress = await courses.course_progress(course_id, user_id=user_id)
    completed = progress.completed_lesson_ids

    return CourseDetailResponse(
        course=CourseItem.from_domain(progress.course),
        lessons=[
            LessonItem.from_domain(lesson, is_complete=lesson.lesson_id in completed)
            for lesson in progress.lessons
        ],
        completed_lesson_ids=sorted(completed),
    )


@router.get("/lessons/{lesson_id}", response_model=LessonDetailResponse)
async def show_lesson(
    lesson_id: int,
    state: AccessState = Depends(get_access_state),
    courses: CourseService = Depends(get_course_service),
) -> LessonDetailResponse:
    """Lesson metadata is public; content is only returned to signed-in users."""
    user_id = state.claims.user_id if state.claims else None
    view = await courses.lesson_view(lesson_id, user_id=user_id)

    return LessonDetailResponse(
        lesson=LessonItem.from_domain(view.lesson, is_complete=view.is_complete),
        content=LessonContentResponse.from_domain(view.content) if view.content else None,
        is_complete=view.is_complete,
    )


@router.post("/mcqs/{mcq_id}/submit", response_model=MCQSubmitResponse)
async def submit_mcq(
    mcq_id: int,
    payload: MCQSubmitRequest,
    claims: SessionClaims = Depends(require_authentication),
    courses: CourseService = Depends(get_course_service),
) -> MCQSubmitResponse:
    submission = await courses.submit_mcq(
        user_id=claims.user_id,
        mcq_id=mcq_id,
        selected_option_index=payload.option,
    )
    return MCQSubmitResponse(
        submission_id=submission.submission_id,
        mcq_id=submission.mcq_id,
        lesson_id=submission.lesson_id,
        is_correct=submission.is_correct,
        submitted_at=submission.submitted_at,
    )


@router.post(
    "/lessons/{lesson_id}/complete",
    response_class=HTMLResponse,
    summary="Mark a lesson complete",
)
async def complete_lesson(
    lesson_id: int,
    claims: SessionClaims = Depends(require_authentication),
    engine: CompletionEngine = Depends(get_completion_engine),
) -> HTMLResponse:
    """Record completion and return a fragment to swap into the lesson page."""
    result = await engine.complete_lesson(user_id=claims.user_id, lesson_id=lesson_id)
    return HTMLResponse(_completion_fragment(result))


def _completion_fragment(result: LessonCompletionResult) -> str:
    fragment = '<div class="text-green-500 font-bold">&#10003; Completed</div>'
    if result.certificate is not None:
        token = escape(result.certificate.token)
        fragment += (
            '<div class="certificate-link">'
            f'<a href="/certificates/{token}">Course complete: view your certificate</a>'
            "</div>"
        )
    return fragment
