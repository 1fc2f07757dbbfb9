"""Administrator routes: course authoring, users, enrollment, manual certificates."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Body, Depends, HTTPException, status
from lms.api.deps import (
    get_auth_service,
    get_completion_engine,
    get_course_service,
    get_enrollment_service,
    require_admin,
)
from lms.api.schemas.auth import UserDetailResponse, UserResponse
from lms.api.schemas.certificates import CertificateResponse
from lms.api.schemas.courses import (
    AdminDashboardResponse,
    AdminLessonResponse,
    ContentCreate,
    ContentCreatedResponse,
    CourseCreate,
    CourseDetailResponse,
    CourseItem,
    EnrollRequest,
    EnrollResponse,
    LessonContentResponse,
    LessonCreate,
    LessonItem,
    MCQContentCreate,
    TextContentCreate,
    VideoContentCreate,
)
from lms.core.auth import SessionClaims
from lms.domain.services import (
    AuthService,
    CompletionEngine,
    ContentExistsError,
    CourseService,
    EnrollmentService,
)

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(require_admin)])
logger = structlog.get_logger()


@router.get("", response_model=AdminDashboardResponse)
async def admin_dashboard(
    courses: CourseService = Depends(get_course_service),
    auth: AuthService = Depends(get_auth_service),
) -> AdminDashboardResponse:
    course_count = len(await courses.list_courses())
    user_count = len(await auth.list_users())
    return AdminDashboardResponse(course_count=course_count, user_count=user_count)


@router.post("/courses", response_model=CourseItem, status_code=status.HTTP_201_CREATED)
async def create_course(
    payload: CourseCreate,
    admin: SessionClaims = Depends(require_admin),
    courses: CourseService = Depends(get_course_service),
) -> CourseItem:
    course = await courses.create_course(title=payload.title, description=payload.description)
    logger.info("admin_course_created", course_id=course.course_id, admin_user=admin.user_id)
    return CourseItem.from_domain(course)


@router.get("/courses/{course_id}", response_model=CourseDetailResponse)
async def show_course(
    course_id: int,
    courses: CourseService = Depends(get_course_service),
) -> CourseDetailResponse:
    progress = await courses.course_progress(course_id)
    return CourseDetailResponse(
        course=CourseItem.from_domain(progress.course),
        lessons=[LessonItem.from_domain(lesson) for lesson in progress.lessons],
    )


@router.post(
    "/courses/{course_id}/lessons",
    response_model=LessonItem,
    status_code=status.HTTP_201_CREATED,
)
async def create_lesson(
    course_id: int,
    payload: LessonCreate,
    courses: CourseService = Depends(get_course_service),
) -> LessonItem:
    lesson = await courses.create_lesson(
        course_id=course_id, title=payload.title, position=payload.position
    )
    return LessonItem.from_domain(lesson)


@router.get("/lessons/{lesson_id}", response_model=AdminLessonResponse)
async def show_lesson(
    lesson_id: int,
    courses: CourseService = Depends(get_course_service),
) -> AdminLessonResponse:
    lesson, content = await courses.lesson_content(lesson_id)
    return AdminLessonResponse(
        lesson=LessonItem.from_domain(lesson),
        content=LessonContentResponse.from_domain(content, include_answers=True),
    )


@router.post(
    "/lessons/{lesson_id}/content",
    response_model=ContentCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_content(
    lesson_id: int,
    payload: ContentCreate = Body(...),
    courses: CourseService = Depends(get_course_service),
) -> ContentCreatedResponse:
    """Attach video, text or MCQ content; each kind at most once per lesson."""
    try:
        if isinstance(payload, VideoContentCreate):
            video = await courses.add_video(
                lesson_id=lesson_id, title=payload.title, video_url=payload.video_url
            )
            content_id = video.video_id
        elif isinstance(payload, TextContentCreate):
            text = await courses.add_text(
                lesson_id=lesson_id, title=payload.title, content=payload.content
            )
            content_id = text.text_id
        elif isinstance(payload, MCQContentCreate):
            mcq = await courses.add_mcq(
                lesson_id=lesson_id,
                question=payload.question,
                options=payload.options,
                correct_option_index=payload.correct_option_index,
            )
            content_id = mcq.mcq_id
        else:  # pragma: no cover - the discriminator rejects anything else
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid content type"
            )
    except ContentExistsError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Lesson already has {payload.content_type} content",
        ) from exc

    return ContentCreatedResponse(
        lesson_id=lesson_id, content_type=payload.content_type, content_id=content_id
    )


@router.get("/users", response_model=list[UserResponse])
async def list_users(auth: AuthService = Depends(get_auth_service)) -> list[UserResponse]:
    return [UserResponse.from_domain(user) for user in await auth.list_users()]


@router.get("/users/{user_id}", response_model=UserDetailResponse)
async def show_user(
    user_id: int,
    enrollment: EnrollmentService = Depends(get_enrollment_service),
) -> UserDetailResponse:
    overview = await enrollment.student_overview(user_id)
    return UserDetailResponse(
        user=UserResponse.from_domain(overview.user),
        enrolled_courses=[CourseItem.from_domain(c) for c in overview.enrolled_courses],
        available_courses=[CourseItem.from_domain(c) for c in overview.available_courses],
    )


@router.post("/users/{user_id}/enroll", response_model=EnrollResponse)
async def enroll_user(
    user_id: int,
    payload: EnrollRequest,
    enrollment: EnrollmentService = Depends(get_enrollment_service),
) -> EnrollResponse:
    created = await enrollment.enroll(user_id=user_id, course_id=payload.course_id)
    return EnrollResponse(user_id=user_id, course_id=payload.course_id, created=created)


@router.post(
    "/users/{user_id}/courses/{course_id}/generate-certificate",
    response_model=CertificateResponse,
)
async def generate_certificate(
    user_id: int,
    course_id: int,
    admin: SessionClaims = Depends(require_admin),
    engine: CompletionEngine = Depends(get_completion_engine),
) -> CertificateResponse:
    """Issue a certificate without checking progress. Repeated calls return the same one."""
    issue = await engine.issue_certificate(user_id=user_id, course_id=course_id)
    logger.info(
        "admin_certificate_generated",
        user_id=user_id,
        course_id=course_id,
        admin_user=admin.user_id,
        created=issue.created,
    )
    return CertificateResponse.from_issue(issue)
