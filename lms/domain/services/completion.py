"""Course completion and certificate issuance.

A course is complete for a user when it has at least one lesson and the
user holds a completion record for every one of them. Completion is
set-based; lesson positions play no part. Each (user, course) pair gets at
most one certificate, guaranteed by a unique constraint in storage and by
treating a violation of it as "already issued".
"""

from __future__ import annotations

import structlog
from lms.core.auth import TokenGenerator
from lms.core.errors import ConflictError, NotFoundError
from lms.domain import (
    Certificate,
    CertificateDetails,
    CertificateIssue,
    LessonCompletionResult,
)
from lms.infrastructure.repositories import UnitOfWork

logger = structlog.get_logger()


class CompletionEngine:
    """Records lesson completions and issues certificates exactly once."""

    def __init__(
        self,
        uow: UnitOfWork,
        token_generator: TokenGenerator,
        *,
        token_attempts: int = 3,
    ) -> None:
        self.uow = uow
        self.token_generator = token_generator
        self.token_attempts = token_attempts

    async def complete_lesson(self, *, user_id: int, lesson_id: int) -> LessonCompletionResult:
        """Record the completion, then issue a certificate if the course is now done."""
        lesson = await self.uow.courses.get_lesson(lesson_id)
        if lesson is None:
            raise NotFoundError(f"Lesson {lesson_id} not found")

        newly_completed = await self.record_lesson_completion(user_id=user_id, lesson_id=lesson_id)
        issue = await self.issue_certificate_if_complete(
            user_id=user_id, course_id=lesson.course_id
        )

        return LessonCompletionResult(
            lesson_id=lesson_id,
            course_id=lesson.course_id,
            newly_completed=newly_completed,
            course_complete=issue is not None,
            certificate=issue.certificate if issue else None,
            certificate_created=issue.created if issue else False,
        )

    async def record_lesson_completion(self, *, user_id: int, lesson_id: int) -> bool:
        """Insert a completion record; returns False when it already existed."""
        if await self.uow.progress.has_completed(user_id, lesson_id):
            return False

        try:
            await self.uow.progress.add_completion(user_id, lesson_id)
            await self.uow.commit()
        except ConflictError:
            # A concurrent request recorded the same pair first.
            await self.uow.rollback()
            return False

        await logger.ainfo("lesson_completed", user_id=user_id, lesson_id=lesson_id)
        return True

    async def is_course_complete(self, *, user_id: int, course_id: int) -> bool:
        course_lessons = await self.uow.courses.lesson_ids_for_course(course_id)
        if not course_lessons:
            return False
        completed = await self.uow.progress.completed_lesson_ids(user_id, course_id)
        return len(course_lessons) == len(completed)

    async def issue_certificate_if_complete(
        self, *, user_id: int, course_id: int
    ) -> CertificateIssue | None:
        """Issue the certificate when the course is complete; ``None`` otherwise."""
        if not await self.is_course_complete(user_id=user_id, course_id=course_id):
            await self.uow.commit()
            return None
        return await self._issue(user_id=user_id, course_id=course_id)

    async def issue_certificate(self, *, user_id: int, course_id: int) -> CertificateIssue:
        """Issue a certificate regardless of progress (administrator override)."""
        if await self.uow.users.get(user_id) is None:
            raise NotFoundError(f"User {user_id} not found")
        if await self.uow.courses.get_course(course_id) is None:
            raise NotFoundError(f"Course {course_id} not found")
        return await self._issue(user_id=user_id, course_id=course_id)

    async def get_certificate_by_token(self, token: str) -> CertificateDetails:
        details = await self.uow.certificates.get_details(token)
        if details is None:
            raise NotFoundError("Certificate not found")
        return details

    async def _issue(self, *, user_id: int, course_id: int) -> CertificateIssue:
        existing = await self.uow.certificates.get_for(user_id, course_id)
        if existing is not None:
            await self.uow.commit()
            return CertificateIssue(certificate=existing, created=False)

        for attempt in range(1, self.token_attempts + 1):
            try:
                certificate = await self._insert(user_id=user_id, course_id=course_id)
            except ConflictError:
                await self.uow.rollback()
                existing = await self.uow.certificates.get_for(user_id, course_id)
                if existing is not None:
                    await logger.ainfo(
                        "certificate_already_issued", user_id=user_id, course_id=course_id
                    )
                    return CertificateIssue(certificate=existing, created=False)
                await logger.awarning(
                    "certificate_token_collision",
                    user_id=user_id,
                    course_id=course_id,
                    attempt=attempt,
                )
                continue

            await logger.ainfo(
                "certificate_issued",
                user_id=user_id,
                course_id=course_id,
                certificate_id=certificate.certificate_id,
            )
            return CertificateIssue(certificate=certificate, created=True)

        raise ConflictError("Could not allocate a unique certificate token")

    async def _insert(self, *, user_id: int, course_id: int) -> Certificate:
        certificate = await self.uow.certificates.add(
            user_id=user_id,
            course_id=course_id,
            token=self.token_generator.generate(),
        )
        await self.uow.commit()
        return certificate
