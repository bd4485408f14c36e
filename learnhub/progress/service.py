"""Enrollment and lesson-progress service layer.

Business logic for:
- Marking a lesson complete and recomputing course progress
- Reading a single lesson's completion state
- Course enrollment management
"""

from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from learnhub.core.errors import AppError, StoreUnavailableError

from .models import Enrollment
from .schemas import EnrollmentProgress, LessonCompletionState


if TYPE_CHECKING:
    from learnhub.courses.service import CourseService

    from .stores import ContentStore, EnrollmentStore

logger = structlog.get_logger(__name__)

COMPLETE_PERCENTAGE = 100


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class ProgressError(AppError):
    """Base progress error."""

    def __init__(self, message: str, code: str = "progress_error"):
        super().__init__(message, code)


class NotEnrolledError(ProgressError):
    """Student not enrolled in course."""

    def __init__(self, message: str = "Student is not enrolled in this course"):
        super().__init__(message, "not_enrolled")


class AlreadyEnrolledError(ProgressError):
    """Student already enrolled."""

    def __init__(self, message: str = "Student is already enrolled in this course"):
        super().__init__(message, "already_enrolled")


__all__ = [
    "AlreadyEnrolledError",
    "EnrollmentService",
    "NotEnrolledError",
    "ProgressError",
    "ProgressTracker",
    "StoreUnavailableError",
    "compute_progress_percentage",
]


def compute_progress_percentage(completed_lessons: int, total_lessons: int) -> int:
    """Rounded share of completed lessons, half-up; 0 for an empty course.

    >>> compute_progress_percentage(2, 3)
    67
    >>> compute_progress_percentage(1, 8)
    13
    """
    if total_lessons <= 0:
        return 0
    ratio = Decimal(completed_lessons * 100) / Decimal(total_lessons)
    return int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))


# ==============================================================================
# Progress Tracker
# ==============================================================================


class ProgressTracker:
    """Records lesson completion and keeps enrollment progress current.

    Every store call is awaited in sequence: enrollment lookup, progress
    lookup, progress write, denominator reads, enrollment write. Store
    failures propagate as ``StoreUnavailableError``; re-running the whole
    operation is safe.
    """

    def __init__(
        self,
        enrollments: "EnrollmentStore",
        content: "ContentStore",
        freeze_on_completion: bool = False,
    ):
        """Initialize with the two stores.

        Args:
            enrollments: Enrollment store
            content: Lesson and lesson-progress store
            freeze_on_completion: Keep completed enrollments at 100% when
                lessons are added afterwards
        """
        self.enrollments = enrollments
        self.content = content
        self.freeze_on_completion = freeze_on_completion

    async def mark_lesson_complete(
        self,
        student_id: UUID,
        course_id: UUID,
        lesson_id: UUID,
        now: datetime | None = None,
    ) -> EnrollmentProgress:
        """Mark a lesson complete and recompute the enrollment's progress.

        Re-marking an already completed lesson writes nothing for the lesson
        and yields the same aggregate.

        Raises:
            NotEnrolledError: No enrollment for (student, course); nothing written
            StoreUnavailableError: A store call failed
        """
        now = now or datetime.now(UTC)

        enrollment = await self.enrollments.find_enrollment(student_id, course_id)
        if enrollment is None:
            logger.warning(
                "lesson_complete_not_enrolled",
                student_id=str(student_id),
                course_id=str(course_id),
                lesson_id=str(lesson_id),
            )
            raise NotEnrolledError

        await self._complete_lesson(enrollment.id, lesson_id, now)

        progress = await self._recompute(enrollment, now)

        logger.info(
            "lesson_marked_complete",
            enrollment_id=str(enrollment.id),
            lesson_id=str(lesson_id),
            progress_percentage=progress.progress_percentage,
            completed_lessons=progress.completed_lessons,
            total_lessons=progress.total_lessons,
        )
        return progress

    async def get_progress(
        self, enrollment_id: UUID, lesson_id: UUID
    ) -> LessonCompletionState:
        """Completion state of a lesson; "not started" when never touched."""
        record = await self.content.find_lesson_progress(enrollment_id, lesson_id)
        if record is None:
            return LessonCompletionState()
        return LessonCompletionState(
            completed=record.completed, completed_at=record.completed_at
        )

    async def _complete_lesson(
        self, enrollment_id: UUID, lesson_id: UUID, now: datetime
    ) -> None:
        """Lookup-then-insert-or-update the lesson's completion record."""
        record = await self.content.find_lesson_progress(enrollment_id, lesson_id)

        if record is None:
            inserted = await self.content.insert_lesson_progress(
                enrollment_id, lesson_id, completed=True, completed_at=now
            )
            if inserted:
                return
            # Lost a race with a concurrent insert; fall through to update
            record = await self.content.find_lesson_progress(enrollment_id, lesson_id)
            if record is None:
                return

        if record.completed:
            return

        await self.content.update_lesson_progress(
            record.id, completed=True, completed_at=now
        )

    async def _recompute(
        self, enrollment: Enrollment, now: datetime
    ) -> EnrollmentProgress:
        """Recompute and persist the enrollment aggregate from the stores."""
        lesson_ids = await self.content.list_lesson_ids_for_course(
            enrollment.course_id
        )
        total = len(lesson_ids)
        completed = await self.content.count_completed_lesson_progress(
            enrollment.id, lesson_ids
        )

        percentage = compute_progress_percentage(completed, total)
        completed_at = None
        if percentage == COMPLETE_PERCENTAGE:
            # First time at 100% sets the completion date; later calls keep it
            completed_at = enrollment.completed_at or now

        if self.freeze_on_completion and enrollment.completed_at is not None:
            percentage = COMPLETE_PERCENTAGE
            completed_at = enrollment.completed_at

        updated = await self.enrollments.update_enrollment(
            enrollment.id, percentage, completed_at
        )
        if not updated:
            raise NotEnrolledError

        return EnrollmentProgress(
            progress_percentage=percentage,
            completed_at=completed_at,
            completed_lessons=completed,
            total_lessons=total,
        )


# ==============================================================================
# Enrollment Service
# ==============================================================================


class EnrollmentService:
    """Course enrollment management."""

    def __init__(self, enrollments: "EnrollmentStore", courses: "CourseService"):
        self.enrollments = enrollments
        self.courses = courses

    async def enroll(
        self,
        student_id: UUID,
        course_id: UUID,
        now: datetime | None = None,
    ) -> Enrollment:
        """Enroll a student in a published course.

        Raises:
            CourseNotFoundError: Course missing or not published
            AlreadyEnrolledError: Student already enrolled
        """
        from learnhub.courses.service import CourseNotFoundError

        course = await self.courses.get_course(course_id)
        if course is None or not course.is_published:
            raise CourseNotFoundError

        if await self.enrollments.find_enrollment(student_id, course_id):
            raise AlreadyEnrolledError

        enrollment = Enrollment(
            student_id=student_id,
            course_id=course_id,
            enrolled_at=now or datetime.now(UTC),
        )
        await self.enrollments.insert_enrollment(enrollment)

        logger.info(
            "student_enrolled",
            student_id=str(student_id),
            course_id=str(course_id),
            enrollment_id=str(enrollment.id),
        )
        return enrollment

    async def get_enrollment(
        self, student_id: UUID, course_id: UUID
    ) -> Enrollment | None:
        """Get enrollment by student and course."""
        return await self.enrollments.find_enrollment(student_id, course_id)

    async def get_enrollment_by_id(self, enrollment_id: UUID) -> Enrollment | None:
        """Get enrollment by identifier."""
        return await self.enrollments.get_enrollment_by_id(enrollment_id)

    async def list_student_enrollments(self, student_id: UUID) -> list[Enrollment]:
        """All enrollments of a student, newest first."""
        return await self.enrollments.list_student_enrollments(student_id)

    async def count_course_enrollments(self, course_id: UUID) -> int:
        """Number of students enrolled in a course."""
        return await self.enrollments.count_course_enrollments(course_id)
