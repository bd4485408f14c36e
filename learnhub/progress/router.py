"""Student progress tracking API endpoints.

Provides routes for:
- Lesson completion
- Lesson completion state queries
- Course enrollment
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from learnhub.auth.dependencies import CurrentUser, StudentUser
from learnhub.core.errors import AppError
from learnhub.courses.dependencies import handle_course_error
from learnhub.courses.service import CourseError

from .dependencies import (
    EnrollmentServiceDep,
    ProgressTrackerDep,
    handle_progress_error,
)
from .schemas import (
    EnrollmentListResponse,
    EnrollmentProgress,
    EnrollmentResponse,
    EnrollRequest,
    LessonCompletionState,
    MarkLessonCompleteRequest,
)


router = APIRouter(prefix="/v1/progress", tags=["progress"])
enrollments_router = APIRouter(prefix="/v1/enrollments", tags=["enrollments"])


def _to_http(error: AppError) -> HTTPException:
    if isinstance(error, CourseError):
        return handle_course_error(error)
    return handle_progress_error(error)


# ==============================================================================
# Lesson Completion Endpoints
# ==============================================================================


@router.post(
    "/lessons/{lesson_id}/complete",
    response_model=EnrollmentProgress,
    status_code=status.HTTP_200_OK,
    summary="Mark lesson as complete",
)
async def mark_lesson_complete(
    lesson_id: UUID,
    data: MarkLessonCompleteRequest,
    tracker: ProgressTrackerDep,
    user: StudentUser,
) -> EnrollmentProgress:
    """Mark a lesson complete and return the recomputed course progress.

    Safe to call repeatedly for the same lesson.
    """
    try:
        return await tracker.mark_lesson_complete(
            student_id=user.id,
            course_id=data.course_id,
            lesson_id=lesson_id,
        )
    except AppError as e:
        raise handle_progress_error(e) from e


@router.get(
    "/enrollments/{enrollment_id}/lessons/{lesson_id}",
    response_model=LessonCompletionState,
    summary="Get lesson completion state",
)
async def get_lesson_progress(
    enrollment_id: UUID,
    lesson_id: UUID,
    tracker: ProgressTrackerDep,
    enrollment_service: EnrollmentServiceDep,
    user: CurrentUser,
) -> LessonCompletionState:
    """Get completion state of a lesson. Only the enrollment owner may read it."""
    try:
        enrollment = await enrollment_service.get_enrollment_by_id(enrollment_id)
        if enrollment is None or (
            enrollment.student_id != user.id and not user.is_admin
        ):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Enrollment not found",
            )
        return await tracker.get_progress(enrollment_id, lesson_id)
    except AppError as e:
        raise handle_progress_error(e) from e


# ==============================================================================
# Enrollment Endpoints
# ==============================================================================


@enrollments_router.post(
    "",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Enroll in course",
)
async def enroll(
    data: EnrollRequest,
    enrollment_service: EnrollmentServiceDep,
    user: StudentUser,
) -> EnrollmentResponse:
    """Enroll the current user in a published course."""
    try:
        enrollment = await enrollment_service.enroll(user.id, data.course_id)
        return EnrollmentResponse.from_entity(enrollment)
    except AppError as e:
        raise _to_http(e) from e


@enrollments_router.get(
    "/me",
    response_model=EnrollmentListResponse,
    summary="List my enrollments",
)
async def list_my_enrollments(
    enrollment_service: EnrollmentServiceDep,
    user: CurrentUser,
) -> EnrollmentListResponse:
    """List the current user's enrollments, newest first."""
    try:
        enrollments = await enrollment_service.list_student_enrollments(user.id)
    except AppError as e:
        raise handle_progress_error(e) from e
    return EnrollmentListResponse(
        items=[EnrollmentResponse.from_entity(e) for e in enrollments],
        total=len(enrollments),
    )


@enrollments_router.get(
    "/courses/{course_id}",
    response_model=EnrollmentResponse,
    summary="Get my enrollment in a course",
)
async def get_my_course_enrollment(
    course_id: UUID,
    enrollment_service: EnrollmentServiceDep,
    user: CurrentUser,
) -> EnrollmentResponse:
    """Get the current user's enrollment (and progress) in a course."""
    try:
        enrollment = await enrollment_service.get_enrollment(user.id, course_id)
    except AppError as e:
        raise handle_progress_error(e) from e
    if enrollment is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Enrollment not found",
        )
    return EnrollmentResponse.from_entity(enrollment)
