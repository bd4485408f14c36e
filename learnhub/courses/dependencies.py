"""FastAPI dependencies for course management.

Provides dependency injection for:
- Course service
- Content ownership verification
- Error handlers
"""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status

from learnhub.auth.permissions import is_admin
from learnhub.auth.schemas import AuthenticatedUser
from learnhub.core.errors import AppError

from .models import Course
from .service import CourseService


async def get_course_service(request: Request) -> CourseService:
    """Get course service from app state."""
    app_state = request.app.state
    if not getattr(app_state, "course_service", None):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Course service not available",
        )
    return app_state.course_service


CourseServiceDep = Annotated[CourseService, Depends(get_course_service)]


# ==============================================================================
# Ownership Verification
# ==============================================================================


def is_owner_or_admin(user: AuthenticatedUser | None, teacher_id: UUID) -> bool:
    """Check if user is the course owner or an admin."""
    if user is None:
        return False
    if is_admin(user.role):
        return True
    return user.id == teacher_id


def can_view_course(user: AuthenticatedUser | None, course: Course) -> bool:
    """Published courses are public; drafts are visible to owner and admin."""
    return course.is_published or is_owner_or_admin(user, course.teacher_id)


async def ensure_course_owner(
    course_service: CourseService,
    course_id: UUID,
    user: AuthenticatedUser,
) -> Course:
    """Load a course the user may edit.

    Raises:
        CourseNotFoundError: Course does not exist
        HTTPException(403): User is neither owner nor admin
    """
    course = await course_service.require_course(course_id)
    if not is_owner_or_admin(user, course.teacher_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to edit this course",
        )
    return course


def handle_course_error(error: AppError) -> HTTPException:
    """Convert course errors to HTTP exceptions."""
    status_map = {
        "course_not_found": status.HTTP_404_NOT_FOUND,
        "module_not_found": status.HTTP_404_NOT_FOUND,
        "lesson_not_found": status.HTTP_404_NOT_FOUND,
        "category_not_found": status.HTTP_404_NOT_FOUND,
        "store_unavailable": status.HTTP_503_SERVICE_UNAVAILABLE,
    }

    status_code = status_map.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    return HTTPException(
        status_code=status_code,
        detail=error.message,
    )
