"""FastAPI dependencies for progress tracking.

Provides dependency injection for:
- Progress tracker
- Enrollment service
- Error handlers
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from learnhub.core.errors import AppError

from .service import EnrollmentService, ProgressTracker


async def get_progress_tracker(request: Request) -> ProgressTracker:
    """Get progress tracker from app state."""
    app_state = request.app.state
    if not getattr(app_state, "progress_tracker", None):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Progress service not available",
        )
    return app_state.progress_tracker


async def get_enrollment_service(request: Request) -> EnrollmentService:
    """Get enrollment service from app state."""
    app_state = request.app.state
    if not getattr(app_state, "enrollment_service", None):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Enrollment service not available",
        )
    return app_state.enrollment_service


# Type aliases for dependency injection
ProgressTrackerDep = Annotated[ProgressTracker, Depends(get_progress_tracker)]
EnrollmentServiceDep = Annotated[EnrollmentService, Depends(get_enrollment_service)]


def handle_progress_error(error: AppError) -> HTTPException:
    """Convert progress errors to HTTP exceptions."""
    status_map = {
        "not_enrolled": status.HTTP_404_NOT_FOUND,
        "already_enrolled": status.HTTP_409_CONFLICT,
        "store_unavailable": status.HTTP_503_SERVICE_UNAVAILABLE,
    }

    status_code = status_map.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    return HTTPException(
        status_code=status_code,
        detail=error.message,
    )
