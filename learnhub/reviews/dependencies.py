"""FastAPI dependencies for course reviews."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from learnhub.core.errors import AppError

from .service import ReviewService


async def get_review_service(request: Request) -> ReviewService:
    """Get review service from app state."""
    app_state = request.app.state
    if not getattr(app_state, "review_service", None):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Review service not available",
        )
    return app_state.review_service


ReviewServiceDep = Annotated[ReviewService, Depends(get_review_service)]


def handle_review_error(error: AppError) -> HTTPException:
    """Convert review errors to HTTP exceptions."""
    status_map = {
        "already_reviewed": status.HTTP_409_CONFLICT,
        "not_enrolled": status.HTTP_404_NOT_FOUND,
        "store_unavailable": status.HTTP_503_SERVICE_UNAVAILABLE,
    }

    status_code = status_map.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    return HTTPException(status_code=status_code, detail=error.message)
