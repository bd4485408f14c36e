"""Course review API endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from learnhub.auth.dependencies import StudentUser
from learnhub.core.errors import AppError

from .dependencies import ReviewServiceDep, handle_review_error
from .schemas import CreateReviewRequest, ReviewListResponse, ReviewResponse


router = APIRouter(prefix="/v1/courses", tags=["reviews"])


@router.get(
    "/{course_id}/reviews",
    response_model=ReviewListResponse,
    summary="List course reviews",
)
async def list_reviews(
    course_id: UUID,
    review_service: ReviewServiceDep,
) -> ReviewListResponse:
    """Public list of reviews with average rating."""
    try:
        return await review_service.list_reviews(course_id)
    except AppError as e:
        raise handle_review_error(e) from e


@router.post(
    "/{course_id}/reviews",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Review a course",
)
async def create_review(
    course_id: UUID,
    data: CreateReviewRequest,
    review_service: ReviewServiceDep,
    user: StudentUser,
) -> ReviewResponse:
    """Review a course the current user is enrolled in."""
    try:
        review = await review_service.create_review(
            student_id=user.id,
            course_id=course_id,
            rating=data.rating,
            comment=data.comment,
        )
    except AppError as e:
        raise handle_review_error(e) from e
    return ReviewResponse.from_entity(review)
