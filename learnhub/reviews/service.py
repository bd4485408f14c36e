"""Course review service layer.

Business logic for:
- Creating a review (enrolled students only, one per course)
- Listing reviews with the course's average rating
"""

import html
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from learnhub.core.errors import AppError, store_errors
from learnhub.progress.service import NotEnrolledError

from .models import Review
from .schemas import ReviewListResponse, ReviewResponse


if TYPE_CHECKING:
    from cassandra.cluster import Session

    from learnhub.progress.stores import EnrollmentStore

logger = structlog.get_logger(__name__)


class ReviewError(AppError):
    """Base review error."""

    def __init__(self, message: str, code: str = "review_error"):
        super().__init__(message, code)


class AlreadyReviewedError(ReviewError):
    """Student already reviewed this course."""

    def __init__(self, message: str = "You have already reviewed this course"):
        super().__init__(message, "already_reviewed")


def sanitize_comment(comment: str | None) -> str | None:
    """Escape HTML in a review comment; blank comments become None."""
    if comment is None or not comment.strip():
        return None
    return html.escape(comment.strip())


class ReviewService:
    """Service for course reviews."""

    def __init__(
        self,
        session: "Session",
        keyspace: str,
        enrollments: "EnrollmentStore",
    ):
        self.session = session
        self.keyspace = keyspace
        self.enrollments = enrollments
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        self._insert_review = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.reviews
            (course_id, student_id, id, rating, comment, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            IF NOT EXISTS
        """)

        self._get_course_reviews = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.reviews WHERE course_id = ?
        """)

    async def create_review(
        self,
        student_id: UUID,
        course_id: UUID,
        rating: int,
        comment: str | None = None,
        now: datetime | None = None,
    ) -> Review:
        """Create a review.

        Raises:
            NotEnrolledError: Student is not enrolled in the course
            AlreadyReviewedError: Student already reviewed the course
        """
        if await self.enrollments.find_enrollment(student_id, course_id) is None:
            raise NotEnrolledError

        review = Review(
            course_id=course_id,
            student_id=student_id,
            rating=rating,
            comment=sanitize_comment(comment),
            created_at=now or datetime.now(UTC),
        )

        with store_errors("insert_review"):
            result = await self.session.aexecute(
                self._insert_review,
                [
                    review.course_id,
                    review.student_id,
                    review.id,
                    review.rating,
                    review.comment,
                    review.created_at,
                ],
            )
        if not result.was_applied:
            raise AlreadyReviewedError

        logger.info(
            "review_created",
            course_id=str(course_id),
            student_id=str(student_id),
            rating=rating,
        )
        return review

    async def list_reviews(self, course_id: UUID) -> ReviewListResponse:
        """Reviews of a course, newest first, with the average rating."""
        with store_errors("list_reviews"):
            rows = await self.session.aexecute(self._get_course_reviews, [course_id])

        reviews = sorted(
            (Review.from_row(row) for row in rows),
            key=lambda r: r.created_at,
            reverse=True,
        )
        total = len(reviews)
        average = sum(r.rating for r in reviews) / total if total else 0.0

        return ReviewListResponse(
            items=[ReviewResponse.from_entity(r) for r in reviews],
            total_reviews=total,
            average_rating=round(average, 1),
        )
