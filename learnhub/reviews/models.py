"""Database models for course reviews.

One review per (course, student), partitioned by course so the course page
reads all reviews of a course from a single partition.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from learnhub.courses.models import ensure_utc_aware


REVIEW_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.reviews (
    course_id UUID,
    student_id UUID,
    id UUID,
    rating INT,
    comment TEXT,
    created_at TIMESTAMP,
    PRIMARY KEY ((course_id), student_id)
)
"""

REVIEWS_TABLES_CQL = [REVIEW_TABLE_CQL]


@dataclass
class Review:
    """Course review entity."""

    course_id: UUID
    student_id: UUID
    rating: int
    comment: str | None = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_row(cls, row: Any) -> "Review":
        """Create Review from Cassandra row."""
        return cls(
            course_id=row.course_id,
            student_id=row.student_id,
            rating=row.rating,
            comment=row.comment,
            id=row.id,
            created_at=ensure_utc_aware(row.created_at),
        )
