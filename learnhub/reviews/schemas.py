"""Pydantic schemas for course reviews."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .models import Review


class CreateReviewRequest(BaseModel):
    """Request to review a course."""

    rating: int = Field(..., ge=1, le=5, description="Stars, 1 to 5")
    comment: str | None = Field(None, max_length=2000)


class ReviewResponse(BaseModel):
    """Review response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    course_id: UUID
    student_id: UUID
    rating: int
    comment: str | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, entity: Review) -> "ReviewResponse":
        """Create response from entity."""
        return cls.model_validate(entity)


class ReviewListResponse(BaseModel):
    """Reviews of a course with rating summary."""

    items: list[ReviewResponse]
    total_reviews: int = 0
    average_rating: float = 0.0
