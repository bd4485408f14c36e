"""Pydantic schemas for enrollments and lesson progress.

Request and response models for:
- Lesson completion and the resulting enrollment progress
- Single-lesson completion state
- Course enrollment
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .models import Enrollment


# ==============================================================================
# Lesson Completion Schemas
# ==============================================================================


class MarkLessonCompleteRequest(BaseModel):
    """Request to mark a lesson as complete."""

    course_id: UUID = Field(..., description="Course the lesson belongs to")


class EnrollmentProgress(BaseModel):
    """Enrollment aggregate after a completion event."""

    progress_percentage: int = Field(..., ge=0, le=100)
    completed_at: datetime | None = Field(
        None, description="Set only when progress_percentage is 100"
    )
    completed_lessons: int = Field(..., ge=0)
    total_lessons: int = Field(..., ge=0)


class LessonCompletionState(BaseModel):
    """Completion state of one lesson for one enrollment."""

    completed: bool = False
    completed_at: datetime | None = None


# ==============================================================================
# Enrollment Schemas
# ==============================================================================


class EnrollRequest(BaseModel):
    """Request to enroll in a course."""

    course_id: UUID = Field(..., description="Course UUID to enroll in")


class EnrollmentResponse(BaseModel):
    """Enrollment response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    student_id: UUID
    course_id: UUID
    enrolled_at: datetime
    completed_at: datetime | None = None
    progress_percentage: int

    @classmethod
    def from_entity(cls, entity: Enrollment) -> "EnrollmentResponse":
        """Create response from entity."""
        return cls.model_validate(entity)


class EnrollmentListResponse(BaseModel):
    """List of a student's enrollments."""

    items: list[EnrollmentResponse]
    total: int
