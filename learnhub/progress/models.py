"""Database models for enrollments and lesson progress.

Cassandra table definitions for:
- Enrollments: one row per (student, course), owns the aggregate percentage
- Enrollments by course: lookup for per-course enrollment counts
- Lesson progress: one row per (enrollment, lesson)

Rows are addressed by their natural keys; secondary indexes on ``id``
support updates addressed by identifier.
"""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from learnhub.courses.models import ensure_utc_aware


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

ENROLLMENTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.enrollments (
    student_id UUID,
    course_id UUID,
    id UUID,
    enrolled_at TIMESTAMP,
    completed_at TIMESTAMP,
    progress_percentage INT,
    PRIMARY KEY (student_id, course_id)
)
"""

ENROLLMENTS_ID_INDEX_CQL = """
CREATE INDEX IF NOT EXISTS enrollments_id_idx ON {keyspace}.enrollments (id)
"""

# Lookup: students per course (teacher dashboard counts)
ENROLLMENTS_BY_COURSE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.enrollments_by_course (
    course_id UUID,
    student_id UUID,
    enrollment_id UUID,
    enrolled_at TIMESTAMP,
    PRIMARY KEY (course_id, student_id)
)
"""

LESSON_PROGRESS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.lesson_progress (
    enrollment_id UUID,
    lesson_id UUID,
    id UUID,
    completed BOOLEAN,
    completed_at TIMESTAMP,
    last_position_seconds INT,
    PRIMARY KEY (enrollment_id, lesson_id)
)
"""

LESSON_PROGRESS_ID_INDEX_CQL = """
CREATE INDEX IF NOT EXISTS lesson_progress_id_idx ON {keyspace}.lesson_progress (id)
"""

PROGRESS_TABLES_CQL = [
    ENROLLMENTS_TABLE_CQL,
    ENROLLMENTS_ID_INDEX_CQL,
    ENROLLMENTS_BY_COURSE_TABLE_CQL,
    LESSON_PROGRESS_TABLE_CQL,
    LESSON_PROGRESS_ID_INDEX_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


class Enrollment:
    """A student's registration in a course.

    Attributes:
        id: Enrollment UUID
        student_id: Student UUID
        course_id: Course UUID
        enrolled_at: Enrollment timestamp
        completed_at: Set iff progress_percentage is 100
        progress_percentage: Rounded share of completed lessons (0-100)
    """

    def __init__(
        self,
        student_id: UUID,
        course_id: UUID,
        id: UUID | None = None,
        enrolled_at: datetime | None = None,
        completed_at: datetime | None = None,
        progress_percentage: int = 0,
    ):
        self.id = id or uuid4()
        self.student_id = student_id
        self.course_id = course_id
        self.enrolled_at = ensure_utc_aware(enrolled_at) or datetime.now(UTC)
        self.completed_at = ensure_utc_aware(completed_at)
        self.progress_percentage = progress_percentage

    @property
    def is_completed(self) -> bool:
        """Check if the course is completed."""
        return self.completed_at is not None

    @classmethod
    def from_row(cls, row: Any) -> "Enrollment":
        """Create Enrollment instance from Cassandra row."""
        return cls(
            id=row.id,
            student_id=row.student_id,
            course_id=row.course_id,
            enrolled_at=row.enrolled_at,
            completed_at=row.completed_at,
            progress_percentage=row.progress_percentage or 0,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "student_id": self.student_id,
            "course_id": self.course_id,
            "enrolled_at": self.enrolled_at,
            "completed_at": self.completed_at,
            "progress_percentage": self.progress_percentage,
        }

    def __repr__(self) -> str:
        return (
            f"<Enrollment student={self.student_id} course={self.course_id} "
            f"{self.progress_percentage}%>"
        )


class LessonProgress:
    """Per-lesson completion record scoped to one enrollment.

    ``completed`` only ever goes from False to True.
    ``last_position_seconds`` is kept for the player's resume feature.
    """

    def __init__(
        self,
        enrollment_id: UUID,
        lesson_id: UUID,
        id: UUID | None = None,
        completed: bool = False,
        completed_at: datetime | None = None,
        last_position_seconds: int = 0,
    ):
        self.id = id or uuid4()
        self.enrollment_id = enrollment_id
        self.lesson_id = lesson_id
        self.completed = completed
        self.completed_at = ensure_utc_aware(completed_at)
        self.last_position_seconds = last_position_seconds

    @classmethod
    def from_row(cls, row: Any) -> "LessonProgress":
        """Create LessonProgress instance from Cassandra row."""
        return cls(
            id=row.id,
            enrollment_id=row.enrollment_id,
            lesson_id=row.lesson_id,
            completed=bool(row.completed),
            completed_at=row.completed_at,
            last_position_seconds=row.last_position_seconds or 0,
        )

    def __repr__(self) -> str:
        state = "completed" if self.completed else "open"
        return (
            f"<LessonProgress enrollment={self.enrollment_id} "
            f"lesson={self.lesson_id} {state}>"
        )
