"""Database models for course content.

Cassandra table definitions for:
- Categories: small reference table for the course picker
- Courses: one row per course, plus lookups by teacher and by status
- Modules: partitioned by course, ordered by order_index in the service
- Lessons: partitioned by module

Lessons of a course are read in two steps (modules of course, then
lessons of those modules), which keeps both partitions small.
"""

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID, uuid4


class DifficultyLevel(str, Enum):
    """Course difficulty level."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class CourseStatus(str, Enum):
    """Publication status, derived from ``Course.is_published``."""

    DRAFT = "draft"
    PUBLISHED = "published"


def ensure_utc_aware(dt: datetime | None) -> datetime | None:
    """Ensure datetime is UTC-aware (Cassandra returns naive datetimes)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

CATEGORY_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.categories (
    id UUID PRIMARY KEY,
    name TEXT,
    description TEXT,
    created_at TIMESTAMP
)
"""

COURSE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.courses (
    id UUID PRIMARY KEY,
    teacher_id UUID,
    title TEXT,
    description TEXT,
    category_id UUID,
    difficulty_level TEXT,
    thumbnail_url TEXT,
    price DECIMAL,
    is_published BOOLEAN,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

# Teacher dashboard: "my courses", newest first
COURSES_BY_TEACHER_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.courses_by_teacher (
    teacher_id UUID,
    created_at TIMESTAMP,
    course_id UUID,
    PRIMARY KEY (teacher_id, created_at, course_id)
) WITH CLUSTERING ORDER BY (created_at DESC, course_id ASC)
"""

# Catalog: published courses, newest first
COURSES_BY_STATUS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.courses_by_status (
    status TEXT,
    created_at TIMESTAMP,
    course_id UUID,
    PRIMARY KEY (status, created_at, course_id)
) WITH CLUSTERING ORDER BY (created_at DESC, course_id ASC)
"""

MODULE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.modules (
    course_id UUID,
    id UUID,
    title TEXT,
    description TEXT,
    order_index INT,
    created_at TIMESTAMP,
    PRIMARY KEY (course_id, id)
)
"""

LESSON_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.lessons (
    module_id UUID,
    id UUID,
    title TEXT,
    content TEXT,
    video_url TEXT,
    duration_minutes INT,
    order_index INT,
    created_at TIMESTAMP,
    PRIMARY KEY (module_id, id)
)
"""

COURSES_TABLES_CQL = [
    CATEGORY_TABLE_CQL,
    COURSE_TABLE_CQL,
    COURSES_BY_TEACHER_TABLE_CQL,
    COURSES_BY_STATUS_TABLE_CQL,
    MODULE_TABLE_CQL,
    LESSON_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


class Category:
    """Course category (e.g. "Programming", "Design")."""

    def __init__(
        self,
        name: str,
        id: UUID | None = None,
        description: str | None = None,
        created_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.name = name
        self.description = description
        self.created_at = ensure_utc_aware(created_at) or datetime.now(UTC)

    @classmethod
    def from_row(cls, row: Any) -> "Category":
        """Create Category instance from Cassandra row."""
        return cls(
            id=row.id,
            name=row.name,
            description=row.description,
            created_at=row.created_at,
        )

    def __repr__(self) -> str:
        return f"<Category {self.id} {self.name!r}>"


class Course:
    """Course entity.

    Attributes:
        id: Course UUID
        teacher_id: Owning teacher UUID
        title: Course title
        description: Optional long description
        category_id: Optional category UUID
        difficulty_level: beginner, intermediate, advanced or None
        thumbnail_url: Optional cover image
        price: Listed price (informational, never charged)
        is_published: Visible to students when True
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    def __init__(
        self,
        teacher_id: UUID,
        title: str,
        id: UUID | None = None,
        description: str | None = None,
        category_id: UUID | None = None,
        difficulty_level: str | None = None,
        thumbnail_url: str | None = None,
        price: Decimal = Decimal(0),
        is_published: bool = False,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.teacher_id = teacher_id
        self.title = title
        self.description = description
        self.category_id = category_id
        self.difficulty_level = difficulty_level
        self.thumbnail_url = thumbnail_url
        self.price = price
        self.is_published = is_published
        self.created_at = ensure_utc_aware(created_at) or datetime.now(UTC)
        self.updated_at = ensure_utc_aware(updated_at)

    @classmethod
    def from_row(cls, row: Any) -> "Course":
        """Create Course instance from Cassandra row."""
        return cls(
            id=row.id,
            teacher_id=row.teacher_id,
            title=row.title,
            description=row.description,
            category_id=row.category_id,
            difficulty_level=row.difficulty_level,
            thumbnail_url=row.thumbnail_url,
            price=row.price or Decimal(0),
            is_published=bool(row.is_published),
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    @property
    def status(self) -> str:
        """Key of the course in ``courses_by_status``."""
        if self.is_published:
            return CourseStatus.PUBLISHED.value
        return CourseStatus.DRAFT.value

    def __repr__(self) -> str:
        return f"<Course {self.id} {self.title!r} {self.status}>"


class Module:
    """Module entity: an ordered group of lessons within a course."""

    def __init__(
        self,
        course_id: UUID,
        title: str,
        order_index: int = 0,
        id: UUID | None = None,
        description: str | None = None,
        created_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.course_id = course_id
        self.title = title
        self.description = description
        self.order_index = order_index
        self.created_at = ensure_utc_aware(created_at) or datetime.now(UTC)

    @classmethod
    def from_row(cls, row: Any) -> "Module":
        """Create Module instance from Cassandra row."""
        return cls(
            id=row.id,
            course_id=row.course_id,
            title=row.title,
            description=row.description,
            order_index=row.order_index or 0,
            created_at=row.created_at,
        )

    def __repr__(self) -> str:
        return f"<Module {self.id} course={self.course_id} #{self.order_index}>"


class Lesson:
    """Lesson entity.

    ``duration_minutes`` is informational; progress only counts lessons.
    """

    def __init__(
        self,
        module_id: UUID,
        title: str,
        order_index: int = 0,
        id: UUID | None = None,
        content: str | None = None,
        video_url: str | None = None,
        duration_minutes: int = 0,
        created_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.module_id = module_id
        self.title = title
        self.content = content
        self.video_url = video_url
        self.duration_minutes = duration_minutes
        self.order_index = order_index
        self.created_at = ensure_utc_aware(created_at) or datetime.now(UTC)

    @classmethod
    def from_row(cls, row: Any) -> "Lesson":
        """Create Lesson instance from Cassandra row."""
        return cls(
            id=row.id,
            module_id=row.module_id,
            title=row.title,
            content=row.content,
            video_url=row.video_url,
            duration_minutes=row.duration_minutes or 0,
            order_index=row.order_index or 0,
            created_at=row.created_at,
        )

    def __repr__(self) -> str:
        return f"<Lesson {self.id} module={self.module_id} #{self.order_index}>"
