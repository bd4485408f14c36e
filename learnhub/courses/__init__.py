"""Course content management module.

Provides:
- Course categories
- Courses owned by teachers
- Ordered modules and lessons
- Course outline for the lesson player
"""

from .models import (
    COURSES_TABLES_CQL,
    Category,
    Course,
    CourseStatus,
    DifficultyLevel,
    Lesson,
    Module,
)
from .service import CategoryNotFoundError, CourseNotFoundError, CourseService


__all__ = [
    "COURSES_TABLES_CQL",
    "Category",
    "CategoryNotFoundError",
    "Course",
    "CourseNotFoundError",
    "CourseService",
    "CourseStatus",
    "DifficultyLevel",
    "Lesson",
    "Module",
]
