"""Student progress tracking module.

Provides:
- Lesson completion with idempotent recording
- Course progress aggregation on every completion
- Course enrollment management
"""

from .models import PROGRESS_TABLES_CQL, Enrollment, LessonProgress
from .service import (
    EnrollmentService,
    NotEnrolledError,
    ProgressTracker,
    compute_progress_percentage,
)


__all__ = [
    "PROGRESS_TABLES_CQL",
    "Enrollment",
    "EnrollmentService",
    "LessonProgress",
    "NotEnrolledError",
    "ProgressTracker",
    "compute_progress_percentage",
]
