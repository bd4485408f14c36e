"""Storage interfaces consumed by the progress tracker.

``EnrollmentStore`` and ``ContentStore`` are the only ways the tracker
touches persistence. The Cassandra implementations below run every call
through ``store_errors`` so driver failures surface as
``StoreUnavailableError``.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Protocol
from uuid import UUID, uuid4

import structlog

from learnhub.core.errors import store_errors

from .models import Enrollment, LessonProgress


if TYPE_CHECKING:
    from collections.abc import Collection

    from cassandra.cluster import Session

logger = structlog.get_logger(__name__)


# ==============================================================================
# Interfaces
# ==============================================================================


class EnrollmentStore(Protocol):
    """Read/create/update enrollments keyed by (student, course)."""

    async def find_enrollment(
        self, student_id: UUID, course_id: UUID
    ) -> Enrollment | None: ...

    async def get_enrollment_by_id(self, enrollment_id: UUID) -> Enrollment | None: ...

    async def insert_enrollment(self, enrollment: Enrollment) -> None: ...

    async def update_enrollment(
        self,
        enrollment_id: UUID,
        progress_percentage: int,
        completed_at: datetime | None,
    ) -> bool:
        """Persist the aggregate. Returns False if the enrollment is gone."""
        ...

    async def list_student_enrollments(self, student_id: UUID) -> list[Enrollment]: ...

    async def count_course_enrollments(self, course_id: UUID) -> int: ...


class ContentStore(Protocol):
    """Read course lessons and read/write per-lesson completion records."""

    async def list_lesson_ids_for_course(self, course_id: UUID) -> list[UUID]: ...

    async def find_lesson_progress(
        self, enrollment_id: UUID, lesson_id: UUID
    ) -> LessonProgress | None: ...

    async def insert_lesson_progress(
        self,
        enrollment_id: UUID,
        lesson_id: UUID,
        completed: bool,
        completed_at: datetime | None,
    ) -> bool:
        """Insert a new record. Returns False if one already existed."""
        ...

    async def update_lesson_progress(
        self,
        progress_id: UUID,
        completed: bool,
        completed_at: datetime | None,
    ) -> bool: ...

    async def count_completed_lesson_progress(
        self,
        enrollment_id: UUID,
        lesson_ids: "Collection[UUID] | None" = None,
    ) -> int:
        """Count completed records, optionally only for the given lessons."""
        ...


# ==============================================================================
# Cassandra Implementations
# ==============================================================================


class CassandraEnrollmentStore:
    """Enrollment store backed by ``enrollments`` and ``enrollments_by_course``."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        self._get_enrollment = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.enrollments
            WHERE student_id = ? AND course_id = ?
        """)

        self._get_enrollment_by_id = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.enrollments WHERE id = ?
        """)

        self._get_student_enrollments = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.enrollments WHERE student_id = ?
        """)

        self._insert_enrollment = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.enrollments
            (student_id, course_id, id, enrolled_at, completed_at, progress_percentage)
            VALUES (?, ?, ?, ?, ?, ?)
        """)

        self._insert_enrollment_by_course = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.enrollments_by_course
            (course_id, student_id, enrollment_id, enrolled_at)
            VALUES (?, ?, ?, ?)
        """)

        self._update_progress = self.session.prepare(f"""
            UPDATE {self.keyspace}.enrollments
            SET progress_percentage = ?, completed_at = ?
            WHERE student_id = ? AND course_id = ?
        """)

        self._count_course_enrollments = self.session.prepare(f"""
            SELECT COUNT(*) AS total FROM {self.keyspace}.enrollments_by_course
            WHERE course_id = ?
        """)

    async def find_enrollment(
        self, student_id: UUID, course_id: UUID
    ) -> Enrollment | None:
        """Get enrollment by student and course."""
        with store_errors("find_enrollment"):
            result = await self.session.aexecute(
                self._get_enrollment, [student_id, course_id]
            )
        row = result.one()
        return Enrollment.from_row(row) if row else None

    async def get_enrollment_by_id(self, enrollment_id: UUID) -> Enrollment | None:
        """Get enrollment by its identifier."""
        with store_errors("get_enrollment_by_id"):
            result = await self.session.aexecute(
                self._get_enrollment_by_id, [enrollment_id]
            )
        row = result.one()
        return Enrollment.from_row(row) if row else None

    async def insert_enrollment(self, enrollment: Enrollment) -> None:
        """Create enrollment (dual-write: main table + course lookup)."""
        with store_errors("insert_enrollment"):
            await self.session.aexecute(
                self._insert_enrollment,
                [
                    enrollment.student_id,
                    enrollment.course_id,
                    enrollment.id,
                    enrollment.enrolled_at,
                    enrollment.completed_at,
                    enrollment.progress_percentage,
                ],
            )
            await self.session.aexecute(
                self._insert_enrollment_by_course,
                [
                    enrollment.course_id,
                    enrollment.student_id,
                    enrollment.id,
                    enrollment.enrolled_at,
                ],
            )

    async def update_enrollment(
        self,
        enrollment_id: UUID,
        progress_percentage: int,
        completed_at: datetime | None,
    ) -> bool:
        """Write the aggregate progress fields of an enrollment."""
        enrollment = await self.get_enrollment_by_id(enrollment_id)
        if enrollment is None:
            return False

        with store_errors("update_enrollment"):
            await self.session.aexecute(
                self._update_progress,
                [
                    progress_percentage,
                    completed_at,
                    enrollment.student_id,
                    enrollment.course_id,
                ],
            )
        return True

    async def list_student_enrollments(self, student_id: UUID) -> list[Enrollment]:
        """Get all enrollments of a student, newest first."""
        with store_errors("list_student_enrollments"):
            rows = await self.session.aexecute(
                self._get_student_enrollments, [student_id]
            )
        enrollments = [Enrollment.from_row(row) for row in rows]
        return sorted(enrollments, key=lambda e: e.enrolled_at, reverse=True)

    async def count_course_enrollments(self, course_id: UUID) -> int:
        """Count students enrolled in a course."""
        with store_errors("count_course_enrollments"):
            result = await self.session.aexecute(
                self._count_course_enrollments, [course_id]
            )
        row = result.one()
        return row.total if row else 0


class CassandraContentStore:
    """Content store: course lessons plus ``lesson_progress`` rows."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        self._get_course_module_ids = self.session.prepare(f"""
            SELECT id FROM {self.keyspace}.modules WHERE course_id = ?
        """)

        self._get_lesson_ids_for_modules = self.session.prepare(f"""
            SELECT id FROM {self.keyspace}.lessons WHERE module_id IN ?
        """)

        self._get_lesson_progress = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.lesson_progress
            WHERE enrollment_id = ? AND lesson_id = ?
        """)

        self._get_lesson_progress_by_id = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.lesson_progress WHERE id = ?
        """)

        self._get_enrollment_progress = self.session.prepare(f"""
            SELECT lesson_id, completed FROM {self.keyspace}.lesson_progress
            WHERE enrollment_id = ?
        """)

        # Conditional insert: a racing duplicate is reported as not applied
        self._insert_lesson_progress = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.lesson_progress
            (enrollment_id, lesson_id, id, completed, completed_at,
             last_position_seconds)
            VALUES (?, ?, ?, ?, ?, ?)
            IF NOT EXISTS
        """)

        # Every write to lesson_progress is a lightweight transaction
        self._update_lesson_progress = self.session.prepare(f"""
            UPDATE {self.keyspace}.lesson_progress
            SET completed = ?, completed_at = ?
            WHERE enrollment_id = ? AND lesson_id = ?
            IF completed = false
        """)

    async def list_lesson_ids_for_course(self, course_id: UUID) -> list[UUID]:
        """List lesson ids of a course (modules of course, then their lessons)."""
        with store_errors("list_course_modules"):
            module_rows = await self.session.aexecute(
                self._get_course_module_ids, [course_id]
            )
        module_ids = [row.id for row in module_rows]
        if not module_ids:
            return []

        with store_errors("list_module_lessons"):
            lesson_rows = await self.session.aexecute(
                self._get_lesson_ids_for_modules, [module_ids]
            )
        return [row.id for row in lesson_rows]

    async def find_lesson_progress(
        self, enrollment_id: UUID, lesson_id: UUID
    ) -> LessonProgress | None:
        """Get the completion record of a lesson for an enrollment."""
        with store_errors("find_lesson_progress"):
            result = await self.session.aexecute(
                self._get_lesson_progress, [enrollment_id, lesson_id]
            )
        row = result.one()
        return LessonProgress.from_row(row) if row else None

    async def insert_lesson_progress(
        self,
        enrollment_id: UUID,
        lesson_id: UUID,
        completed: bool,
        completed_at: datetime | None,
    ) -> bool:
        """Insert a completion record unless one already exists."""
        with store_errors("insert_lesson_progress"):
            result = await self.session.aexecute(
                self._insert_lesson_progress,
                [enrollment_id, lesson_id, uuid4(), completed, completed_at, 0],
            )

        if not result.was_applied:
            logger.info(
                "lesson_progress_insert_not_applied",
                enrollment_id=str(enrollment_id),
                lesson_id=str(lesson_id),
            )
            return False
        return True

    async def update_lesson_progress(
        self,
        progress_id: UUID,
        completed: bool,
        completed_at: datetime | None,
    ) -> bool:
        """Update a completion record addressed by its identifier.

        Only an incomplete record is changed. Returns False when the record
        is missing or was already completed.
        """
        with store_errors("get_lesson_progress_by_id"):
            result = await self.session.aexecute(
                self._get_lesson_progress_by_id, [progress_id]
            )
        row = result.one()
        if row is None:
            return False

        with store_errors("update_lesson_progress"):
            result = await self.session.aexecute(
                self._update_lesson_progress,
                [completed, completed_at, row.enrollment_id, row.lesson_id],
            )

        if not result.was_applied:
            logger.info(
                "lesson_progress_update_not_applied",
                enrollment_id=str(row.enrollment_id),
                lesson_id=str(row.lesson_id),
            )
            return False
        return True

    async def count_completed_lesson_progress(
        self,
        enrollment_id: UUID,
        lesson_ids: "Collection[UUID] | None" = None,
    ) -> int:
        """Count completed lessons of an enrollment.

        When ``lesson_ids`` is given, records of lessons outside it (e.g.
        lessons deleted from the course) are not counted.
        """
        with store_errors("count_completed_lesson_progress"):
            rows = await self.session.aexecute(
                self._get_enrollment_progress, [enrollment_id]
            )
        allowed = set(lesson_ids) if lesson_ids is not None else None
        return sum(
            1
            for row in rows
            if row.completed and (allowed is None or row.lesson_id in allowed)
        )
