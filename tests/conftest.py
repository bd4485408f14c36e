"""Shared fixtures: in-memory stores, services on app.state, auth tokens."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, Mock
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from learnhub.auth.permissions import UserRole
from learnhub.auth.security import create_access_token
from learnhub.core.errors import StoreUnavailableError
from learnhub.progress.models import Enrollment, LessonProgress
from learnhub.progress.service import EnrollmentService, ProgressTracker


# ==============================================================================
# In-memory stores
# ==============================================================================


class FakeEnrollmentStore:
    """EnrollmentStore kept in a dict, recording every write."""

    def __init__(self) -> None:
        self.rows: dict[tuple[UUID, UUID], Enrollment] = {}
        self.writes: list[tuple[str, UUID]] = []
        self.fail = False

    def _check(self) -> None:
        if self.fail:
            raise StoreUnavailableError

    async def find_enrollment(self, student_id, course_id):
        self._check()
        return self.rows.get((student_id, course_id))

    async def get_enrollment_by_id(self, enrollment_id):
        self._check()
        return next((e for e in self.rows.values() if e.id == enrollment_id), None)

    async def insert_enrollment(self, enrollment):
        self._check()
        self.writes.append(("insert_enrollment", enrollment.id))
        self.rows[(enrollment.student_id, enrollment.course_id)] = enrollment

    async def update_enrollment(self, enrollment_id, progress_percentage, completed_at):
        self._check()
        enrollment = await self.get_enrollment_by_id(enrollment_id)
        if enrollment is None:
            return False
        self.writes.append(("update_enrollment", enrollment_id))
        enrollment.progress_percentage = progress_percentage
        enrollment.completed_at = completed_at
        return True

    async def list_student_enrollments(self, student_id):
        self._check()
        return sorted(
            (e for e in self.rows.values() if e.student_id == student_id),
            key=lambda e: e.enrolled_at,
            reverse=True,
        )

    async def count_course_enrollments(self, course_id):
        self._check()
        return sum(1 for e in self.rows.values() if e.course_id == course_id)


class FakeContentStore:
    """ContentStore with lessons per course and progress records in dicts."""

    def __init__(self) -> None:
        self.lessons: dict[UUID, list[UUID]] = {}
        self.progress: dict[tuple[UUID, UUID], LessonProgress] = {}
        self.writes: list[tuple[str, UUID]] = []
        self.fail = False

    def _check(self) -> None:
        if self.fail:
            raise StoreUnavailableError

    def add_lessons(self, course_id: UUID, count: int) -> list[UUID]:
        new = [uuid4() for _ in range(count)]
        self.lessons.setdefault(course_id, []).extend(new)
        return new

    def remove_lesson(self, course_id: UUID, lesson_id: UUID) -> None:
        self.lessons[course_id].remove(lesson_id)

    async def list_lesson_ids_for_course(self, course_id):
        self._check()
        return list(self.lessons.get(course_id, []))

    async def find_lesson_progress(self, enrollment_id, lesson_id):
        self._check()
        return self.progress.get((enrollment_id, lesson_id))

    async def insert_lesson_progress(
        self, enrollment_id, lesson_id, completed, completed_at
    ):
        self._check()
        if (enrollment_id, lesson_id) in self.progress:
            return False
        self.writes.append(("insert_lesson_progress", lesson_id))
        self.progress[(enrollment_id, lesson_id)] = LessonProgress(
            enrollment_id=enrollment_id,
            lesson_id=lesson_id,
            completed=completed,
            completed_at=completed_at,
        )
        return True

    async def update_lesson_progress(self, progress_id, completed, completed_at):
        self._check()
        for record in self.progress.values():
            if record.id == progress_id:
                if record.completed:
                    return False
                self.writes.append(("update_lesson_progress", record.lesson_id))
                record.completed = completed
                record.completed_at = completed_at
                return True
        return False

    async def count_completed_lesson_progress(self, enrollment_id, lesson_ids=None):
        self._check()
        allowed = set(lesson_ids) if lesson_ids is not None else None
        return sum(
            1
            for (eid, lid), record in self.progress.items()
            if eid == enrollment_id
            and record.completed
            and (allowed is None or lid in allowed)
        )


# ==============================================================================
# Identities and clock
# ==============================================================================


@pytest.fixture
def student_id() -> UUID:
    return uuid4()


@pytest.fixture
def teacher_id() -> UUID:
    return uuid4()


@pytest.fixture
def course_id() -> UUID:
    return uuid4()


@pytest.fixture
def now() -> datetime:
    return datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


# ==============================================================================
# Stores and services
# ==============================================================================


@pytest.fixture
def enrollment_store() -> FakeEnrollmentStore:
    return FakeEnrollmentStore()


@pytest.fixture
def content_store() -> FakeContentStore:
    return FakeContentStore()


@pytest.fixture
def tracker(enrollment_store, content_store) -> ProgressTracker:
    return ProgressTracker(enrollments=enrollment_store, content=content_store)


@pytest.fixture
def enrollment(enrollment_store, student_id, course_id) -> Enrollment:
    """Student enrolled in course, no progress yet."""
    record = Enrollment(student_id=student_id, course_id=course_id)
    enrollment_store.rows[(student_id, course_id)] = record
    return record


@pytest.fixture
def mock_course_service() -> Mock:
    """CourseService double with async methods."""
    service = Mock()
    service.get_course = AsyncMock(return_value=None)
    service.require_course = AsyncMock()
    service.list_categories = AsyncMock(return_value=[])
    service.get_category = AsyncMock(return_value=None)
    return service


@pytest.fixture
def enrollment_service(enrollment_store, mock_course_service) -> EnrollmentService:
    return EnrollmentService(
        enrollments=enrollment_store, courses=mock_course_service
    )


# ==============================================================================
# HTTP
# ==============================================================================


def make_token(user_id: UUID, role: UserRole = UserRole.STUDENT) -> str:
    return create_access_token(
        {"sub": str(user_id), "email": f"{role.value}@example.com", "role": role.value}
    )


@pytest.fixture
def auth_headers():
    """Factory for Authorization headers."""

    def _headers(user_id: UUID, role: UserRole = UserRole.STUDENT) -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(user_id, role)}"}

    return _headers


@pytest.fixture
def app(tracker, enrollment_service, mock_course_service):
    """Application with in-memory services; lifespan (database) is not run."""
    from learnhub.main import create_app

    application = create_app()
    application.state.progress_tracker = tracker
    application.state.enrollment_service = enrollment_service
    application.state.course_service = mock_course_service
    application.state.review_service = None
    application.state.cassandra_session = None
    return application


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)
