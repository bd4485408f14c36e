"""Tests for EnrollmentService."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from learnhub.courses.models import Course
from learnhub.courses.service import CourseNotFoundError
from learnhub.progress.service import AlreadyEnrolledError


@pytest.fixture
def published_course(mock_course_service, course_id, teacher_id) -> Course:
    course = Course(
        id=course_id, teacher_id=teacher_id, title="Python 101", is_published=True
    )
    mock_course_service.get_course.return_value = course
    return course


class TestEnroll:
    @pytest.mark.asyncio
    async def test_enroll_in_published_course(
        self, enrollment_service, enrollment_store, published_course, student_id, now
    ) -> None:
        enrollment = await enrollment_service.enroll(
            student_id, published_course.id, now=now
        )

        assert enrollment.student_id == student_id
        assert enrollment.progress_percentage == 0
        assert enrollment.completed_at is None
        assert enrollment.enrolled_at == now
        assert enrollment_store.rows[(student_id, published_course.id)] is enrollment

    @pytest.mark.asyncio
    async def test_enroll_twice_is_rejected(
        self, enrollment_service, published_course, student_id
    ) -> None:
        await enrollment_service.enroll(student_id, published_course.id)

        with pytest.raises(AlreadyEnrolledError) as exc_info:
            await enrollment_service.enroll(student_id, published_course.id)

        assert exc_info.value.code == "already_enrolled"

    @pytest.mark.asyncio
    async def test_draft_course_cannot_be_joined(
        self, enrollment_service, enrollment_store, published_course, student_id
    ) -> None:
        published_course.is_published = False

        with pytest.raises(CourseNotFoundError):
            await enrollment_service.enroll(student_id, published_course.id)

        assert enrollment_store.rows == {}

    @pytest.mark.asyncio
    async def test_unknown_course(self, enrollment_service, student_id) -> None:
        with pytest.raises(CourseNotFoundError):
            await enrollment_service.enroll(student_id, uuid4())


class TestEnrollmentQueries:
    @pytest.mark.asyncio
    async def test_list_newest_first(
        self, enrollment_service, mock_course_service, student_id, teacher_id
    ) -> None:
        start = datetime(2024, 1, 1, tzinfo=UTC)
        course_ids = []
        for offset in range(3):
            course = Course(teacher_id=teacher_id, title="c", is_published=True)
            mock_course_service.get_course.return_value = course
            await enrollment_service.enroll(
                student_id, course.id, now=start + timedelta(days=offset)
            )
            course_ids.append(course.id)

        enrollments = await enrollment_service.list_student_enrollments(student_id)

        assert [e.course_id for e in enrollments] == list(reversed(course_ids))

    @pytest.mark.asyncio
    async def test_lookup_by_id_and_pair(
        self, enrollment_service, enrollment, student_id, course_id
    ) -> None:
        assert await enrollment_service.get_enrollment_by_id(enrollment.id) is enrollment
        assert await enrollment_service.get_enrollment(student_id, course_id) is enrollment
        assert await enrollment_service.get_enrollment(uuid4(), course_id) is None

    @pytest.mark.asyncio
    async def test_count_course_enrollments(
        self, enrollment_service, enrollment, course_id
    ) -> None:
        assert await enrollment_service.count_course_enrollments(course_id) == 1
        assert await enrollment_service.count_course_enrollments(uuid4()) == 0
