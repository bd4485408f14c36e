"""Tests for course endpoints: ownership, visibility and error mapping."""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from learnhub.auth.permissions import UserRole
from learnhub.courses.models import Category, Course, Module
from learnhub.courses.schemas import CourseOutlineResponse, CourseResponse
from learnhub.courses.service import (
    CategoryNotFoundError,
    CourseNotFoundError,
    ModuleNotFoundError,
)


@pytest.fixture
def own_course(mock_course_service, teacher_id) -> Course:
    course = Course(teacher_id=teacher_id, title="Owned", is_published=False)
    mock_course_service.require_course.return_value = course
    return course


class TestCatalog:
    def test_list_published_is_public(self, client, mock_course_service) -> None:
        course = Course(teacher_id=uuid4(), title="Public", is_published=True)
        mock_course_service.list_published_courses = AsyncMock(return_value=[course])

        response = client.get("/v1/courses")

        assert response.status_code == 200
        assert response.json()["total"] == 1
        assert response.json()["items"][0]["title"] == "Public"

    def test_my_courses_include_enrollment_counts(
        self, client, auth_headers, mock_course_service, enrollment, teacher_id
    ) -> None:
        course = Course(
            id=enrollment.course_id, teacher_id=teacher_id, title="Mine"
        )
        mock_course_service.list_teacher_courses = AsyncMock(return_value=[course])

        response = client.get(
            "/v1/courses/mine", headers=auth_headers(teacher_id, UserRole.TEACHER)
        )

        assert response.status_code == 200
        assert response.json()["items"][0]["total_enrollments"] == 1

    def test_students_cannot_list_teacher_dashboard(
        self, client, auth_headers, student_id
    ) -> None:
        response = client.get("/v1/courses/mine", headers=auth_headers(student_id))

        assert response.status_code == 403


class TestCourseEditing:
    def test_create_course_as_teacher(
        self, client, auth_headers, mock_course_service, teacher_id
    ) -> None:
        created = Course(teacher_id=teacher_id, title="New course")
        mock_course_service.create_course = AsyncMock(return_value=created)

        response = client.post(
            "/v1/courses",
            json={"title": "New course", "price": "10.00"},
            headers=auth_headers(teacher_id, UserRole.TEACHER),
        )

        assert response.status_code == 201
        assert response.json()["teacher_id"] == str(teacher_id)
        kwargs = mock_course_service.create_course.await_args.kwargs
        assert kwargs["teacher_id"] == teacher_id

    def test_student_cannot_create_course(
        self, client, auth_headers, student_id
    ) -> None:
        response = client.post(
            "/v1/courses", json={"title": "x"}, headers=auth_headers(student_id)
        )

        assert response.status_code == 403

    def test_other_teacher_cannot_update(
        self, client, auth_headers, mock_course_service, own_course
    ) -> None:
        mock_course_service.update_course = AsyncMock()

        response = client.patch(
            f"/v1/courses/{own_course.id}",
            json={"title": "Hijacked"},
            headers=auth_headers(uuid4(), UserRole.TEACHER),
        )

        assert response.status_code == 403
        mock_course_service.update_course.assert_not_awaited()

    def test_admin_can_delete_any_course(
        self, client, auth_headers, mock_course_service, own_course
    ) -> None:
        mock_course_service.delete_course = AsyncMock()

        response = client.delete(
            f"/v1/courses/{own_course.id}",
            headers=auth_headers(uuid4(), UserRole.ADMIN),
        )

        assert response.status_code == 200
        mock_course_service.delete_course.assert_awaited_once_with(own_course.id)

    def test_clearing_required_fields_is_422(
        self, client, auth_headers, mock_course_service, own_course, teacher_id
    ) -> None:
        mock_course_service.update_course = AsyncMock()

        response = client.patch(
            f"/v1/courses/{own_course.id}",
            json={"title": None, "is_published": None},
            headers=auth_headers(teacher_id, UserRole.TEACHER),
        )

        assert response.status_code == 422
        mock_course_service.update_course.assert_not_awaited()

    def test_clearing_lesson_title_is_422(
        self, client, auth_headers, mock_course_service, own_course, teacher_id
    ) -> None:
        mock_course_service.update_lesson = AsyncMock()

        response = client.patch(
            f"/v1/courses/{own_course.id}/modules/{uuid4()}/lessons/{uuid4()}",
            json={"title": None},
            headers=auth_headers(teacher_id, UserRole.TEACHER),
        )

        assert response.status_code == 422
        mock_course_service.update_lesson.assert_not_awaited()

    def test_missing_course_is_404(
        self, client, auth_headers, mock_course_service, teacher_id
    ) -> None:
        mock_course_service.require_course.side_effect = CourseNotFoundError

        response = client.patch(
            f"/v1/courses/{uuid4()}",
            json={"title": "x"},
            headers=auth_headers(teacher_id, UserRole.TEACHER),
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Course not found"

    def test_create_module(
        self, client, auth_headers, mock_course_service, own_course, teacher_id
    ) -> None:
        module = Module(course_id=own_course.id, title="Basics", order_index=0)
        mock_course_service.create_module = AsyncMock(return_value=module)

        response = client.post(
            f"/v1/courses/{own_course.id}/modules",
            json={"title": "Basics"},
            headers=auth_headers(teacher_id, UserRole.TEACHER),
        )

        assert response.status_code == 201
        assert response.json()["order_index"] == 0

    def test_lesson_in_unknown_module_is_404(
        self, client, auth_headers, mock_course_service, own_course, teacher_id
    ) -> None:
        mock_course_service.create_lesson = AsyncMock(side_effect=ModuleNotFoundError)

        response = client.post(
            f"/v1/courses/{own_course.id}/modules/{uuid4()}/lessons",
            json={"title": "Lesson"},
            headers=auth_headers(teacher_id, UserRole.TEACHER),
        )

        assert response.status_code == 404


class TestOutline:
    def _outline(self, course: Course) -> CourseOutlineResponse:
        return CourseOutlineResponse(course=CourseResponse.from_entity(course))

    def test_draft_outline_hidden_from_others(
        self, client, mock_course_service, own_course
    ) -> None:
        mock_course_service.get_course_outline = AsyncMock(
            return_value=self._outline(own_course)
        )

        response = client.get(f"/v1/courses/{own_course.id}/outline")

        assert response.status_code == 404

    def test_owner_sees_draft_outline(
        self, client, auth_headers, mock_course_service, own_course, teacher_id
    ) -> None:
        mock_course_service.get_course_outline = AsyncMock(
            return_value=self._outline(own_course)
        )

        response = client.get(
            f"/v1/courses/{own_course.id}/outline",
            headers=auth_headers(teacher_id, UserRole.TEACHER),
        )

        assert response.status_code == 200
        assert response.json()["course"]["id"] == str(own_course.id)
        assert response.json()["total_lessons"] == 0


class TestCategories:
    def test_list_is_public(self, client, mock_course_service) -> None:
        mock_course_service.list_categories.return_value = [
            Category(name="Design"),
            Category(name="Programming"),
        ]

        response = client.get("/v1/categories")

        assert response.status_code == 200
        assert response.json()["total"] == 2
        assert [c["name"] for c in response.json()["items"]] == [
            "Design",
            "Programming",
        ]

    def test_admin_creates_category(
        self, client, auth_headers, mock_course_service
    ) -> None:
        mock_course_service.create_category = AsyncMock(
            return_value=Category(name="Data")
        )

        response = client.post(
            "/v1/categories",
            json={"name": "Data"},
            headers=auth_headers(uuid4(), UserRole.ADMIN),
        )

        assert response.status_code == 201
        assert response.json()["name"] == "Data"

    def test_teacher_cannot_create_category(
        self, client, auth_headers, teacher_id
    ) -> None:
        response = client.post(
            "/v1/categories",
            json={"name": "Data"},
            headers=auth_headers(teacher_id, UserRole.TEACHER),
        )

        assert response.status_code == 403

    def test_catalog_includes_category_name(
        self, client, mock_course_service
    ) -> None:
        category = Category(name="Programming")
        course = Course(
            teacher_id=uuid4(),
            title="Python",
            category_id=category.id,
            is_published=True,
        )
        mock_course_service.list_published_courses = AsyncMock(return_value=[course])
        mock_course_service.list_categories.return_value = [category]

        response = client.get("/v1/courses")

        item = response.json()["items"][0]
        assert item["category_id"] == str(category.id)
        assert item["category"]["name"] == "Programming"

    def test_unknown_category_on_create_is_404(
        self, client, auth_headers, mock_course_service, teacher_id
    ) -> None:
        mock_course_service.create_course = AsyncMock(
            side_effect=CategoryNotFoundError
        )

        response = client.post(
            "/v1/courses",
            json={"title": "New", "category_id": str(uuid4())},
            headers=auth_headers(teacher_id, UserRole.TEACHER),
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Category not found"
