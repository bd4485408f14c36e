"""Course content service layer.

Business logic for:
- Course categories
- Course CRUD (owned by a teacher)
- Module and lesson CRUD within a course
- Ordered course outline for the course page and lesson player
"""

from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import UUID

import structlog
from pydantic import BaseModel

from learnhub.core.errors import AppError, store_errors

from .models import Category, Course, CourseStatus, Lesson, Module
from .schemas import (
    CourseOutlineResponse,
    CourseResponse,
    CreateCategoryRequest,
    CreateCourseRequest,
    CreateLessonRequest,
    CreateModuleRequest,
    LessonResponse,
    ModuleOutline,
    UpdateCourseRequest,
    UpdateLessonRequest,
    UpdateModuleRequest,
)


if TYPE_CHECKING:
    from cassandra.cluster import Session

logger = structlog.get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class CourseError(AppError):
    """Base course error."""

    def __init__(self, message: str, code: str = "course_error"):
        super().__init__(message, code)


class CourseNotFoundError(CourseError):
    """Course does not exist."""

    def __init__(self, message: str = "Course not found"):
        super().__init__(message, "course_not_found")


class ModuleNotFoundError(CourseError):
    """Module does not exist in the course."""

    def __init__(self, message: str = "Module not found"):
        super().__init__(message, "module_not_found")


class LessonNotFoundError(CourseError):
    """Lesson does not exist in the module."""

    def __init__(self, message: str = "Lesson not found"):
        super().__init__(message, "lesson_not_found")


class CategoryNotFoundError(CourseError):
    """Category does not exist."""

    def __init__(self, message: str = "Category not found"):
        super().__init__(message, "category_not_found")


def _changes(data: BaseModel) -> dict[str, Any]:
    """Fields explicitly sent in a request, converted to storable values."""
    changes = data.model_dump(exclude_unset=True)
    for key, value in changes.items():
        if isinstance(value, Enum):
            changes[key] = value.value
        elif key.endswith("_url") and value is not None:
            changes[key] = str(value)
    return changes


def _ordered(items: list[Any]) -> list[Any]:
    return sorted(items, key=lambda item: (item.order_index, item.created_at))


# ==============================================================================
# Course Service
# ==============================================================================


class CourseService:
    """Service for courses, modules and lessons."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        # Categories
        self._get_category = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.categories WHERE id = ?
        """)

        self._list_categories = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.categories
        """)

        self._insert_category = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.categories
            (id, name, description, created_at) VALUES (?, ?, ?, ?)
        """)

        # Courses
        self._get_course = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.courses WHERE id = ?
        """)

        self._upsert_course = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.courses
            (id, teacher_id, title, description, category_id, difficulty_level,
             thumbnail_url, price, is_published, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._delete_course = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.courses WHERE id = ?
        """)

        self._insert_course_by_teacher = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.courses_by_teacher
            (teacher_id, created_at, course_id) VALUES (?, ?, ?)
        """)

        self._get_courses_by_teacher = self.session.prepare(f"""
            SELECT course_id FROM {self.keyspace}.courses_by_teacher
            WHERE teacher_id = ?
        """)

        self._delete_course_by_teacher = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.courses_by_teacher
            WHERE teacher_id = ? AND created_at = ? AND course_id = ?
        """)

        self._insert_course_by_status = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.courses_by_status
            (status, created_at, course_id) VALUES (?, ?, ?)
        """)

        self._get_courses_by_status = self.session.prepare(f"""
            SELECT course_id FROM {self.keyspace}.courses_by_status
            WHERE status = ? LIMIT ?
        """)

        self._delete_course_by_status = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.courses_by_status
            WHERE status = ? AND created_at = ? AND course_id = ?
        """)

        # Modules
        self._get_module = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.modules WHERE course_id = ? AND id = ?
        """)

        self._get_course_modules = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.modules WHERE course_id = ?
        """)

        self._upsert_module = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.modules
            (course_id, id, title, description, order_index, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
        """)

        self._delete_module = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.modules WHERE course_id = ? AND id = ?
        """)

        self._delete_course_modules = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.modules WHERE course_id = ?
        """)

        # Lessons
        self._get_lesson = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.lessons WHERE module_id = ? AND id = ?
        """)

        self._get_module_lessons = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.lessons WHERE module_id = ?
        """)

        self._upsert_lesson = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.lessons
            (module_id, id, title, content, video_url, duration_minutes,
             order_index, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._delete_lesson = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.lessons WHERE module_id = ? AND id = ?
        """)

        self._delete_module_lessons = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.lessons WHERE module_id = ?
        """)

    # ==========================================================================
    # Category Operations
    # ==========================================================================

    async def create_category(self, data: CreateCategoryRequest) -> Category:
        """Create a category."""
        category = Category(name=data.name, description=data.description)
        with store_errors("insert_category"):
            await self.session.aexecute(
                self._insert_category,
                [
                    category.id,
                    category.name,
                    category.description,
                    category.created_at,
                ],
            )
        logger.info(
            "category_created", category_id=str(category.id), name=category.name
        )
        return category

    async def get_category(self, category_id: UUID) -> Category | None:
        """Get category by ID."""
        with store_errors("get_category"):
            result = await self.session.aexecute(self._get_category, [category_id])
        row = result.one()
        return Category.from_row(row) if row else None

    async def require_category(self, category_id: UUID) -> Category:
        """Get category by ID or raise CategoryNotFoundError."""
        category = await self.get_category(category_id)
        if category is None:
            raise CategoryNotFoundError
        return category

    async def list_categories(self) -> list[Category]:
        """List all categories by name."""
        with store_errors("list_categories"):
            rows = await self.session.aexecute(self._list_categories)
        return sorted(
            (Category.from_row(row) for row in rows), key=lambda c: c.name.lower()
        )

    # ==========================================================================
    # Course Operations
    # ==========================================================================

    async def create_course(
        self, data: CreateCourseRequest, teacher_id: UUID
    ) -> Course:
        """Create a course owned by ``teacher_id``.

        Raises:
            CategoryNotFoundError: ``category_id`` does not exist
        """
        changes = _changes(data)
        if changes.get("category_id") is not None:
            await self.require_category(changes["category_id"])
        course = Course(teacher_id=teacher_id, **changes)

        await self._save_course(course)
        with store_errors("insert_course_lookups"):
            await self.session.aexecute(
                self._insert_course_by_teacher,
                [course.teacher_id, course.created_at, course.id],
            )
            await self.session.aexecute(
                self._insert_course_by_status,
                [course.status, course.created_at, course.id],
            )

        logger.info(
            "course_created",
            course_id=str(course.id),
            teacher_id=str(teacher_id),
            published=course.is_published,
        )
        return course

    async def get_course(self, course_id: UUID) -> Course | None:
        """Get course by ID."""
        with store_errors("get_course"):
            result = await self.session.aexecute(self._get_course, [course_id])
        row = result.one()
        return Course.from_row(row) if row else None

    async def require_course(self, course_id: UUID) -> Course:
        """Get course by ID or raise CourseNotFoundError."""
        course = await self.get_course(course_id)
        if course is None:
            raise CourseNotFoundError
        return course

    async def update_course(
        self, course_id: UUID, data: UpdateCourseRequest
    ) -> Course:
        """Apply a partial update to a course.

        Publishing or unpublishing moves the course between status lookups.
        """
        course = await self.require_course(course_id)
        old_status = course.status

        changes = _changes(data)
        if changes.get("category_id") is not None:
            await self.require_category(changes["category_id"])
        for field, value in changes.items():
            setattr(course, field, value)
        course.updated_at = datetime.now(UTC)

        await self._save_course(course)

        if course.status != old_status:
            with store_errors("move_course_status"):
                await self.session.aexecute(
                    self._delete_course_by_status,
                    [old_status, course.created_at, course.id],
                )
                await self.session.aexecute(
                    self._insert_course_by_status,
                    [course.status, course.created_at, course.id],
                )

        logger.info(
            "course_updated", course_id=str(course_id), status=course.status
        )
        return course

    async def delete_course(self, course_id: UUID) -> None:
        """Delete a course with its modules and lessons.

        Enrollments and progress rows are kept; they no longer match any
        course content.
        """
        course = await self.require_course(course_id)
        modules = await self.list_modules(course_id)

        with store_errors("delete_course"):
            for module in modules:
                await self.session.aexecute(self._delete_module_lessons, [module.id])
            await self.session.aexecute(self._delete_course_modules, [course_id])
            await self.session.aexecute(self._delete_course, [course_id])
            await self.session.aexecute(
                self._delete_course_by_teacher,
                [course.teacher_id, course.created_at, course_id],
            )
            await self.session.aexecute(
                self._delete_course_by_status,
                [course.status, course.created_at, course_id],
            )

        logger.info(
            "course_deleted", course_id=str(course_id), modules_deleted=len(modules)
        )

    async def list_published_courses(self, limit: int = 100) -> list[Course]:
        """List published courses, newest first."""
        with store_errors("list_published_courses"):
            rows = await self.session.aexecute(
                self._get_courses_by_status,
                [CourseStatus.PUBLISHED.value, limit],
            )

        courses = []
        for row in rows:
            course = await self.get_course(row.course_id)
            if course:
                courses.append(course)
        return courses

    async def list_teacher_courses(self, teacher_id: UUID) -> list[Course]:
        """List all courses (draft and published) of a teacher, newest first."""
        with store_errors("list_teacher_courses"):
            rows = await self.session.aexecute(
                self._get_courses_by_teacher, [teacher_id]
            )

        courses = []
        for row in rows:
            course = await self.get_course(row.course_id)
            if course:
                courses.append(course)
        return courses

    async def _save_course(self, course: Course) -> None:
        with store_errors("save_course"):
            await self.session.aexecute(
                self._upsert_course,
                [
                    course.id,
                    course.teacher_id,
                    course.title,
                    course.description,
                    course.category_id,
                    course.difficulty_level,
                    course.thumbnail_url,
                    course.price,
                    course.is_published,
                    course.created_at,
                    course.updated_at,
                ],
            )

    # ==========================================================================
    # Module Operations
    # ==========================================================================

    async def create_module(
        self, course_id: UUID, data: CreateModuleRequest
    ) -> Module:
        """Add a module to a course (appended when no position is given)."""
        await self.require_course(course_id)

        changes = _changes(data)
        if changes.get("order_index") is None:
            changes["order_index"] = len(await self.list_modules(course_id))
        module = Module(course_id=course_id, **changes)

        await self._save_module(module)
        logger.info(
            "module_created", course_id=str(course_id), module_id=str(module.id)
        )
        return module

    async def get_module(self, course_id: UUID, module_id: UUID) -> Module | None:
        """Get a module of a course."""
        with store_errors("get_module"):
            result = await self.session.aexecute(
                self._get_module, [course_id, module_id]
            )
        row = result.one()
        return Module.from_row(row) if row else None

    async def require_module(self, course_id: UUID, module_id: UUID) -> Module:
        """Get a module of a course or raise ModuleNotFoundError."""
        module = await self.get_module(course_id, module_id)
        if module is None:
            raise ModuleNotFoundError
        return module

    async def update_module(
        self, course_id: UUID, module_id: UUID, data: UpdateModuleRequest
    ) -> Module:
        """Apply a partial update to a module."""
        module = await self.require_module(course_id, module_id)
        for field, value in _changes(data).items():
            setattr(module, field, value)
        await self._save_module(module)
        return module

    async def delete_module(self, course_id: UUID, module_id: UUID) -> None:
        """Delete a module and its lessons."""
        await self.require_module(course_id, module_id)
        with store_errors("delete_module"):
            await self.session.aexecute(self._delete_module_lessons, [module_id])
            await self.session.aexecute(self._delete_module, [course_id, module_id])
        logger.info(
            "module_deleted", course_id=str(course_id), module_id=str(module_id)
        )

    async def list_modules(self, course_id: UUID) -> list[Module]:
        """List modules of a course ordered by position."""
        with store_errors("list_modules"):
            rows = await self.session.aexecute(self._get_course_modules, [course_id])
        return _ordered([Module.from_row(row) for row in rows])

    async def _save_module(self, module: Module) -> None:
        with store_errors("save_module"):
            await self.session.aexecute(
                self._upsert_module,
                [
                    module.course_id,
                    module.id,
                    module.title,
                    module.description,
                    module.order_index,
                    module.created_at,
                ],
            )

    # ==========================================================================
    # Lesson Operations
    # ==========================================================================

    async def create_lesson(
        self, course_id: UUID, module_id: UUID, data: CreateLessonRequest
    ) -> Lesson:
        """Add a lesson to a module of the course."""
        await self.require_module(course_id, module_id)

        changes = _changes(data)
        if changes.get("order_index") is None:
            changes["order_index"] = len(await self.list_lessons(module_id))
        lesson = Lesson(module_id=module_id, **changes)

        await self._save_lesson(lesson)
        logger.info(
            "lesson_created",
            course_id=str(course_id),
            module_id=str(module_id),
            lesson_id=str(lesson.id),
        )
        return lesson

    async def get_lesson(self, module_id: UUID, lesson_id: UUID) -> Lesson | None:
        """Get a lesson of a module."""
        with store_errors("get_lesson"):
            result = await self.session.aexecute(
                self._get_lesson, [module_id, lesson_id]
            )
        row = result.one()
        return Lesson.from_row(row) if row else None

    async def update_lesson(
        self,
        course_id: UUID,
        module_id: UUID,
        lesson_id: UUID,
        data: UpdateLessonRequest,
    ) -> Lesson:
        """Apply a partial update to a lesson."""
        await self.require_module(course_id, module_id)
        lesson = await self.get_lesson(module_id, lesson_id)
        if lesson is None:
            raise LessonNotFoundError

        for field, value in _changes(data).items():
            setattr(lesson, field, value)
        await self._save_lesson(lesson)
        return lesson

    async def delete_lesson(
        self, course_id: UUID, module_id: UUID, lesson_id: UUID
    ) -> None:
        """Delete a lesson. Course progress shrinks its denominator accordingly."""
        await self.require_module(course_id, module_id)
        if await self.get_lesson(module_id, lesson_id) is None:
            raise LessonNotFoundError

        with store_errors("delete_lesson"):
            await self.session.aexecute(self._delete_lesson, [module_id, lesson_id])
        logger.info(
            "lesson_deleted", module_id=str(module_id), lesson_id=str(lesson_id)
        )

    async def list_lessons(self, module_id: UUID) -> list[Lesson]:
        """List lessons of a module ordered by position."""
        with store_errors("list_lessons"):
            rows = await self.session.aexecute(self._get_module_lessons, [module_id])
        return _ordered([Lesson.from_row(row) for row in rows])

    async def _save_lesson(self, lesson: Lesson) -> None:
        with store_errors("save_lesson"):
            await self.session.aexecute(
                self._upsert_lesson,
                [
                    lesson.module_id,
                    lesson.id,
                    lesson.title,
                    lesson.content,
                    lesson.video_url,
                    lesson.duration_minutes,
                    lesson.order_index,
                    lesson.created_at,
                ],
            )

    # ==========================================================================
    # Outline
    # ==========================================================================

    async def get_course_outline(self, course_id: UUID) -> CourseOutlineResponse:
        """Course with its ordered modules and lessons."""
        course = await self.require_course(course_id)
        category = None
        if course.category_id is not None:
            category = await self.get_category(course.category_id)

        modules: list[ModuleOutline] = []
        total_lessons = 0
        total_minutes = 0
        for module in await self.list_modules(course_id):
            lessons = await self.list_lessons(module.id)
            total_lessons += len(lessons)
            total_minutes += sum(lesson.duration_minutes for lesson in lessons)
            modules.append(
                ModuleOutline(
                    id=module.id,
                    course_id=module.course_id,
                    title=module.title,
                    description=module.description,
                    order_index=module.order_index,
                    created_at=module.created_at,
                    lessons=[LessonResponse.from_entity(lesson) for lesson in lessons],
                )
            )

        return CourseOutlineResponse(
            course=CourseResponse.from_entity(course, category=category),
            modules=modules,
            total_lessons=total_lessons,
            total_duration_minutes=total_minutes,
        )
