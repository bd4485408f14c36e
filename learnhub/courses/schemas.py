"""Pydantic schemas for course content management."""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, HttpUrl, field_validator

from .models import Category, Course, DifficultyLevel, Lesson, Module


def ensure_not_null(value: Any) -> Any:
    """Partial updates may omit a required field but not clear it."""
    if value is None:
        raise ValueError("Field cannot be null")
    return value


# ==============================================================================
# Category Schemas
# ==============================================================================


class CreateCategoryRequest(BaseModel):
    """Request to create a category (admin only)."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()


class CategoryResponse(BaseModel):
    """Category response."""

    id: UUID
    name: str
    description: str | None = None

    @classmethod
    def from_entity(cls, entity: Category) -> "CategoryResponse":
        """Create response from entity."""
        return cls(id=entity.id, name=entity.name, description=entity.description)


class CategoryListResponse(BaseModel):
    """List of categories."""

    items: list[CategoryResponse]
    total: int


# ==============================================================================
# Course Schemas
# ==============================================================================


class CreateCourseRequest(BaseModel):
    """Request to create a course (teacher only)."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    category_id: UUID | None = None
    difficulty_level: DifficultyLevel | None = None
    thumbnail_url: HttpUrl | None = None
    price: Decimal = Field(Decimal(0), ge=0, decimal_places=2)
    is_published: bool = False


class UpdateCourseRequest(BaseModel):
    """Partial course update. Only fields that are sent are changed."""

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    category_id: UUID | None = None
    difficulty_level: DifficultyLevel | None = None
    thumbnail_url: HttpUrl | None = None
    price: Decimal | None = Field(None, ge=0, decimal_places=2)
    is_published: bool | None = None

    @field_validator("title", "price", "is_published")
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        return ensure_not_null(v)


class CourseResponse(BaseModel):
    """Course response."""

    id: UUID
    teacher_id: UUID
    title: str
    description: str | None = None
    category_id: UUID | None = None
    category: CategoryResponse | None = None
    difficulty_level: DifficultyLevel | None = None
    thumbnail_url: str | None = None
    price: Decimal
    is_published: bool
    created_at: datetime
    updated_at: datetime | None = None
    total_enrollments: int | None = None

    @classmethod
    def from_entity(
        cls,
        entity: Course,
        total_enrollments: int | None = None,
        category: Category | None = None,
    ) -> "CourseResponse":
        """Create response from entity, with its category when loaded."""
        return cls(
            id=entity.id,
            teacher_id=entity.teacher_id,
            title=entity.title,
            description=entity.description,
            category_id=entity.category_id,
            category=CategoryResponse.from_entity(category) if category else None,
            difficulty_level=(
                DifficultyLevel(entity.difficulty_level)
                if entity.difficulty_level
                else None
            ),
            thumbnail_url=entity.thumbnail_url,
            price=entity.price,
            is_published=entity.is_published,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            total_enrollments=total_enrollments,
        )


class CourseListResponse(BaseModel):
    """List of courses."""

    items: list[CourseResponse]
    total: int


# ==============================================================================
# Module Schemas
# ==============================================================================


class CreateModuleRequest(BaseModel):
    """Request to add a module to a course."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=2000)
    order_index: int | None = Field(
        None, ge=0, description="Position in course (appended when omitted)"
    )


class UpdateModuleRequest(BaseModel):
    """Partial module update."""

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=2000)
    order_index: int | None = Field(None, ge=0)

    @field_validator("title", "order_index")
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        return ensure_not_null(v)


class ModuleResponse(BaseModel):
    """Module response."""

    id: UUID
    course_id: UUID
    title: str
    description: str | None = None
    order_index: int
    created_at: datetime

    @classmethod
    def from_entity(cls, entity: Module) -> "ModuleResponse":
        """Create response from entity."""
        return cls(
            id=entity.id,
            course_id=entity.course_id,
            title=entity.title,
            description=entity.description,
            order_index=entity.order_index,
            created_at=entity.created_at,
        )


# ==============================================================================
# Lesson Schemas
# ==============================================================================


class CreateLessonRequest(BaseModel):
    """Request to add a lesson to a module."""

    title: str = Field(..., min_length=1, max_length=200)
    content: str | None = Field(None, max_length=50000)
    video_url: HttpUrl | None = None
    duration_minutes: int = Field(0, ge=0, le=24 * 60)
    order_index: int | None = Field(None, ge=0)


class UpdateLessonRequest(BaseModel):
    """Partial lesson update."""

    title: str | None = Field(None, min_length=1, max_length=200)
    content: str | None = Field(None, max_length=50000)
    video_url: HttpUrl | None = None
    duration_minutes: int | None = Field(None, ge=0, le=24 * 60)
    order_index: int | None = Field(None, ge=0)

    @field_validator("title", "duration_minutes", "order_index")
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        return ensure_not_null(v)


class LessonResponse(BaseModel):
    """Lesson response."""

    id: UUID
    module_id: UUID
    title: str
    content: str | None = None
    video_url: str | None = None
    duration_minutes: int
    order_index: int
    created_at: datetime

    @classmethod
    def from_entity(cls, entity: Lesson) -> "LessonResponse":
        """Create response from entity."""
        return cls(
            id=entity.id,
            module_id=entity.module_id,
            title=entity.title,
            content=entity.content,
            video_url=entity.video_url,
            duration_minutes=entity.duration_minutes,
            order_index=entity.order_index,
            created_at=entity.created_at,
        )


# ==============================================================================
# Outline
# ==============================================================================


class ModuleOutline(ModuleResponse):
    """Module with its ordered lessons."""

    lessons: list[LessonResponse] = []


class CourseOutlineResponse(BaseModel):
    """Course with ordered modules and lessons (course detail / player)."""

    course: CourseResponse
    modules: list[ModuleOutline] = []
    total_lessons: int = 0
    total_duration_minutes: int = 0


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str
    success: bool = True
