"""Course content API endpoints.

Provides routes for:
- Published course catalog and teacher dashboard
- Course, module and lesson management (owner or admin)
- Course outline for the course page and lesson player
- Category list for the course picker
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from learnhub.auth.dependencies import AdminUser, OptionalUser, TeacherUser
from learnhub.core.errors import AppError
from learnhub.progress.dependencies import EnrollmentServiceDep

from .dependencies import (
    CourseServiceDep,
    can_view_course,
    ensure_course_owner,
    handle_course_error,
)
from .models import Course
from .schemas import (
    CategoryListResponse,
    CategoryResponse,
    CourseListResponse,
    CourseOutlineResponse,
    CourseResponse,
    CreateCategoryRequest,
    CreateCourseRequest,
    CreateLessonRequest,
    CreateModuleRequest,
    LessonResponse,
    MessageResponse,
    ModuleResponse,
    UpdateCourseRequest,
    UpdateLessonRequest,
    UpdateModuleRequest,
)
from .service import CourseService


router = APIRouter(prefix="/v1/courses", tags=["courses"])
categories_router = APIRouter(prefix="/v1/categories", tags=["categories"])


async def _to_responses(
    course_service: CourseService,
    courses: list[Course],
    total_enrollments: dict[UUID, int] | None = None,
) -> list[CourseResponse]:
    """Course responses with their categories resolved."""
    categories = {c.id: c for c in await course_service.list_categories()}
    counts = total_enrollments or {}
    return [
        CourseResponse.from_entity(
            course,
            total_enrollments=counts.get(course.id),
            category=categories.get(course.category_id),
        )
        for course in courses
    ]


# ==============================================================================
# Course Endpoints
# ==============================================================================


@router.get(
    "",
    response_model=CourseListResponse,
    summary="List published courses",
)
async def list_published_courses(
    course_service: CourseServiceDep,
    limit: int = Query(100, ge=1, le=500),
) -> CourseListResponse:
    """Public catalog of published courses, newest first."""
    try:
        courses = await course_service.list_published_courses(limit=limit)
        items = await _to_responses(course_service, courses)
    except AppError as e:
        raise handle_course_error(e) from e
    return CourseListResponse(items=items, total=len(items))


@router.get(
    "/mine",
    response_model=CourseListResponse,
    summary="List my courses",
)
async def list_my_courses(
    course_service: CourseServiceDep,
    enrollment_service: EnrollmentServiceDep,
    user: TeacherUser,
) -> CourseListResponse:
    """Teacher dashboard: own courses (drafts included) with enrollment counts."""
    try:
        courses = await course_service.list_teacher_courses(user.id)
        counts = {
            course.id: await enrollment_service.count_course_enrollments(course.id)
            for course in courses
        }
        items = await _to_responses(course_service, courses, counts)
    except AppError as e:
        raise handle_course_error(e) from e
    return CourseListResponse(items=items, total=len(items))


@router.post(
    "",
    response_model=CourseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create course",
)
async def create_course(
    data: CreateCourseRequest,
    course_service: CourseServiceDep,
    user: TeacherUser,
) -> CourseResponse:
    """Create a new course owned by the current teacher."""
    try:
        course = await course_service.create_course(data, teacher_id=user.id)
        (response,) = await _to_responses(course_service, [course])
    except AppError as e:
        raise handle_course_error(e) from e
    return response


@router.patch(
    "/{course_id}",
    response_model=CourseResponse,
    summary="Update course",
)
async def update_course(
    course_id: UUID,
    data: UpdateCourseRequest,
    course_service: CourseServiceDep,
    user: TeacherUser,
) -> CourseResponse:
    """Update course fields (owner or admin)."""
    try:
        await ensure_course_owner(course_service, course_id, user)
        course = await course_service.update_course(course_id, data)
        (response,) = await _to_responses(course_service, [course])
    except AppError as e:
        raise handle_course_error(e) from e
    return response


@router.delete(
    "/{course_id}",
    response_model=MessageResponse,
    summary="Delete course",
)
async def delete_course(
    course_id: UUID,
    course_service: CourseServiceDep,
    user: TeacherUser,
) -> MessageResponse:
    """Delete a course with its modules and lessons (owner or admin)."""
    try:
        await ensure_course_owner(course_service, course_id, user)
        await course_service.delete_course(course_id)
    except AppError as e:
        raise handle_course_error(e) from e
    return MessageResponse(message="Course deleted")


@router.get(
    "/{course_id}/outline",
    response_model=CourseOutlineResponse,
    summary="Get course outline",
)
async def get_course_outline(
    course_id: UUID,
    course_service: CourseServiceDep,
    user: OptionalUser,
) -> CourseOutlineResponse:
    """Course with ordered modules and lessons.

    Drafts are only visible to their owner; others get 404.
    """
    try:
        course = await course_service.require_course(course_id)
        if not can_view_course(user, course):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Course not found",
            )
        return await course_service.get_course_outline(course_id)
    except AppError as e:
        raise handle_course_error(e) from e


# ==============================================================================
# Module Endpoints
# ==============================================================================


@router.post(
    "/{course_id}/modules",
    response_model=ModuleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create module",
)
async def create_module(
    course_id: UUID,
    data: CreateModuleRequest,
    course_service: CourseServiceDep,
    user: TeacherUser,
) -> ModuleResponse:
    """Add a module to a course."""
    try:
        await ensure_course_owner(course_service, course_id, user)
        module = await course_service.create_module(course_id, data)
    except AppError as e:
        raise handle_course_error(e) from e
    return ModuleResponse.from_entity(module)


@router.patch(
    "/{course_id}/modules/{module_id}",
    response_model=ModuleResponse,
    summary="Update module",
)
async def update_module(
    course_id: UUID,
    module_id: UUID,
    data: UpdateModuleRequest,
    course_service: CourseServiceDep,
    user: TeacherUser,
) -> ModuleResponse:
    """Update a module of a course."""
    try:
        await ensure_course_owner(course_service, course_id, user)
        module = await course_service.update_module(course_id, module_id, data)
    except AppError as e:
        raise handle_course_error(e) from e
    return ModuleResponse.from_entity(module)


@router.delete(
    "/{course_id}/modules/{module_id}",
    response_model=MessageResponse,
    summary="Delete module",
)
async def delete_module(
    course_id: UUID,
    module_id: UUID,
    course_service: CourseServiceDep,
    user: TeacherUser,
) -> MessageResponse:
    """Delete a module and its lessons."""
    try:
        await ensure_course_owner(course_service, course_id, user)
        await course_service.delete_module(course_id, module_id)
    except AppError as e:
        raise handle_course_error(e) from e
    return MessageResponse(message="Module deleted")


# ==============================================================================
# Lesson Endpoints
# ==============================================================================


@router.post(
    "/{course_id}/modules/{module_id}/lessons",
    response_model=LessonResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create lesson",
)
async def create_lesson(
    course_id: UUID,
    module_id: UUID,
    data: CreateLessonRequest,
    course_service: CourseServiceDep,
    user: TeacherUser,
) -> LessonResponse:
    """Add a lesson to a module."""
    try:
        await ensure_course_owner(course_service, course_id, user)
        lesson = await course_service.create_lesson(course_id, module_id, data)
    except AppError as e:
        raise handle_course_error(e) from e
    return LessonResponse.from_entity(lesson)


@router.patch(
    "/{course_id}/modules/{module_id}/lessons/{lesson_id}",
    response_model=LessonResponse,
    summary="Update lesson",
)
async def update_lesson(
    course_id: UUID,
    module_id: UUID,
    lesson_id: UUID,
    data: UpdateLessonRequest,
    course_service: CourseServiceDep,
    user: TeacherUser,
) -> LessonResponse:
    """Update a lesson."""
    try:
        await ensure_course_owner(course_service, course_id, user)
        lesson = await course_service.update_lesson(
            course_id, module_id, lesson_id, data
        )
    except AppError as e:
        raise handle_course_error(e) from e
    return LessonResponse.from_entity(lesson)


@router.delete(
    "/{course_id}/modules/{module_id}/lessons/{lesson_id}",
    response_model=MessageResponse,
    summary="Delete lesson",
)
async def delete_lesson(
    course_id: UUID,
    module_id: UUID,
    lesson_id: UUID,
    course_service: CourseServiceDep,
    user: TeacherUser,
) -> MessageResponse:
    """Delete a lesson."""
    try:
        await ensure_course_owner(course_service, course_id, user)
        await course_service.delete_lesson(course_id, module_id, lesson_id)
    except AppError as e:
        raise handle_course_error(e) from e
    return MessageResponse(message="Lesson deleted")


# ==============================================================================
# Category Endpoints
# ==============================================================================


@categories_router.get(
    "",
    response_model=CategoryListResponse,
    summary="List categories",
)
async def list_categories(course_service: CourseServiceDep) -> CategoryListResponse:
    """All course categories, by name."""
    try:
        categories = await course_service.list_categories()
    except AppError as e:
        raise handle_course_error(e) from e
    return CategoryListResponse(
        items=[CategoryResponse.from_entity(c) for c in categories],
        total=len(categories),
    )


@categories_router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create category",
)
async def create_category(
    data: CreateCategoryRequest,
    course_service: CourseServiceDep,
    user: AdminUser,
) -> CategoryResponse:
    """Add a category (admin only)."""
    try:
        category = await course_service.create_category(data)
    except AppError as e:
        raise handle_course_error(e) from e
    return CategoryResponse.from_entity(category)
