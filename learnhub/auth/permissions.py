"""Role-based access control (RBAC) for LearnHub.

Hierarchical permission system:
- ADMIN (level 3): Full system access
- TEACHER (level 2): Manage own courses, view enrollment counts
- STUDENT (level 1): Enroll in courses, track progress, write reviews
"""

from enum import Enum


class UserRole(str, Enum):
    """User roles with hierarchical levels.

    Higher level = more permissions.
    """

    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


ROLE_HIERARCHY: dict[UserRole, int] = {
    UserRole.STUDENT: 1,
    UserRole.TEACHER: 2,
    UserRole.ADMIN: 3,
}


def get_role_level(role: UserRole | str) -> int:
    """Get the permission level for a role.

    Unknown roles get level 0 and pass no permission check.
    """
    if isinstance(role, str):
        try:
            role = UserRole(role)
        except ValueError:
            return 0
    return ROLE_HIERARCHY.get(role, 0)


def has_permission(user_role: UserRole | str, required_role: UserRole | str) -> bool:
    """Check if user has at least the required permission level.

    Examples:
        >>> has_permission(UserRole.ADMIN, UserRole.TEACHER)
        True
        >>> has_permission("student", "teacher")
        False
    """
    return get_role_level(user_role) >= get_role_level(required_role)


def is_admin(role: UserRole | str) -> bool:
    """Check if role is ADMIN."""
    if isinstance(role, str):
        return role == UserRole.ADMIN.value
    return role == UserRole.ADMIN
