"""Token verification and role-based access control."""

from .dependencies import AdminUser, CurrentUser, StudentUser, TeacherUser
from .permissions import UserRole, has_permission
from .schemas import AuthenticatedUser


__all__ = [
    "AdminUser",
    "AuthenticatedUser",
    "CurrentUser",
    "StudentUser",
    "TeacherUser",
    "UserRole",
    "has_permission",
]
