"""Pydantic schemas for authenticated callers."""

from uuid import UUID

from pydantic import BaseModel

from .permissions import UserRole


class AuthenticatedUser(BaseModel):
    """Caller identity extracted from a verified access token."""

    id: UUID
    email: str | None = None
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
