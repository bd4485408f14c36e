"""Tests for authentication dependencies."""

from unittest.mock import Mock
from uuid import uuid4

import pytest
from fastapi import HTTPException

from learnhub.auth.dependencies import (
    get_current_user,
    get_current_user_optional,
    get_token_from_header,
    require_permission,
)
from learnhub.auth.permissions import UserRole
from learnhub.auth.schemas import AuthenticatedUser
from learnhub.auth.security import create_access_token
from learnhub.core.context import clear_context, get_user_id


def request_with(header: str | None) -> Mock:
    request = Mock()
    request.headers = {"Authorization": header} if header else {}
    return request


class TestTokenExtraction:
    @pytest.mark.parametrize(
        "header,expected",
        [
            ("Bearer abc", "abc"),
            ("bearer abc", "abc"),
            ("Basic abc", None),
            ("Bearer", None),
            (None, None),
        ],
    )
    def test_bearer_header(self, header, expected) -> None:
        assert get_token_from_header(request_with(header)) == expected


class TestCurrentUser:
    @pytest.mark.asyncio
    async def test_valid_token_sets_context(self) -> None:
        user_id = uuid4()
        token = create_access_token({"sub": str(user_id), "role": "student"})
        try:
            user = await get_current_user(token)

            assert user.id == user_id
            assert user.role == UserRole.STUDENT
            assert get_user_id() == str(user_id)
        finally:
            clear_context()

    @pytest.mark.asyncio
    async def test_missing_token(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(None)

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_role_is_rejected(self) -> None:
        token = create_access_token({"sub": str(uuid4()), "role": "janitor"})

        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(token)

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_optional_user_without_token(self) -> None:
        assert await get_current_user_optional(None) is None
        assert await get_current_user_optional("garbage") is None


class TestRequirePermission:
    @pytest.mark.asyncio
    async def test_lower_role_is_forbidden(self) -> None:
        checker = require_permission(UserRole.TEACHER)
        student = AuthenticatedUser(id=uuid4(), role=UserRole.STUDENT)

        with pytest.raises(HTTPException) as exc_info:
            await checker(student)

        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_higher_role_passes(self) -> None:
        checker = require_permission(UserRole.STUDENT)
        admin = AuthenticatedUser(id=uuid4(), role=UserRole.ADMIN)

        assert await checker(admin) is admin
