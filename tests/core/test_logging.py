"""Tests for log processors."""

from learnhub.core.context import clear_context, set_request_id, set_user_id
from learnhub.core.logging import add_context_processor, filter_sensitive_data


def test_sensitive_values_are_masked() -> None:
    event = filter_sensitive_data(
        None,
        "info",
        {
            "event": "auth",
            "access_token": "abcdefghij",
            "password": "abc",
            "headers": {"authorization": "Bearer xyz123"},
            "lesson_id": "1234567890",
        },
    )

    assert event["access_token"] == "ab******ij"
    assert event["password"] == "***"
    assert event["headers"]["authorization"].startswith("Be")
    assert "xyz" not in event["headers"]["authorization"]
    assert event["lesson_id"] == "1234567890"


def test_context_is_added_without_overriding() -> None:
    try:
        set_request_id("req-1")
        set_user_id("user-1")
        event = add_context_processor(None, "info", {"event": "x", "user_id": "bound"})
    finally:
        clear_context()

    assert event["request_id"] == "req-1"
    assert event["user_id"] == "bound"
