"""Tests for request context helpers."""

from learnhub.core.context import (
    RequestContext,
    clear_context,
    get_context,
    get_request_id,
    get_user_id,
    set_request_id,
    set_user_id,
)


def test_set_request_id_generates_when_empty() -> None:
    try:
        generated = set_request_id(None)
        assert generated
        assert get_request_id() == generated
        assert set_request_id("abc") == "abc"
    finally:
        clear_context()


def test_get_context_skips_empty_values() -> None:
    try:
        set_request_id("req-1")
        assert get_context() == {"request_id": "req-1"}
        set_user_id("u-1")
        assert get_context() == {"request_id": "req-1", "user_id": "u-1"}
    finally:
        clear_context()
    assert get_context() == {}


def test_request_context_restores_previous_values() -> None:
    try:
        set_user_id("outer")
        with RequestContext(request_id="job-7", user_id="inner") as ctx:
            assert ctx.request_id == "job-7"
            assert get_user_id() == "inner"
        assert get_user_id() == "outer"
        assert get_request_id() == ""
    finally:
        clear_context()
