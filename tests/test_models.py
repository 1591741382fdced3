"""Tests for planning and execution data models."""

import pytest

from promptapi.models import (
    CallRequest,
    ExecutionErrorKind,
    ExecutionResult,
    Invocation,
)


class TestCallRequest:

    def test_describe(self):
        call = CallRequest("http_get", {"path": "/books"})
        assert call.describe() == 'http_get({"path": "/books"})'

    def test_default_arguments_are_empty(self):
        assert CallRequest("http_get").arguments == {}

    def test_hashable(self):
        call = CallRequest("http_post", {"path": "/things", "body": {"name": "x"}}, call_id="c1")
        assert hash(call) == hash(CallRequest("http_post", {"path": "/other"}, call_id="c1"))
        assert len({call, call}) == 1

    def test_arguments_are_read_only(self):
        call = CallRequest("http_get", {"path": "/books"})
        with pytest.raises(TypeError):
            call.arguments["path"] = "/characters"
        assert call.arguments == {"path": "/books"}

    def test_arguments_copied_from_caller(self):
        arguments = {"path": "/things", "body": {"name": "x"}}
        call = CallRequest("http_post", arguments)
        arguments["path"] = "/changed"
        arguments["body"]["name"] = "y"
        assert call.arguments == {"path": "/things", "body": {"name": "x"}}

    def test_arguments_dict_is_independent_copy(self):
        call = CallRequest("http_post", {"path": "/things", "body": {"name": "x"}})
        copied = call.arguments_dict()
        copied["body"]["name"] = "y"
        assert type(copied) is dict
        assert call.arguments["body"] == {"name": "x"}

    def test_equality_ignores_container_type(self):
        assert CallRequest("http_get", {"path": "/a"}) == CallRequest("http_get", {"path": "/a"})
        assert CallRequest("http_get", {"path": "/a"}) != CallRequest("http_get", {"path": "/b"})


class TestInvocation:

    def test_requires_a_call(self):
        with pytest.raises(ValueError):
            Invocation(calls=())

    def test_keeps_order(self):
        calls = (CallRequest("http_get", {"path": "/a"}), CallRequest("http_get", {"path": "/b"}))
        assert Invocation(calls=calls).calls == calls


class TestExecutionResult:

    def test_ok(self):
        result = ExecutionResult.ok('{"a": 1}', status_code=200)
        assert result.success is True
        assert result.error_kind is None
        assert result.decoded() == {"a": 1}

    def test_failure(self):
        result = ExecutionResult.failure(
            ExecutionErrorKind.HTTP_STATUS, "HTTP 404 Not Found", payload="nope", status_code=404
        )
        assert result.success is False
        assert result.error_kind is ExecutionErrorKind.HTTP_STATUS
        assert result.status_code == 404
        assert result.payload == "nope"

    def test_decoded_falls_back_to_text(self):
        assert ExecutionResult.ok("plain text").decoded() == "plain text"
