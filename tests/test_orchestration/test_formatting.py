"""Tests for call history rendering."""

from promptapi.models import CallRecord, CallRequest, ExecutionErrorKind, ExecutionResult
from promptapi.orchestration.formatting import (
    TRUNCATION_MARKER,
    format_call_history,
    truncate_payload,
)


def _record(path: str, result: ExecutionResult) -> CallRecord:
    return CallRecord(call=CallRequest("http_get", {"path": path}), result=result)


class TestTruncatePayload:

    def test_short_payload_untouched(self):
        assert truncate_payload("abc", 10) == "abc"

    def test_zero_disables_truncation(self):
        assert truncate_payload("x" * 100, 0) == "x" * 100

    def test_long_payload_cut(self):
        assert truncate_payload("x" * 20, 5) == "xxxxx" + TRUNCATION_MARKER


class TestFormatCallHistory:

    def test_empty_history(self):
        assert format_call_history(()) == ""

    def test_successful_calls_numbered_in_order(self):
        text = format_call_history(
            (
                _record("/books", ExecutionResult.ok("[1]", status_code=200)),
                _record("/books/1", ExecutionResult.ok("{}", status_code=200)),
            )
        )
        assert text.index('1. http_get({"path": "/books"})') < text.index(
            '2. http_get({"path": "/books/1"})'
        )
        assert "Status: 200" in text
        assert "[1]" in text
        assert "Failed" not in text

    def test_failed_call_shows_error(self):
        text = format_call_history(
            (
                _record(
                    "/nope",
                    ExecutionResult.failure(
                        ExecutionErrorKind.HTTP_STATUS, "HTTP 404", payload="missing", status_code=404
                    ),
                ),
            )
        )
        assert "Status: 404" in text
        assert "Failed (http_status): HTTP 404" in text
        assert "missing" in text

    def test_payload_truncated(self):
        text = format_call_history(
            (_record("/books", ExecutionResult.ok("y" * 50, status_code=200)),),
            max_payload_chars=10,
        )
        assert "y" * 11 not in text
        assert "truncated" in text
