"""Tests for the planner."""

import json

import pytest

from promptapi.errors import PlanningError
from promptapi.llm_call import Completion, ToolInvocation
from promptapi.models import (
    CallRecord,
    CallRequest,
    Direct,
    ExecutionResult,
    Invocation,
)
from promptapi.operations import default_registry
from promptapi.orchestration.planner import (
    CONTINUATION_INSTRUCTIONS,
    Planner,
    parse_arguments,
)


def _text_completion(content: str) -> Completion:
    """A completion that answers directly."""
    return Completion(content=content)


def _tool_completion(*calls: tuple[str, dict]) -> Completion:
    """A completion that requests the given (name, arguments) tool calls."""
    return Completion(
        tool_calls=tuple(
            ToolInvocation(name=name, arguments=json.dumps(args), call_id=f"call_{i}")
            for i, (name, args) in enumerate(calls)
        )
    )


def _get_call(path: str) -> tuple[str, dict]:
    return ("http_get", {"path": path})


@pytest.fixture
def planner(mock_completion_client, api_config):
    return Planner(mock_completion_client, api_config, default_registry())


class TestPlan:

    def test_system_prompt_contains_api_description(self, planner, api_config):
        assert api_config.base_url in planner.system_prompt
        assert api_config.documentation in planner.system_prompt

    def test_direct_answer(self, planner, mock_completion_client):
        mock_completion_client.complete.return_value = _text_completion("Hello there")
        outcome = planner.plan("Hi")
        assert outcome == Direct(content="Hello there")

    def test_invocation(self, planner, mock_completion_client):
        mock_completion_client.complete.return_value = _tool_completion(_get_call("/books"))
        outcome = planner.plan("List all books")
        assert isinstance(outcome, Invocation)
        assert outcome.calls == (
            CallRequest("http_get", {"path": "/books"}, call_id="call_0"),
        )

    def test_invocation_keeps_call_order(self, planner, mock_completion_client):
        mock_completion_client.complete.return_value = _tool_completion(
            _get_call("/books/1"), _get_call("/books/2")
        )
        outcome = planner.plan("Compare books 1 and 2")
        assert [c.arguments["path"] for c in outcome.calls] == ["/books/1", "/books/2"]

    def test_request_carries_prompt_tools_and_timeout(
        self, planner, mock_completion_client
    ):
        mock_completion_client.complete.return_value = _text_completion("ok")
        planner.plan("List all books", timeout=12)

        kwargs = mock_completion_client.complete.call_args.kwargs
        assert kwargs["system_instruction"] == planner.system_prompt
        assert kwargs["conversation"] == [{"role": "user", "content": "List all books"}]
        assert [t["function"]["name"] for t in kwargs["tools"]] == ["http_get", "http_post"]
        assert kwargs["timeout"] == 12
        assert kwargs["name"] == "plan"

    def test_completion_failure_raises(self, planner, mock_completion_client):
        mock_completion_client.complete.return_value = None
        with pytest.raises(PlanningError):
            planner.plan("List all books")

    def test_empty_direct_answer_raises(self, planner, mock_completion_client):
        mock_completion_client.complete.return_value = Completion(content=None)
        with pytest.raises(PlanningError, match="empty"):
            planner.plan("List all books")

    def test_malformed_arguments_raise(self, planner, mock_completion_client):
        mock_completion_client.complete.return_value = Completion(
            tool_calls=(ToolInvocation(name="http_get", arguments='{"path": '),)
        )
        with pytest.raises(PlanningError, match="malformed"):
            planner.plan("List all books")

    def test_unknown_operation_passes_through(self, planner, mock_completion_client):
        mock_completion_client.complete.return_value = _tool_completion(
            ("http_delete", {"path": "/books/1"})
        )
        outcome = planner.plan("Delete book 1")
        assert outcome.calls[0].operation_name == "http_delete"


class TestContinuePlan:

    def _history(self):
        return (
            CallRecord(
                call=CallRequest("http_get", {"path": "/books?name=A Game of Thrones"}),
                result=ExecutionResult.ok('[{"povCharacters": ["/characters/583"]}]', 200),
            ),
        )

    def test_message_includes_prompt_history_and_instructions(self, planner):
        message = planner.build_continuation_message("Who is the POV?", self._history())
        assert message.startswith("Who is the POV?")
        assert "# Previous API calls" in message
        assert "/characters/583" in message
        assert message.endswith(CONTINUATION_INSTRUCTIONS)

    def test_more_calls(self, planner, mock_completion_client):
        mock_completion_client.complete.return_value = _tool_completion(
            _get_call("/characters/583")
        )
        outcome = planner.continue_plan("Who is the POV?", self._history())
        assert isinstance(outcome, Invocation)
        assert outcome.calls[0].arguments == {"path": "/characters/583"}

        kwargs = mock_completion_client.complete.call_args.kwargs
        assert kwargs["name"] == "continue_plan"
        assert len(kwargs["conversation"]) == 1
        assert "# Previous API calls" in kwargs["conversation"][0]["content"]

    def test_done(self, planner, mock_completion_client):
        mock_completion_client.complete.return_value = _text_completion("DONE")
        outcome = planner.continue_plan("Who is the POV?", self._history())
        assert isinstance(outcome, Direct)

    def test_blank_answer_means_done(self, planner, mock_completion_client):
        mock_completion_client.complete.return_value = Completion(content="")
        outcome = planner.continue_plan("Who is the POV?", self._history())
        assert isinstance(outcome, Direct)

    def test_completion_failure_raises(self, planner, mock_completion_client):
        mock_completion_client.complete.return_value = None
        with pytest.raises(PlanningError):
            planner.continue_plan("Who is the POV?", self._history())


class TestParseArguments:

    def test_object(self):
        assert parse_arguments("http_get", '{"path": "/books"}') == {"path": "/books"}

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_blank_is_empty(self, raw):
        assert parse_arguments("http_get", raw) == {}

    def test_invalid_json(self):
        with pytest.raises(PlanningError):
            parse_arguments("http_get", "{not json")

    def test_non_object(self):
        with pytest.raises(PlanningError, match="JSON object"):
            parse_arguments("http_get", '["/books"]')
