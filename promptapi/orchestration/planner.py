"""
Planner: decides whether a prompt needs API calls, and which ones.

The planner sends the prompt, the API description and the operation
registry (as function-calling tools) to the completion service and turns
the answer into a ``PlanningOutcome``. It never calls the target API.
"""

import json
import logging
from typing import Optional

from ..errors import PlanningError
from ..llm_call import Completion, CompletionClient, ToolInvocation
from ..models import (
    ApiConfig,
    CallRecord,
    CallRequest,
    Direct,
    Invocation,
    PlanningOutcome,
)
from ..operations import OperationRegistry
from .formatting import format_call_history

logger = logging.getLogger(__name__)

SYSTEM_PROMPT_TEMPLATE = """You are an assistant that helps people with calling REST APIs of a specific service.
The base URL of the service is: {base_url}
Paths you pass to the tools are appended to this base URL as-is, so they must start with "/".

Here is the API documentation:
{documentation}
"""

CONTINUATION_INSTRUCTIONS = """If more API calls are needed to answer the question, call the appropriate tools now.
Use values from the previous responses (identifiers, URLs, page numbers) where needed.
If the information gathered so far is enough, reply with DONE and do not call any tool."""


class Planner:
    """Turns prompts into planning outcomes via the completion service."""

    def __init__(
        self,
        completion_client: CompletionClient,
        api_config: ApiConfig,
        registry: OperationRegistry,
        max_payload_chars: int = 0,
    ):
        self.completion_client = completion_client
        self.api_config = api_config
        self.registry = registry
        self.max_payload_chars = max_payload_chars
        self._system_prompt = SYSTEM_PROMPT_TEMPLATE.format(
            base_url=api_config.base_url,
            documentation=api_config.documentation,
        )

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    def plan(
        self,
        prompt: str,
        timeout: Optional[float] = None,
        trace=None,
    ) -> PlanningOutcome:
        """
        First planning step for a prompt.

        Raises:
            PlanningError: If the completion service fails, returns nothing
                usable, or encodes arguments badly
        """
        conversation = [{"role": "user", "content": prompt}]
        completion = self._complete(conversation, timeout, trace, "plan")
        outcome = self._to_outcome(completion)
        if isinstance(outcome, Direct) and not outcome.content.strip():
            raise PlanningError("completion service returned an empty answer")
        return outcome

    def continue_plan(
        self,
        prompt: str,
        history: tuple[CallRecord, ...],
        timeout: Optional[float] = None,
        trace=None,
    ) -> PlanningOutcome:
        """
        Decide whether further calls are needed given the calls made so far.

        A ``Direct`` outcome means no further invocation is requested.

        Raises:
            PlanningError: As for ``plan``
        """
        conversation = [{"role": "user", "content": self.build_continuation_message(prompt, history)}]
        completion = self._complete(conversation, timeout, trace, "continue_plan")
        return self._to_outcome(completion)

    def build_continuation_message(
        self, prompt: str, history: tuple[CallRecord, ...]
    ) -> str:
        """Fresh user message: the prompt plus every call made so far."""
        rendered = format_call_history(history, self.max_payload_chars)
        return (
            f"{prompt}\n\n"
            f"# Previous API calls\n{rendered}\n\n"
            f"{CONTINUATION_INSTRUCTIONS}"
        )

    def _complete(
        self,
        conversation: list[dict],
        timeout: Optional[float],
        trace,
        name: str,
    ) -> Completion:
        completion = self.completion_client.complete(
            system_instruction=self._system_prompt,
            conversation=conversation,
            tools=self.registry.tool_definitions(),
            timeout=timeout,
            trace=trace,
            name=name,
        )
        if completion is None:
            raise PlanningError("completion service call failed")
        return completion

    def _to_outcome(self, completion: Completion) -> PlanningOutcome:
        if not completion.requests_invocation:
            return Direct(content=completion.content or "")
        calls = tuple(self._to_call_request(tc) for tc in completion.tool_calls)
        logger.debug("Planned calls: %s", ", ".join(c.describe() for c in calls))
        return Invocation(calls=calls)

    @staticmethod
    def _to_call_request(invocation: ToolInvocation) -> CallRequest:
        return CallRequest(
            operation_name=invocation.name,
            arguments=parse_arguments(invocation.name, invocation.arguments),
            call_id=invocation.call_id,
        )


def parse_arguments(operation_name: str, raw: Optional[str]) -> dict:
    """
    Decode a JSON-encoded argument object.

    Blank input decodes to an empty mapping.

    Raises:
        PlanningError: If ``raw`` is not JSON or not a JSON object
    """
    if raw is None or not raw.strip():
        return {}
    try:
        args = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning(
            "Malformed arguments for '%s': %s (%s)", operation_name, raw[:200], e
        )
        raise PlanningError(
            f"malformed arguments for operation '{operation_name}': {e}"
        ) from e
    if not isinstance(args, dict):
        logger.warning(
            "Arguments for '%s' are not an object: %s", operation_name, raw[:200]
        )
        raise PlanningError(
            f"arguments for operation '{operation_name}' must be a JSON object"
        )
    return args
