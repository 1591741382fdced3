"""
Synthesizer: turns the prompt and the API call history into prose.
"""

import logging
from typing import Optional

from ..errors import SynthesisError
from ..llm_call import CompletionClient
from ..models import CallRecord
from .formatting import format_call_history

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are an assistant that helps people with calling REST APIs of a specific service.
You help translating from HTTP responses to human-readable responses. You generate plain text responses
that are easy to understand. No JSON, XML or MarkDown, just plain text."""

USER_TEMPLATE = """I asked the following question:

{prompt}

I made the following API calls, in order:

{calls}

Please help me translate these responses to a single human-readable response.
Explain briefly what was asked, what was done and what was found."""


class Synthesizer:
    """Produces the final answer from the accumulated call history."""

    def __init__(self, completion_client: CompletionClient, max_payload_chars: int = 0):
        self.completion_client = completion_client
        self.max_payload_chars = max_payload_chars

    def build_message(self, prompt: str, history: tuple[CallRecord, ...]) -> str:
        return USER_TEMPLATE.format(
            prompt=prompt,
            calls=format_call_history(history, self.max_payload_chars),
        )

    def synthesize(
        self,
        prompt: str,
        history: tuple[CallRecord, ...],
        timeout: Optional[float] = None,
        trace=None,
    ) -> str:
        """
        Produce a single plain-text answer.

        Raises:
            SynthesisError: If the completion service fails or answers with nothing
        """
        completion = self.completion_client.complete(
            system_instruction=SYSTEM_PROMPT,
            conversation=[{"role": "user", "content": self.build_message(prompt, history)}],
            timeout=timeout,
            trace=trace,
            name="synthesize",
        )
        if completion is None:
            raise SynthesisError("completion service call failed during synthesis")

        text = (completion.content or "").strip()
        if not text:
            raise SynthesisError("completion service returned an empty synthesis")
        logger.debug("Synthesized %d chars from %d call(s)", len(text), len(history))
        return text
