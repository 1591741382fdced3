"""
Completion service adapter for promptapi.

Wraps the OpenAI chat completions API (or any OpenAI-compatible endpoint)
behind a single ``complete`` call that returns either plain content or
the tool invocations the model asked for.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from openai import OpenAI

from .models import CompletionConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolInvocation:
    """A tool call as returned by the model; arguments are still JSON text."""

    name: str
    arguments: str
    call_id: Optional[str] = None


@dataclass(frozen=True)
class Completion:
    """What the completion service answered."""

    content: Optional[str] = None
    tool_calls: tuple[ToolInvocation, ...] = ()

    @property
    def requests_invocation(self) -> bool:
        return bool(self.tool_calls)


class CompletionClient:
    """Client for the language-model completion service.

    The underlying OpenAI client is created on first use with retries
    disabled; each call carries an explicit timeout.
    """

    def __init__(
        self,
        config: Optional[CompletionConfig] = None,
        client: Optional[OpenAI] = None,
    ):
        self.config = config or CompletionConfig()
        self._client = client

    @property
    def model(self) -> str:
        return self.config.model

    def _get_client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI(
                base_url=self.config.base_url or None,
                api_key=self.config.api_key or None,
                timeout=self.config.timeout,
                max_retries=0,
            )
        return self._client

    def complete(
        self,
        system_instruction: str,
        conversation: list[dict],
        tools: Optional[list[dict]] = None,
        timeout: Optional[float] = None,
        trace=None,
        name: str = "completion",
    ) -> Optional[Completion]:
        """
        Run one chat completion.

        Args:
            system_instruction: System prompt text
            conversation: Chat messages following the system prompt
            tools: OpenAI-format tool definitions, if the model may call tools
            timeout: Per-call timeout in seconds (config default if None)
            trace: Optional TracingContext or Observation to record a generation under
            name: Generation name used for tracing and logs

        Returns:
            The Completion, or None if the call failed.
        """
        messages = [{"role": "system", "content": system_instruction}, *conversation]
        create_kwargs: dict = {
            "model": self.config.model,
            "messages": messages,
            "temperature": self.config.temperature,
            "timeout": timeout if timeout is not None else self.config.timeout,
        }
        if tools:
            create_kwargs["tools"] = tools

        if trace is None:
            return self._create(create_kwargs, name)

        with trace.generation(
            name=name,
            model=self.config.model,
            input=messages,
            model_parameters={"temperature": self.config.temperature},
        ) as gen:
            completion = self._create(create_kwargs, name, gen)
            if completion is None:
                gen.set_status("error")
            elif completion.requests_invocation:
                gen.set_output(
                    [{"name": c.name, "arguments": c.arguments} for c in completion.tool_calls]
                )
            else:
                gen.set_output((completion.content or "")[:2000])
            return completion

    def _create(self, create_kwargs: dict, name: str, gen=None) -> Optional[Completion]:
        try:
            logger.debug(
                "%s: calling %s (%d messages, tools=%s)",
                name,
                self.config.model,
                len(create_kwargs["messages"]),
                "tools" in create_kwargs,
            )
            response = self._get_client().chat.completions.create(**create_kwargs)
        except Exception as e:
            logger.error("%s: completion call failed: %s", name, e)
            return None

        if gen is not None and getattr(response, "usage", None):
            gen.set_usage(
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
                total_tokens=response.usage.total_tokens,
            )

        if not response.choices:
            logger.error("%s: completion returned no choices", name)
            return None

        message = response.choices[0].message
        tool_calls = tuple(
            ToolInvocation(
                name=tc.function.name,
                arguments=tc.function.arguments or "",
                call_id=getattr(tc, "id", None),
            )
            for tc in (message.tool_calls or [])
            if getattr(tc, "function", None) is not None
        )
        return Completion(content=message.content, tool_calls=tool_calls)

    def close(self) -> None:
        """Close the underlying OpenAI client."""
        if self._client is None:
            return
        try:
            self._client.close()
        except Exception as e:
            logger.debug("Error closing OpenAI client: %s", e)
