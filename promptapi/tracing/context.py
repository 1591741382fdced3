"""
Request-scoped tracing context using the Langfuse SDK v3.

One ``TracingContext`` is created per incoming prompt. It opens a root
span for the request; ``span()`` and ``generation()`` create children
linked through an explicit ``TraceContext`` (trace id plus parent span
id), so nesting does not depend on ambient OpenTelemetry state. When the
global tracing client is disabled every method is a no-op.
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Generator, Optional

from langfuse.types import TraceContext

from .client import get_tracing_client

logger = logging.getLogger(__name__)


def _langfuse():
    client = get_tracing_client()
    if client is None or not client.enabled:
        return None
    return client.client


@dataclass
class Observation:
    """A span or generation. Used as a context manager via its parent."""

    name: str
    as_type: str = "span"
    enabled: bool = False
    input: Optional[Any] = None
    metadata: Optional[dict] = None
    model: Optional[str] = None
    model_parameters: Optional[dict] = None
    trace_context: Optional[TraceContext] = None
    _context_manager: Any = field(default=None, repr=False)
    _observation: Any = field(default=None, repr=False)
    _start_time: float = field(default=0.0, repr=False)
    _output: Optional[Any] = field(default=None, repr=False)
    _usage: Optional[dict] = field(default=None, repr=False)
    _status: str = field(default="success", repr=False)

    def start(self) -> None:
        if not self.enabled:
            return
        langfuse = _langfuse()
        if langfuse is None:
            return

        kwargs: dict[str, Any] = {
            "trace_context": self.trace_context,
            "as_type": self.as_type,
            "name": self.name,
            "input": self.input,
            "metadata": self.metadata,
        }
        if self.as_type == "generation":
            kwargs["model"] = self.model
            kwargs["model_parameters"] = self.model_parameters

        try:
            self._start_time = time.time()
            self._context_manager = langfuse.start_as_current_observation(**kwargs)
            self._observation = self._context_manager.__enter__()
        except Exception as e:
            logger.warning(f"Failed to start {self.as_type} '{self.name}': {e}")
            self._observation = None

    def end(self) -> None:
        if not self._observation:
            return
        try:
            update: dict[str, Any] = {
                "metadata": {
                    "status": self._status,
                    "duration_ms": round((time.time() - self._start_time) * 1000, 2),
                }
            }
            if self._output is not None:
                update["output"] = self._output
            if self._usage:
                update["usage_details"] = self._usage
            self._observation.update(**update)
            if self._context_manager:
                self._context_manager.__exit__(None, None, None)
        except Exception as e:
            logger.warning(f"Failed to end {self.as_type} '{self.name}': {e}")

    def set_output(self, output: Any) -> None:
        self._output = output

    def set_status(self, status: str) -> None:
        self._status = status

    def set_usage(
        self,
        prompt_tokens: Optional[int] = None,
        completion_tokens: Optional[int] = None,
        total_tokens: Optional[int] = None,
    ) -> None:
        """Record token usage (generations only)."""
        usage = {
            "input": prompt_tokens,
            "output": completion_tokens,
            "total": total_tokens,
        }
        self._usage = {k: v for k, v in usage.items() if v is not None}

    def _child_trace_context(self) -> Optional[TraceContext]:
        span_id = getattr(self._observation, "id", None)
        if not self.trace_context or not span_id:
            return self.trace_context
        return TraceContext(
            trace_id=self.trace_context["trace_id"], parent_span_id=span_id
        )

    @contextmanager
    def span(
        self,
        name: str,
        input: Optional[Any] = None,
        metadata: Optional[dict] = None,
    ) -> Generator["Observation", None, None]:
        """Open a child span under this observation."""
        with _observe(
            Observation(
                name=name,
                enabled=self.enabled,
                input=input,
                metadata=metadata,
                trace_context=self._child_trace_context(),
            )
        ) as child:
            yield child

    @contextmanager
    def generation(
        self,
        name: str,
        model: str,
        input: Optional[Any] = None,
        model_parameters: Optional[dict] = None,
    ) -> Generator["Observation", None, None]:
        """Open a child generation (LLM call) under this observation."""
        with _observe(
            Observation(
                name=name,
                as_type="generation",
                enabled=self.enabled,
                input=input,
                model=model,
                model_parameters=model_parameters,
                trace_context=self._child_trace_context(),
            )
        ) as child:
            yield child


@contextmanager
def _observe(observation: Observation) -> Generator[Observation, None, None]:
    observation.start()
    try:
        yield observation
    finally:
        observation.end()


@dataclass
class TracingContext:
    """
    Tracing for a single prompt request.

    ``start_trace`` opens the root span; ``span`` and ``generation``
    create direct children of it; ``end_trace`` closes it with the final
    output and status.
    """

    execution_id: str
    _root: Optional[Observation] = field(default=None, repr=False)
    _enabled: bool = field(default=False, repr=False)

    def __post_init__(self):
        self._enabled = _langfuse() is not None

    @property
    def enabled(self) -> bool:
        return self._enabled

    def start_trace(
        self,
        name: str = "prompt_request",
        prompt: Optional[str] = None,
        metadata: Optional[dict] = None,
    ) -> None:
        """Open the root span for this request."""
        if not self._enabled:
            return
        root_metadata = {"execution_id": self.execution_id, **(metadata or {})}
        self._root = Observation(
            name=name,
            enabled=True,
            input={"prompt": prompt} if prompt is not None else None,
            metadata=root_metadata,
        )
        self._root.start()
        trace_id = getattr(self._root._observation, "trace_id", None)
        if trace_id:
            self._root.trace_context = TraceContext(trace_id=trace_id)
        logger.debug(f"[{self.execution_id}] Trace started (trace_id={trace_id})")

    def end_trace(
        self,
        output: Optional[str] = None,
        status: str = "success",
    ) -> None:
        """Close the root span."""
        if self._root is None:
            return
        self._root.set_output(output)
        self._root.set_status(status)
        self._root.end()
        self._root = None

    def _parent(self) -> Observation:
        return self._root or Observation(name="detached", enabled=False)

    @contextmanager
    def span(
        self,
        name: str,
        input: Optional[Any] = None,
        metadata: Optional[dict] = None,
    ) -> Generator[Observation, None, None]:
        with self._parent().span(name, input=input, metadata=metadata) as span:
            yield span

    @contextmanager
    def generation(
        self,
        name: str,
        model: str,
        input: Optional[Any] = None,
        model_parameters: Optional[dict] = None,
    ) -> Generator[Observation, None, None]:
        with self._parent().generation(
            name, model=model, input=input, model_parameters=model_parameters
        ) as gen:
            yield gen
