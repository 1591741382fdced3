"""
Chaining controller: the bounded plan / execute / continue loop.

Per-session flow:
    1. Plan the prompt. A direct answer ends the session immediately.
    2. Execute every call of the current batch, in order, recording each
       call and result. Any failed call ends the session.
    3. On the last allowed batch (depth == max_depth) go straight to
       synthesis; otherwise ask the planner whether more calls are needed.
    4. When no more calls are requested, synthesize the answer.

Calls are strictly sequential because later calls may depend on data
from earlier results; the planner decides the dependencies, the
controller only enforces the depth ceiling and the session deadline.
"""

import logging
from typing import Optional

from ..errors import (
    ApiCallError,
    OrchestrationError,
    UnsupportedOperationError,
)
from ..models import (
    CallRecord,
    CallRequest,
    Direct,
    ExecutionErrorKind,
    ExecutionResult,
    PlanningOutcome,
)
from ..tracing import TracingContext
from .executor import Executor
from .planner import Planner
from .session import OrchestrationSession, SessionState
from .synthesizer import Synthesizer

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 5


class ChainingController:
    """Drives one orchestration session from prompt to final answer."""

    def __init__(
        self,
        planner: Planner,
        executor: Executor,
        synthesizer: Synthesizer,
        max_depth: int = DEFAULT_MAX_DEPTH,
        completion_timeout: float = 60.0,
        api_timeout: float = 30.0,
        session_timeout: float = 0.0,
        execution_id: Optional[str] = None,
        tracing_context: Optional[TracingContext] = None,
    ):
        if max_depth < 1:
            raise ValueError("max_depth must be >= 1")
        self.planner = planner
        self.executor = executor
        self.synthesizer = synthesizer
        self.max_depth = max_depth
        self.completion_timeout = completion_timeout
        self.api_timeout = api_timeout
        self.session_timeout = session_timeout
        self.execution_id = execution_id
        self.tracing_context = tracing_context or TracingContext(
            execution_id=execution_id or "local"
        )

    @property
    def _prefix(self) -> str:
        return f"[{self.execution_id}] " if self.execution_id else ""

    def run(self, prompt: str) -> OrchestrationSession:
        """
        Run a full session for ``prompt``.

        Returns:
            The terminal session: DONE with ``response`` set, or FAILED with
            ``error`` set. Orchestration errors are never raised.
        """
        session = OrchestrationSession.create(
            prompt,
            max_depth=self.max_depth,
            execution_id=self.execution_id,
            timeout=self.session_timeout or None,
        )
        logger.debug("%sStarting orchestration for: %s", self._prefix, prompt)

        with self.tracing_context.span(
            name="orchestration",
            input={"prompt": prompt},
            metadata={"max_depth": self.max_depth},
        ) as span:
            try:
                self._run(session, span)
            except OrchestrationError as e:
                self._fail(session, e)
                span.set_status("error")
            span.set_output(
                {
                    "state": session.state.value,
                    "depth": session.depth,
                    "calls": len(session.history),
                }
            )

        self._log_trace_summary(session)
        return session

    def _run(self, session: OrchestrationSession, trace) -> None:
        outcome = self._plan(session, trace)
        if isinstance(outcome, Direct):
            logger.info("%sDirect answer, no API calls needed", self._prefix)
            session.complete(outcome.content)
            return

        batch = outcome.calls
        while True:
            session.begin_batch()
            self._execute_batch(session, batch, trace)

            if session.depth >= session.max_depth:
                logger.warning(
                    "%sMax depth (%d) reached, synthesizing with %d call(s)",
                    self._prefix,
                    session.max_depth,
                    len(session.history),
                )
                break

            outcome = self._continue(session, trace)
            if isinstance(outcome, Direct):
                break
            batch = outcome.calls

        session.state = SessionState.SYNTHESIZING
        with trace.span(name="synthesize", input={"calls": len(session.history)}) as span:
            text = self.synthesizer.synthesize(
                session.prompt,
                session.history,
                timeout=session.call_timeout(self.completion_timeout),
                trace=span,
            )
            span.set_output({"chars": len(text)})
        session.complete(text)

    def _plan(self, session: OrchestrationSession, trace) -> PlanningOutcome:
        with trace.span(name="plan", input={"prompt": session.prompt}) as span:
            outcome = self.planner.plan(
                session.prompt,
                timeout=session.call_timeout(self.completion_timeout),
                trace=span,
            )
            span.set_output(_describe_outcome(outcome))
        return outcome

    def _continue(self, session: OrchestrationSession, trace) -> PlanningOutcome:
        session.continuation_calls += 1
        with trace.span(
            name="continue_plan",
            input={"depth": session.depth, "calls": len(session.history)},
        ) as span:
            outcome = self.planner.continue_plan(
                session.prompt,
                session.history,
                timeout=session.call_timeout(self.completion_timeout),
                trace=span,
            )
            span.set_output(_describe_outcome(outcome))
        return outcome

    def _execute_batch(
        self,
        session: OrchestrationSession,
        batch: tuple[CallRequest, ...],
        trace,
    ) -> None:
        for call in batch:
            timeout = session.call_timeout(self.api_timeout)
            with trace.span(
                name=f"call:{call.operation_name}",
                input={"arguments": call.arguments_dict(), "depth": session.depth},
            ) as span:
                result = self.executor.execute(call, timeout=timeout)
                span.set_output(
                    {
                        "success": result.success,
                        "status_code": result.status_code,
                        "payload": result.payload[:500],
                    }
                )
                if not result.success:
                    span.set_status("error")

            session.record(CallRecord(call=call, result=result))
            if not result.success:
                raise _execution_error(call, result)

    def _fail(self, session: OrchestrationSession, error: OrchestrationError) -> None:
        session.fail(error)
        offending = error.call.describe() if error.call is not None else "-"
        logger.error(
            "%sSession failed (%s): %s | prompt=%r | call=%s",
            self._prefix,
            type(error).__name__,
            error,
            session.prompt[:200],
            offending,
        )

    def _log_trace_summary(self, session: OrchestrationSession) -> None:
        """Log a compact session summary."""
        logger.info("%s%s", self._prefix, "─" * 50)
        logger.info(
            "%sSESSION %s (depth %d/%d, %.2fs)",
            self._prefix,
            session.state.value.upper(),
            session.depth,
            session.max_depth,
            session.elapsed,
        )
        for i, record in enumerate(session.history, 1):
            result = record.result
            outcome = (
                f"{result.status_code}" if result.success
                else f"FAILED {result.error_kind.value if result.error_kind else ''}"
            )
            logger.info("%sCall %d: %s -> %s", self._prefix, i, record.call.describe(), outcome)


def _execution_error(call: CallRequest, result: ExecutionResult) -> OrchestrationError:
    if result.error_kind == ExecutionErrorKind.UNSUPPORTED_OPERATION:
        return UnsupportedOperationError(
            f"unsupported operation '{call.operation_name}'", call=call
        )
    return ApiCallError(result.error or "API call failed", call=call, result=result)


def _describe_outcome(outcome: PlanningOutcome) -> dict:
    if isinstance(outcome, Direct):
        return {"direct": True, "content": outcome.content[:500]}
    return {"direct": False, "calls": [c.describe() for c in outcome.calls]}
