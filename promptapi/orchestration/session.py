"""
Per-request orchestration state.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..errors import OrchestrationError, SessionTimeoutError
from ..models import CallRecord, FinalResponse


class SessionState(Enum):
    START = "start"
    EXECUTING = "executing"
    SYNTHESIZING = "synthesizing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class OrchestrationSession:
    """
    State of one prompt's orchestration run.

    Created fresh for each request and owned by the handler that created
    it. ``history`` is a tuple and only ever grows by ``record``; ``depth``
    counts executed batches and never exceeds ``max_depth``.
    """

    prompt: str
    max_depth: int = 5
    execution_id: Optional[str] = None
    deadline: Optional[float] = None  # time.monotonic() value
    history: tuple[CallRecord, ...] = ()
    depth: int = 0
    state: SessionState = SessionState.START
    response: Optional[FinalResponse] = None
    error: Optional[OrchestrationError] = None
    continuation_calls: int = 0
    _started_at: float = field(default_factory=time.monotonic, repr=False)

    @classmethod
    def create(
        cls,
        prompt: str,
        max_depth: int = 5,
        execution_id: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> "OrchestrationSession":
        """Create a session, with a deadline ``timeout`` seconds from now if set."""
        if max_depth < 1:
            raise ValueError("max_depth must be >= 1")
        deadline = time.monotonic() + timeout if timeout else None
        return cls(
            prompt=prompt,
            max_depth=max_depth,
            execution_id=execution_id,
            deadline=deadline,
        )

    @property
    def is_terminal(self) -> bool:
        return self.state in (SessionState.DONE, SessionState.FAILED)

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self._started_at

    def record(self, record: CallRecord) -> None:
        self.history = self.history + (record,)

    def begin_batch(self) -> None:
        if self.depth >= self.max_depth:
            raise RuntimeError(
                f"depth {self.depth} already at max_depth {self.max_depth}"
            )
        self.depth += 1
        self.state = SessionState.EXECUTING

    def complete(self, text: str) -> None:
        self.response = FinalResponse(text=text)
        self.state = SessionState.DONE

    def fail(self, error: OrchestrationError) -> None:
        self.error = error
        self.state = SessionState.FAILED

    def as_trace(self) -> list[dict]:
        """
        Get a trace of all calls made in this session.

        Returns:
            List of call dictionaries, in execution order.
        """
        return [
            {
                "step": i,
                "operation": record.call.operation_name,
                "arguments": record.call.arguments_dict(),
                "success": record.result.success,
                "status_code": record.result.status_code,
                "error": record.result.error,
                "payload": record.result.payload,
            }
            for i, record in enumerate(self.history, 1)
        ]

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None when there is no deadline."""
        if self.deadline is None:
            return None
        return self.deadline - time.monotonic()

    def call_timeout(self, default: float) -> float:
        """
        Timeout for the next external call: the smaller of ``default`` and
        the time left in the session.

        Raises:
            SessionTimeoutError: If the deadline has already passed
        """
        remaining = self.remaining()
        if remaining is None:
            return default
        if remaining <= 0:
            raise SessionTimeoutError(
                f"session deadline exceeded after {self.elapsed:.1f}s"
            )
        return min(default, remaining)
