"""
Exception hierarchy for promptapi.

Everything the orchestration core raises derives from ``PromptApiError`` so
the request handler can map any core failure to a single user-facing error.
"""

from typing import Optional


class PromptApiError(Exception):
    """Base class for all promptapi errors."""


class ConfigError(PromptApiError):
    """Invalid or missing configuration. Fatal at startup."""


class OrchestrationError(PromptApiError):
    """A failure that ends an orchestration session.

    Attributes:
        call: The CallRequest being handled when the failure occurred, if any.
    """

    def __init__(self, message: str, call=None):
        super().__init__(message)
        self.call = call


class PlanningError(OrchestrationError):
    """Completion service failed or returned malformed invocation arguments."""


class UnsupportedOperationError(OrchestrationError):
    """The planner requested an operation that is not in the registry."""


class ApiCallError(OrchestrationError):
    """The target API call failed (transport error, timeout or non-2xx)."""

    def __init__(self, message: str, call=None, result=None):
        super().__init__(message, call=call)
        self.result = result

    @property
    def status_code(self) -> Optional[int]:
        return getattr(self.result, "status_code", None)


class SynthesisError(OrchestrationError):
    """The final translation of API results into prose failed."""


class SessionTimeoutError(OrchestrationError):
    """The session deadline passed before the next external call."""
