"""
Data models for planning and executing API calls.

A planning step yields either a ``Direct`` answer or an ``Invocation``
batch of ``CallRequest`` objects. Each executed call produces one
``ExecutionResult``; the pair is kept as a ``CallRecord``.
"""

import copy
import json
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union


def freeze_mapping(value: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    """Read-only view over a private deep copy of ``value``."""
    return MappingProxyType(copy.deepcopy(dict(value or {})))


def thaw_mapping(value: Mapping[str, Any]) -> dict[str, Any]:
    """Plain, independently mutable copy of a frozen mapping."""
    return copy.deepcopy(dict(value))


@dataclass(frozen=True)
class CallRequest:
    """
    A request to run one registered operation with bound arguments.

    ``arguments`` is copied on construction and exposed read-only, so a
    request recorded in a session cannot change afterwards.
    """

    operation_name: str
    arguments: Mapping[str, Any] = field(default_factory=dict, hash=False)
    call_id: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "arguments", freeze_mapping(self.arguments))

    def arguments_dict(self) -> dict[str, Any]:
        return thaw_mapping(self.arguments)

    def describe(self) -> str:
        """Short human-readable form used in logs and prompts."""
        return f"{self.operation_name}({json.dumps(dict(self.arguments), ensure_ascii=False)})"


@dataclass(frozen=True)
class Direct:
    """The completion service answered without needing the API."""

    content: str


@dataclass(frozen=True)
class Invocation:
    """The completion service asked for one or more operations to be run."""

    calls: tuple[CallRequest, ...]

    def __post_init__(self):
        if not self.calls:
            raise ValueError("Invocation requires at least one CallRequest")


PlanningOutcome = Union[Direct, Invocation]


class ExecutionErrorKind(Enum):
    """Why an execution failed."""

    UNSUPPORTED_OPERATION = "unsupported_operation"
    INVALID_ARGUMENTS = "invalid_arguments"
    NETWORK_ERROR = "network_error"
    HTTP_STATUS = "http_status"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class ExecutionResult:
    """Result of executing a single CallRequest."""

    success: bool
    payload: str = ""
    error_kind: Optional[ExecutionErrorKind] = None
    status_code: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, payload: str, status_code: Optional[int] = None) -> "ExecutionResult":
        return cls(success=True, payload=payload, status_code=status_code)

    @classmethod
    def failure(
        cls,
        kind: ExecutionErrorKind,
        error: str,
        payload: str = "",
        status_code: Optional[int] = None,
    ) -> "ExecutionResult":
        return cls(
            success=False,
            payload=payload,
            error_kind=kind,
            status_code=status_code,
            error=error,
        )

    def decoded(self) -> Any:
        """Return the payload parsed as JSON, or the raw text if it isn't JSON."""
        try:
            return json.loads(self.payload)
        except (json.JSONDecodeError, TypeError):
            return self.payload


@dataclass(frozen=True)
class CallRecord:
    """A call and the result it produced."""

    call: CallRequest
    result: ExecutionResult


@dataclass(frozen=True)
class FinalResponse:
    """The only thing returned to the caller."""

    text: str
