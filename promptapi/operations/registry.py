"""
Operation Registry - the network operations the planner may invoke.

Each operation is described once (name, description, JSON parameter
schema, HTTP method) and exported to the completion service as an
OpenAI function-calling tool definition.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from ..models.plan import freeze_mapping, thaw_mapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperationDescriptor:
    """Metadata for a callable network operation."""

    name: str
    description: str
    parameter_schema: Mapping[str, Any] = field(hash=False)
    method: str = "GET"

    def __post_init__(self):
        object.__setattr__(self, "parameter_schema", freeze_mapping(self.parameter_schema))

    def to_tool_definition(self) -> dict:
        """Render this operation in OpenAI function-calling format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": thaw_mapping(self.parameter_schema),
            },
        }


HTTP_GET = OperationDescriptor(
    name="http_get",
    description=(
        "Perform an HTTP GET request to the specified path with the specified "
        "url parameters and return the response body as a string."
    ),
    parameter_schema={
        "type": "object",
        "properties": {
            "path": {
                "type": "string",
                "description": (
                    "the path to be appended to the base url, "
                    "including any query string"
                ),
            }
        },
        "required": ["path"],
        "additionalProperties": False,
    },
    method="GET",
)

HTTP_POST = OperationDescriptor(
    name="http_post",
    description=(
        "Perform an HTTP POST request to the specified path with an optional "
        "JSON body and return the response body as a string."
    ),
    parameter_schema={
        "type": "object",
        "properties": {
            "path": {
                "type": "string",
                "description": "the path to be appended to the base url",
            },
            "body": {
                "type": "object",
                "description": "the JSON body to send with the request",
            },
        },
        "required": ["path"],
        "additionalProperties": False,
    },
    method="POST",
)


@dataclass(frozen=True)
class OperationRegistry:
    """Immutable set of operations, keyed by unique name."""

    _operations: Mapping[str, OperationDescriptor] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @classmethod
    def of(cls, operations: Iterable[OperationDescriptor]) -> "OperationRegistry":
        """
        Build a registry from descriptors.

        Raises:
            ValueError: If two descriptors share a name or a method is unknown
        """
        by_name: dict[str, OperationDescriptor] = {}
        for op in operations:
            if op.name in by_name:
                raise ValueError(f"Duplicate operation name: {op.name}")
            if op.method not in ("GET", "POST"):
                raise ValueError(
                    f"Operation '{op.name}' has unsupported method {op.method}"
                )
            by_name[op.name] = op
        return cls(MappingProxyType(by_name))

    def get(self, name: str) -> Optional[OperationDescriptor]:
        """Get an operation by name."""
        return self._operations.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._operations

    def __len__(self) -> int:
        return len(self._operations)

    def names(self) -> list[str]:
        return list(self._operations)

    def all_operations(self) -> dict[str, OperationDescriptor]:
        """Get a copy of all registered operations."""
        return dict(self._operations)

    def tool_definitions(self) -> list[dict]:
        """Build OpenAI function-calling tool definitions for every operation."""
        return [op.to_tool_definition() for op in self._operations.values()]

    def get_operations_summary(self) -> str:
        """Get formatted summary of all operations for prompts and logs."""
        return "\n".join(
            f"- {name} ({op.method}): {op.description}"
            for name, op in self._operations.items()
        )


def default_registry(include_post: bool = True) -> OperationRegistry:
    """The standard registry: ``http_get`` and, optionally, ``http_post``."""
    operations = [HTTP_GET]
    if include_post:
        operations.append(HTTP_POST)
    return OperationRegistry.of(operations)
