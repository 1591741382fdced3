"""
Network operations exposed to the planner.

Available operations:
- http_get: GET a path under the configured base URL
- http_post: POST a JSON body to a path under the configured base URL
"""

from .registry import (
    OperationDescriptor,
    OperationRegistry,
    HTTP_GET,
    HTTP_POST,
    default_registry,
)

__all__ = [
    "OperationDescriptor",
    "OperationRegistry",
    "HTTP_GET",
    "HTTP_POST",
    "default_registry",
]
