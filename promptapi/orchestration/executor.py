"""
Executor: performs one planned call against the target API.
"""

import json
import logging
from typing import Any, Optional

import requests

from ..models import (
    ApiConfig,
    CallRequest,
    ExecutionErrorKind,
    ExecutionResult,
    ExecutorConfig,
)
from ..operations import OperationDescriptor, OperationRegistry

logger = logging.getLogger(__name__)

# Upper bound on error text kept in an ExecutionResult
MAX_ERROR_CHARS = 500


class Executor:
    """
    Runs CallRequests against ``ApiConfig.base_url``.

    The ``path`` argument is appended to the base URL verbatim. Any
    response that is not 2xx is a failure; the body is kept as payload so
    it can still be logged. No retries.
    """

    def __init__(
        self,
        api_config: ApiConfig,
        registry: OperationRegistry,
        config: Optional[ExecutorConfig] = None,
    ):
        self.api_config = api_config
        self.registry = registry
        self.config = config or ExecutorConfig()

    def build_url(self, path: str) -> str:
        return f"{self.api_config.base_url}{path}"

    def execute(self, call: CallRequest, timeout: Optional[float] = None) -> ExecutionResult:
        """
        Execute a single call.

        Args:
            call: The call to run
            timeout: Request timeout in seconds (config default if None)

        Returns:
            ExecutionResult; never raises for API or transport failures.
        """
        operation = self.registry.get(call.operation_name)
        if operation is None:
            logger.warning("Unsupported operation: %s", call.operation_name)
            return ExecutionResult.failure(
                ExecutionErrorKind.UNSUPPORTED_OPERATION,
                f"Unsupported operation '{call.operation_name}'",
            )

        path = call.arguments.get("path")
        if not isinstance(path, str):
            return ExecutionResult.failure(
                ExecutionErrorKind.INVALID_ARGUMENTS,
                f"Operation '{operation.name}' requires a string 'path' argument",
            )

        body: Optional[str] = None
        if operation.method == "POST" and call.arguments.get("body") is not None:
            try:
                body = _serialize_body(call.arguments["body"])
            except ValueError as e:
                return ExecutionResult.failure(
                    ExecutionErrorKind.INVALID_ARGUMENTS, str(e)
                )

        return self._send(
            operation,
            self.build_url(path),
            body,
            timeout if timeout is not None else self.config.timeout,
        )

    def _send(
        self,
        operation: OperationDescriptor,
        url: str,
        body: Optional[str],
        timeout: float,
    ) -> ExecutionResult:
        headers = {"User-Agent": self.config.user_agent}
        logger.debug("%s %s", operation.method, url)
        try:
            if operation.method == "POST":
                headers["Content-Type"] = "application/json"
                response = requests.post(url, data=body, headers=headers, timeout=timeout)
            else:
                response = requests.get(url, headers=headers, timeout=timeout)
        except requests.exceptions.Timeout as e:
            logger.error("%s %s timed out after %.1fs: %s", operation.method, url, timeout, e)
            return ExecutionResult.failure(
                ExecutionErrorKind.TIMEOUT, _clip(f"Request timed out: {e}")
            )
        except requests.exceptions.RequestException as e:
            logger.error("%s %s failed: %s", operation.method, url, e)
            return ExecutionResult.failure(
                ExecutionErrorKind.NETWORK_ERROR, _clip(f"Request failed: {e}")
            )

        text = response.text
        if not 200 <= response.status_code < 300:
            logger.warning(
                "%s %s returned HTTP %d", operation.method, url, response.status_code
            )
            return ExecutionResult.failure(
                ExecutionErrorKind.HTTP_STATUS,
                f"HTTP {response.status_code} {response.reason or ''}".strip(),
                payload=text,
                status_code=response.status_code,
            )

        logger.debug(
            "%s %s -> %d (%d chars)", operation.method, url, response.status_code, len(text)
        )
        return ExecutionResult.ok(text, status_code=response.status_code)


def _serialize_body(body: Any) -> str:
    """
    Encode a POST body as JSON.

    Strings are taken to be JSON already and are validated rather than
    encoded a second time.

    Raises:
        ValueError: If a string body is not valid JSON
    """
    if isinstance(body, str):
        try:
            json.loads(body)
        except json.JSONDecodeError as e:
            raise ValueError(f"'body' is not valid JSON: {e}") from e
        return body
    return json.dumps(body)


def _clip(message: str) -> str:
    if len(message) > MAX_ERROR_CHARS:
        return message[:MAX_ERROR_CHARS] + "..."
    return message
