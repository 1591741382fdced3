"""
promptapi main orchestrator.

Wires the completion client, operation registry, planner, executor and
synthesizer together from explicit configuration objects, and runs one
chaining-controller session per prompt.
"""

import logging
import uuid
from typing import Optional

from .errors import OrchestrationError
from .llm_call import CompletionClient
from .models import ApiConfig, AppConfig, FinalResponse
from .operations import OperationRegistry, default_registry
from .orchestration import (
    ChainingController,
    Executor,
    OrchestrationSession,
    Planner,
    Synthesizer,
)
from .tracing import TracingContext

logger = logging.getLogger(__name__)


def new_execution_id() -> str:
    return f"exec-{uuid.uuid4().hex[:8]}"


class PromptOrchestrator:
    """
    Translates prompts into API calls and API results into answers.

    The components built here are stateless and shared across requests;
    all per-request state lives in the OrchestrationSession each run
    creates.
    """

    def __init__(
        self,
        api_config: ApiConfig,
        app_config: Optional[AppConfig] = None,
        registry: Optional[OperationRegistry] = None,
        completion_client: Optional[CompletionClient] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            api_config: The target API (base URL and documentation)
            app_config: Application configuration (defaults if not provided)
            registry: Operations exposed to the planner (http_get and http_post if not provided)
            completion_client: Completion service client (built from config if not provided)
        """
        self.api_config = api_config
        self.app_config = app_config or AppConfig()
        self.registry = registry or default_registry()
        self.completion_client = completion_client or CompletionClient(
            self.app_config.completion
        )

        max_payload_chars = self.app_config.orchestration.max_payload_chars
        self.planner = Planner(
            self.completion_client,
            api_config,
            self.registry,
            max_payload_chars=max_payload_chars,
        )
        self.executor = Executor(api_config, self.registry, self.app_config.executor)
        self.synthesizer = Synthesizer(
            self.completion_client, max_payload_chars=max_payload_chars
        )

    def controller(
        self,
        execution_id: Optional[str] = None,
        tracing_context: Optional[TracingContext] = None,
    ) -> ChainingController:
        """Create a controller for one request."""
        orchestration = self.app_config.orchestration
        return ChainingController(
            self.planner,
            self.executor,
            self.synthesizer,
            max_depth=orchestration.max_depth,
            completion_timeout=self.app_config.completion.timeout,
            api_timeout=self.app_config.executor.timeout,
            session_timeout=orchestration.session_timeout,
            execution_id=execution_id,
            tracing_context=tracing_context,
        )

    def run(
        self,
        prompt: str,
        execution_id: Optional[str] = None,
        tracing_context: Optional[TracingContext] = None,
    ) -> OrchestrationSession:
        """Run a session and return it in its terminal state."""
        execution_id = execution_id or new_execution_id()
        return self.controller(execution_id, tracing_context).run(prompt)

    def answer(
        self,
        prompt: str,
        execution_id: Optional[str] = None,
        tracing_context: Optional[TracingContext] = None,
    ) -> FinalResponse:
        """
        Run a session and return its answer.

        Raises:
            OrchestrationError: The cause of a failed session
        """
        session = self.run(prompt, execution_id, tracing_context)
        if session.error is not None:
            raise session.error
        if session.response is None:
            raise OrchestrationError("session ended without a response")
        return session.response

    def close(self) -> None:
        self.completion_client.close()


def run_query(
    prompt: str,
    api_config: ApiConfig,
    app_config: Optional[AppConfig] = None,
) -> str:
    """
    Convenience function to answer a single prompt.

    Raises:
        OrchestrationError: If the session fails
    """
    orchestrator = PromptOrchestrator(api_config, app_config)
    try:
        return orchestrator.answer(prompt).text
    finally:
        orchestrator.close()
