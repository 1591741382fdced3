"""
Data models for promptapi.
"""

from .config import (
    ApiConfig,
    CompletionConfig,
    OrchestrationConfig,
    ExecutorConfig,
    ApiSourceConfig,
    ServerConfig,
    LoggingConfig,
    LangfuseConfig,
    AppConfig,
)
from .plan import (
    CallRequest,
    Direct,
    Invocation,
    PlanningOutcome,
    ExecutionErrorKind,
    ExecutionResult,
    CallRecord,
    FinalResponse,
)

__all__ = [
    # Config models
    "ApiConfig",
    "CompletionConfig",
    "OrchestrationConfig",
    "ExecutorConfig",
    "ApiSourceConfig",
    "ServerConfig",
    "LoggingConfig",
    "LangfuseConfig",
    "AppConfig",
    # Planning models
    "CallRequest",
    "Direct",
    "Invocation",
    "PlanningOutcome",
    "ExecutionErrorKind",
    "ExecutionResult",
    "CallRecord",
    "FinalResponse",
]
