"""
Orchestration core: planner, executor, chaining controller and synthesizer.
"""

from .session import OrchestrationSession, SessionState
from .planner import Planner, parse_arguments
from .executor import Executor
from .synthesizer import Synthesizer
from .controller import ChainingController, DEFAULT_MAX_DEPTH

__all__ = [
    "OrchestrationSession",
    "SessionState",
    "Planner",
    "parse_arguments",
    "Executor",
    "Synthesizer",
    "ChainingController",
    "DEFAULT_MAX_DEPTH",
]
