"""
promptapi - natural-language front end for a single REST API.

This package provides:
- A planner that turns prompts into calls against a configured API
- A bounded chaining controller for dependent, sequential calls
- A synthesizer that turns API responses back into prose
- A FastAPI server and an interactive CLI
"""

from .orchestrator import PromptOrchestrator, run_query
from .llm_call import CompletionClient

__all__ = [
    "PromptOrchestrator",
    "CompletionClient",
    "run_query",
]

__version__ = "0.1.0"
