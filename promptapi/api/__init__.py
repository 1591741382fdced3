"""
FastAPI server module for promptapi.
"""

from .main import create_app, run_server

__all__ = ["create_app", "run_server"]
