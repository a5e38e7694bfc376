# src/ascend/api_server/__init__.py
"""HTTP server exposing a goal-record store at ``/api/goals``."""

from .main import create_app, run

__all__ = ["create_app", "run"]
