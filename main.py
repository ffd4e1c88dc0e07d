"""Service Entry Point - Root Module.

This is the root-level entry point for uvicorn (`uvicorn main:app`).
It imports from the src package.
"""

from src.main import app, create_app

__all__ = [
    "app",
    "create_app",
]
