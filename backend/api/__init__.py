"""
UW Go Rides API package.

Provides the FastAPI application for the campus ride board.
"""

from .app import app, create_app

__all__ = ["app", "create_app"]
