"""FastAPI application for the shopping list service."""

from .app import configure_fastapi_app, create_app

__all__ = ["configure_fastapi_app", "create_app"]
