"""API package exports."""

from todo_api.api.auth import router as auth_router
from todo_api.api.lists import router as lists_router
from todo_api.api.middleware import CorrelationIdMiddleware
from todo_api.api.routes import router

__all__ = ["auth_router", "lists_router", "router", "CorrelationIdMiddleware"]
