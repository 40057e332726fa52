"""FastAPI dependencies for the application."""

from shopchat.dependencies.permissions import require_authenticated

__all__ = ["require_authenticated"]
