"""API module for Route Eats."""

from .routes import router

__all__ = ["router"]
