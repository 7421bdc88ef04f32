"""API route handlers."""

from api.routes import health, metrics, on_demand

__all__ = ["health", "metrics", "on_demand"]
