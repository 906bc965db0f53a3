"""Ordering domain API package."""

from ordering.api.routes import admin_router, checkout_router, order_router
from ordering.api.sandbox import sandbox_router

__all__ = ["checkout_router", "order_router", "admin_router", "sandbox_router"]
