"""API routes module."""

from app.api.routes.categories import router as categories_router
from app.api.routes.characteristic_groups import router as characteristic_groups_router
from app.api.routes.health import router as health_router

__all__ = ["categories_router", "characteristic_groups_router", "health_router"]
