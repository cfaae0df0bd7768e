"""API route modules."""

from .api_keys_routes import router as api_keys_router
from .badges_routes import router as badges_router
from .health_routes import router as health_router
from .images_routes import router as images_router

__all__ = [
    "api_keys_router",
    "badges_router",
    "health_router",
    "images_router",
]
