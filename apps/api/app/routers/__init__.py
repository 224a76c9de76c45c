"""API routers."""

from app.routers.dispatch import router as dispatch_router
from app.routers.permissions import router as permissions_router

__all__ = [
    "dispatch_router",
    "permissions_router",
]
