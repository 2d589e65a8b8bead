"""API routers."""

from .diagrams import router as diagrams_router
from .health import router as health_router
from .modifications import router as modifications_router

__all__ = [
    "diagrams_router",
    "health_router",
    "modifications_router",
]
