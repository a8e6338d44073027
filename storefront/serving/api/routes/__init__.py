"""
API Routes Module
"""
from .health import router as health_router
from .products import router as products_router
from .promotions import router as promotions_router
from .reference import router as reference_router

__all__ = [
    "health_router",
    "products_router",
    "promotions_router",
    "reference_router",
]
