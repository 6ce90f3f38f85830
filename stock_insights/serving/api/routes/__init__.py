"""
API Routes Module
"""
from .health import router as health_router
from .classification import router as classification_router

__all__ = [
    "health_router",
    "classification_router",
]
