"""
REST API Module
"""
from .middleware import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
