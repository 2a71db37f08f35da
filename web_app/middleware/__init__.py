"""Middleware for URL shortener web app."""

from .auth import AuthMiddleware
from .compression import GzipRequestMiddleware
from .headers import RealIPMiddleware
from .logging import LoggingMiddleware

__all__ = ["AuthMiddleware", "GzipRequestMiddleware", "RealIPMiddleware", "LoggingMiddleware"]
