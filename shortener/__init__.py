"""Core business logic for URL shortener."""

from .shortcode import ShortCodeGenerator
from .service import URLShortenerService, BatchRequestItem, BatchResponseItem

__all__ = [
    "ShortCodeGenerator",
    "URLShortenerService",
    "BatchRequestItem",
    "BatchResponseItem",
]
