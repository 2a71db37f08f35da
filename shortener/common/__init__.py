"""Common utilities for URL shortener."""

from .validators import is_valid_url, is_valid_short_code
from .network import is_trusted_ip
from .logging_config import setup_logging

__all__ = [
    "is_valid_url",
    "is_valid_short_code",
    "is_trusted_ip",
    "setup_logging",
]
