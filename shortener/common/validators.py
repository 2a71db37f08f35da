"""Validation utilities for URL shortener."""

from typing import Tuple

from ..shortcode import ShortCodeGenerator


def is_valid_url(url: str) -> Tuple[bool, str]:
    """Validate a URL submitted for shortening.
    
    Any non-blank string is accepted; the shortener does not interpret it.
    
    Args:
        url: The URL to validate
        
    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(url, str):
        return False, "URL must be a string"
    
    if not url.strip():
        return False, "URL cannot be empty"
    
    return True, ""


def is_valid_short_code(short_code: str, max_length: int = 64) -> Tuple[bool, str]:
    """Validate a short code taken from a request path or body.
    
    Args:
        short_code: The short code to validate
        max_length: Maximum length for short code
        
    Returns:
        Tuple of (is_valid, error_message)
    """
    if not short_code or not isinstance(short_code, str):
        return False, "Short code is required"
    
    if len(short_code) > max_length:
        return False, f"Short code must be at most {max_length} characters"
    
    if not ShortCodeGenerator.is_valid_format(short_code):
        return False, "Short code can only contain letters, numbers, hyphens, and underscores"
    
    return True, ""
