"""Short code generation utilities."""

import base64
import hashlib
import string


class ShortCodeGenerator:
    """Generate content-addressed short codes for URLs."""
    
    # URL-safe base64 alphabet
    URLSAFE_CHARS = string.ascii_letters + string.digits + "-_"
    
    def __init__(self, code_bytes: int = 6):
        """Initialize short code generator.
        
        Args:
            code_bytes: Number of digest bytes encoded into each code
        """
        if code_bytes < 1 or code_bytes > 32:
            raise ValueError("code_bytes must be between 1 and 32")
        self.code_bytes = code_bytes
    
    def generate_from_url(self, url: str) -> str:
        """Generate short code from URL hash.
        
        The URL is trimmed, hashed with SHA-256 and the first ``code_bytes``
        bytes of the digest are encoded with the URL-safe base64 alphabet.
        Padding is stripped. The same URL always yields the same code.
        
        Args:
            url: The URL to hash
            
        Returns:
            Short code based on URL hash
        """
        digest = hashlib.sha256(url.strip().encode("utf-8")).digest()
        code = base64.urlsafe_b64encode(digest[:self.code_bytes]).decode("ascii")
        return code.rstrip("=")
    
    @property
    def code_length(self) -> int:
        """Length of the codes this generator produces."""
        return (self.code_bytes * 8 + 5) // 6
    
    @staticmethod
    def is_valid_format(code: str) -> bool:
        """Check if code has valid format (URL-safe base64, no padding).
        
        Args:
            code: Code to validate
            
        Returns:
            True if valid format
        """
        return bool(code) and all(c in ShortCodeGenerator.URLSAFE_CHARS for c in code)
