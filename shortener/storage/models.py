"""Data models for URL shortener storage."""

from dataclasses import dataclass


@dataclass
class Record:
    """Represents a shortened URL as persisted by a storage backend."""
    
    short_code: str
    original_url: str
    correlation_id: str = ""
    user_id: str = ""
    is_deleted: bool = False
    
    def to_dict(self) -> dict:
        """Convert to dictionary (the append-log line layout)."""
        return {
            "short_code": self.short_code,
            "original_url": self.original_url,
            "correlation_id": self.correlation_id,
            "user_id": self.user_id,
            "is_deleted": self.is_deleted,
        }
    
    @classmethod
    def from_dict(cls, data: dict) -> "Record":
        """Create from dictionary.
        
        Raises:
            KeyError: If a required field is missing
            ValueError: If a field has the wrong type or is empty
        """
        short_code = data["short_code"]
        original_url = data["original_url"]
        correlation_id = data.get("correlation_id") or ""
        user_id = data.get("user_id") or ""
        is_deleted = data.get("is_deleted", False)
        
        if not isinstance(short_code, str) or not short_code:
            raise ValueError("short_code must be a non-empty string")
        if not isinstance(original_url, str) or not original_url:
            raise ValueError("original_url must be a non-empty string")
        if not isinstance(correlation_id, str) or not isinstance(user_id, str):
            raise ValueError("correlation_id and user_id must be strings")
        if not isinstance(is_deleted, bool):
            raise ValueError("is_deleted must be a boolean")
        
        return cls(
            short_code=short_code,
            original_url=original_url,
            correlation_id=correlation_id,
            user_id=user_id,
            is_deleted=is_deleted,
        )
