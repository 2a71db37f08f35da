"""Abstract base class for URL shortener storage backends."""

import uuid
import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from enum import Enum
from typing import Optional, List, Tuple

from .models import Record
from ..errors import ShortCodeCollisionError


class StorageState(str, Enum):
    """Lifecycle of a storage backend."""
    
    UNINITIALIZED = "uninitialized"
    RECOVERING = "recovering"
    READY = "ready"


class URLStorageBase(ABC):
    """Abstract base class for URL shortener storage operations.
    
    Implementations must treat ``short_code`` as the primary key, keep
    ``is_deleted`` monotonic and make ``save_batch`` all-or-nothing.
    """
    
    name = "base"
    
    def __init__(self, logger: Optional[logging.Logger] = None):
        """Initialize storage backend.
        
        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(type(self).__module__)
        self.state = StorageState.UNINITIALIZED
    
    async def initialize(self) -> None:
        """Prepare the backend for use (connect, create schema, etc.)."""
        self.state = StorageState.READY
    
    @abstractmethod
    async def save(self, record: Record) -> Record:
        """Persist a single record.
        
        Saving a code that already maps to the same URL is idempotent and
        returns the stored record unchanged.
        
        Args:
            record: The record to store
            
        Returns:
            The stored record
            
        Raises:
            ShortCodeCollisionError: If the code maps to a different URL
            BackendError: On I/O or connectivity failure
        """
        pass
    
    @abstractmethod
    async def save_batch(self, records: List[Record]) -> List[Record]:
        """Persist several records as one unit.
        
        Args:
            records: Records to store, in caller order
            
        Returns:
            The stored records, in caller order
            
        Raises:
            ShortCodeCollisionError: If any code maps to a different URL
            BackendError: On I/O or connectivity failure (nothing is stored)
        """
        pass
    
    @abstractmethod
    async def get(self, short_code: str) -> Optional[Record]:
        """Get the record for a short code, tombstoned or not.
        
        Args:
            short_code: The short code to lookup
            
        Returns:
            The record if found, None otherwise
        """
        pass
    
    @abstractmethod
    async def get_urls_by_user_id(self, user_id: str) -> List[Record]:
        """List every record owned by a user, including tombstoned ones.
        
        Args:
            user_id: Owner identifier
            
        Returns:
            List of records (empty if none)
        """
        pass
    
    @abstractmethod
    async def delete_urls(self, short_codes: List[str], user_id: str) -> int:
        """Tombstone the given codes owned by a user.
        
        Codes that are missing or owned by someone else are skipped.
        
        Args:
            short_codes: Codes to delete
            user_id: Owner identifier
            
        Returns:
            Number of records newly tombstoned
        """
        pass
    
    @abstractmethod
    async def get_stats(self) -> Tuple[int, int]:
        """Get storage statistics.
        
        Returns:
            Tuple of (total record count, distinct non-empty owner count)
        """
        pass
    
    async def ping(self) -> None:
        """Check backend connectivity.
        
        Raises:
            BackendError: If the backend is unreachable
        """
        return None
    
    @abstractmethod
    async def close(self) -> None:
        """Release backend resources."""
        pass
    
    @staticmethod
    def with_correlation_id(record: Record) -> Record:
        """Return a copy of the record with a correlation id assigned if missing."""
        if record.correlation_id:
            return replace(record)
        return replace(record, correlation_id=str(uuid.uuid4()))
    
    @staticmethod
    def check_collision(existing: Record, record: Record) -> None:
        """Raise if an existing code is bound to a different URL."""
        if existing.original_url != record.original_url:
            raise ShortCodeCollisionError(
                f"Short code '{record.short_code}' already maps to a different URL."
            )
