"""In-process storage backend for URL shortener."""

import asyncio
import logging
from dataclasses import replace
from typing import Optional, List, Dict, Tuple

from .base import URLStorageBase, StorageState
from .models import Record


class MemoryStorage(URLStorageBase):
    """In-memory index of short code -> record.
    
    All reads and writes go through a single asyncio lock. Subclasses can
    make mutations durable by overriding ``_persist``, which is called with
    the lock held before the index is touched.
    """
    
    name = "memory"
    
    def __init__(self, logger: Optional[logging.Logger] = None):
        """Initialize in-memory storage.
        
        Args:
            logger: Optional logger instance
        """
        super().__init__(logger)
        self._urls: Dict[str, Record] = {}
        self._lock = asyncio.Lock()
        self.state = StorageState.READY
    
    async def save(self, record: Record) -> Record:
        """Store a single record (idempotent for an already stored URL)."""
        async with self._lock:
            stored, pending = self._stage([record])
            if pending:
                await self._commit(pending)
        
        if pending:
            self.logger.debug(f"Saved short code {record.short_code}")
        return stored[0]
    
    async def save_batch(self, records: List[Record]) -> List[Record]:
        """Store a batch; the index only changes once every record is persisted."""
        async with self._lock:
            stored, pending = self._stage(records)
            if pending:
                await self._commit(pending)
        
        self.logger.debug(f"Saved batch of {len(records)} records ({len(pending)} new)")
        return stored
    
    async def get(self, short_code: str) -> Optional[Record]:
        async with self._lock:
            record = self._urls.get(short_code)
            return replace(record) if record is not None else None
    
    async def get_urls_by_user_id(self, user_id: str) -> List[Record]:
        if not user_id:
            return []
        
        async with self._lock:
            return [replace(r) for r in self._urls.values() if r.user_id == user_id]
    
    async def delete_urls(self, short_codes: List[str], user_id: str) -> int:
        if not user_id or not short_codes:
            return 0
        
        async with self._lock:
            tombstones: Dict[str, Record] = {}
            for code in short_codes:
                record = self._urls.get(code)
                if record is None or record.user_id != user_id or record.is_deleted:
                    continue
                tombstones[code] = replace(record, is_deleted=True)
            
            if tombstones:
                await self._commit(list(tombstones.values()))
        
        self.logger.info(f"Deleted {len(tombstones)} of {len(short_codes)} requested codes for user {user_id}")
        return len(tombstones)
    
    async def get_stats(self) -> Tuple[int, int]:
        async with self._lock:
            users = {r.user_id for r in self._urls.values() if r.user_id}
            return len(self._urls), len(users)
    
    async def close(self) -> None:
        """Nothing to release for a pure in-memory index."""
        pass
    
    def _stage(self, records: List[Record]) -> Tuple[List[Record], List[Record]]:
        """Resolve each record against the index without mutating it.
        
        Returns:
            Tuple of (records as they will be stored, records that must be written)
            
        Raises:
            ShortCodeCollisionError: If a code maps to a different URL
        """
        staged: Dict[str, Record] = {}
        stored: List[Record] = []
        pending: List[Record] = []
        
        for record in records:
            existing = staged.get(record.short_code) or self._urls.get(record.short_code)
            if existing is not None:
                self.check_collision(existing, record)
                stored.append(replace(existing))
                continue
            
            new_record = replace(self.with_correlation_id(record), is_deleted=False)
            staged[new_record.short_code] = new_record
            pending.append(new_record)
            stored.append(replace(new_record))
        
        return stored, pending
    
    async def _commit(self, records: List[Record]) -> None:
        """Persist records, then apply them to the index."""
        await self._persist(records)
        for record in records:
            self._urls[record.short_code] = record
    
    async def _persist(self, records: List[Record]) -> None:
        """Durability hook; a pure in-memory index keeps nothing."""
        pass
