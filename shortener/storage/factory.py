"""Storage backend selection."""

import logging
from typing import Optional

from .base import URLStorageBase
from .file import FileStorage
from .memory import MemoryStorage
from .postgres import PostgresStorage


def create_storage(config, logger: Optional[logging.Logger] = None) -> URLStorageBase:
    """Create the storage backend named by configuration.
    
    Priority: PostgreSQL when ``database_dsn`` is set, then the append-only
    file when ``file_storage_path`` is set, else a pure in-memory index.
    
    Args:
        config: Configuration instance
        logger: Optional logger
        
    Returns:
        Storage backend (call ``initialize()`` before use)
    """
    logger = logger or logging.getLogger(__name__)
    
    if config.database_dsn:
        logger.info("Using PostgreSQL storage")
        return PostgresStorage(
            dsn=config.database_dsn,
            pool_max_size=config.pool_max_size,
            connection_timeout_seconds=config.connection_timeout_seconds,
            logger=logger,
        )
    
    if config.file_storage_path:
        logger.info(f"Using file storage at {config.file_storage_path}")
        return FileStorage(file_path=config.file_storage_path, logger=logger)
    
    logger.info("Using in-memory storage (records are lost on restart)")
    return MemoryStorage(logger=logger)
