"""Pytest configuration and fixtures."""

import pytest
from typing import AsyncGenerator

from shortener.service import URLShortenerService
from shortener.shortcode import ShortCodeGenerator
from shortener.storage import MemoryStorage, FileStorage
from shortener.common.logging_config import setup_logging


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def storage_path(tmp_path):
    """Path of a fresh append-only log."""
    return tmp_path / "storage.txt"


@pytest.fixture
async def memory_storage(logger) -> AsyncGenerator[MemoryStorage, None]:
    """Create in-memory storage."""
    storage = MemoryStorage(logger=logger)
    await storage.initialize()
    
    yield storage
    
    await storage.close()


@pytest.fixture
async def file_storage(storage_path, logger) -> AsyncGenerator[FileStorage, None]:
    """Create file storage on a temporary log."""
    storage = FileStorage(storage_path, logger=logger)
    await storage.initialize()
    
    yield storage
    
    await storage.close()


@pytest.fixture
def short_code_generator():
    """Create short code generator."""
    return ShortCodeGenerator(code_bytes=6)


@pytest.fixture
async def service(file_storage, short_code_generator, logger) -> URLShortenerService:
    """Create service instance backed by file storage."""
    return URLShortenerService(
        storage=file_storage,
        base_url="http://localhost:8080",
        short_code_generator=short_code_generator,
        logger=logger,
    )


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/test",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]
