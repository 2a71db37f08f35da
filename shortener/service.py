"""Business logic service for URL shortener."""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Optional, List, Set, Tuple

from .shortcode import ShortCodeGenerator
from .storage.base import URLStorageBase
from .storage.models import Record
from .common.validators import is_valid_url
from .errors import ValidationError, NotFoundError, GoneError


@dataclass
class BatchRequestItem:
    """One URL of a batch shorten request."""

    original_url: str
    correlation_id: str = ""


@dataclass
class BatchResponseItem:
    """One result of a batch shorten request."""

    correlation_id: str
    short_url: str


class URLShortenerService:
    """Service layer for URL shortening business logic.

    The only component the HTTP layer talks to. Depends on the storage
    interface, never on a concrete backend.
    """

    def __init__(
        self,
        storage: URLStorageBase,
        base_url: str,
        short_code_generator: Optional[ShortCodeGenerator] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize URL shortener service.

        Args:
            storage: Storage backend instance
            base_url: Base URL used to build short URLs
            short_code_generator: Optional short code generator
            logger: Optional logger
        """
        self.storage = storage
        self.base_url = base_url
        self.generator = short_code_generator or ShortCodeGenerator()
        self.logger = logger or logging.getLogger(__name__)
        self._background_tasks: Set[asyncio.Task] = set()

    def get_hash(self, url: str) -> str:
        """Compute the short code for a URL."""
        return self.generator.generate_from_url(url)

    def short_url_for(self, short_code: str) -> str:
        """Build the complete short URL for a code.

        Args:
            short_code: The short code

        Returns:
            ``base_url`` and code joined by a single slash
        """
        return f"{self.base_url.rstrip('/')}/{short_code}"

    async def shorten_url(self, original_url: str, user_id: str = "") -> str:
        """Create a short URL.

        Shortening the same URL twice yields the same short URL.

        Args:
            original_url: The original long URL
            user_id: Owner identifier (empty for anonymous)

        Returns:
            The complete short URL

        Raises:
            ValidationError: If the URL is empty after trimming
            ShortCodeCollisionError: If the code already maps to another URL
            BackendError: If the storage backend fails
        """
        url = self._validated_url(original_url)
        short_code = self.get_hash(url)

        await self.storage.save(
            Record(short_code=short_code, original_url=url, user_id=user_id or "")
        )

        self.logger.info(f"Created short URL: {short_code} -> {url}")
        return self.short_url_for(short_code)

    async def shorten_url_batch(
        self,
        items: List[BatchRequestItem],
        user_id: str = "",
    ) -> List[BatchResponseItem]:
        """Create short URLs for a batch, all or nothing.

        Args:
            items: Batch items in caller order
            user_id: Owner identifier (empty for anonymous)

        Returns:
            Responses pairing each correlation id with its short URL, in input order

        Raises:
            ValidationError: If the batch is empty or any URL is empty
            ShortCodeCollisionError: If any code already maps to another URL
            BackendError: If the storage backend fails (nothing is stored)
        """
        if not items:
            raise ValidationError("Batch cannot be empty")

        records = []
        for index, item in enumerate(items):
            try:
                url = self._validated_url(item.original_url)
            except ValidationError as e:
                raise ValidationError(f"Batch item {index}: {e}") from e

            records.append(Record(
                short_code=self.get_hash(url),
                original_url=url,
                correlation_id=item.correlation_id or str(uuid.uuid4()),
                user_id=user_id or "",
            ))

        await self.storage.save_batch(records)

        self.logger.info(f"Created batch of {len(records)} short URLs")
        return [
            BatchResponseItem(
                correlation_id=record.correlation_id,
                short_url=self.short_url_for(record.short_code),
            )
            for record in records
        ]

    async def get_original_url(self, short_code: str) -> str:
        """Resolve a short code to its original URL.

        Args:
            short_code: The short code to lookup

        Returns:
            Original URL

        Raises:
            NotFoundError: If no record exists for the code
            GoneError: If the record is tombstoned
            BackendError: If the storage backend fails
        """
        record = await self.storage.get(short_code)

        if record is None:
            self.logger.warning(f"Short code not found: {short_code}")
            raise NotFoundError(f"Short URL with code '{short_code}' not found.")

        if record.is_deleted:
            self.logger.debug(f"Short code was deleted: {short_code}")
            raise GoneError(f"Short URL with code '{short_code}' was deleted.")

        self.logger.debug(f"Retrieved URL: {short_code} -> {record.original_url}")
        return record.original_url

    async def get_user_urls(self, user_id: str) -> List[Record]:
        """List every record owned by a user, including deleted ones.

        Args:
            user_id: Owner identifier

        Returns:
            List of records (empty when the user owns none)
        """
        return await self.storage.get_urls_by_user_id(user_id)

    async def delete_user_urls(self, short_codes: List[str], user_id: str) -> int:
        """Tombstone codes owned by a user; others are skipped silently.

        Args:
            short_codes: Codes to delete
            user_id: Owner identifier

        Returns:
            Number of records newly tombstoned
        """
        return await self.storage.delete_urls(list(short_codes), user_id)

    def submit_delete_user_urls(self, short_codes: List[str], user_id: str) -> asyncio.Task:
        """Schedule deletion in the background and return immediately.

        The caller is acknowledged before the deletion completes. Failures
        are logged and never reach the caller.

        Returns:
            The scheduled task
        """
        task = asyncio.create_task(self.delete_user_urls(short_codes, user_id))
        self._background_tasks.add(task)
        task.add_done_callback(self._on_delete_done)
        return task

    def _on_delete_done(self, task: asyncio.Task) -> None:
        self._background_tasks.discard(task)
        if task.cancelled():
            self.logger.warning("Background deletion was cancelled")
            return

        error = task.exception()
        if error is not None:
            self.logger.error(f"Background deletion failed: {error}", exc_info=error)

    async def ping(self) -> None:
        """Check storage connectivity.

        Raises:
            BackendError: If the storage backend is unreachable
        """
        await self.storage.ping()

    async def get_stats(self) -> Tuple[int, int]:
        """Get service statistics.

        Returns:
            Tuple of (stored URL count, distinct non-empty owner count)
        """
        return await self.storage.get_stats()

    async def close(self) -> None:
        """Wait for background deletions, then close the storage backend."""
        if self._background_tasks:
            self.logger.info(f"Waiting for {len(self._background_tasks)} background deletions")
            await asyncio.gather(*self._background_tasks, return_exceptions=True)
        await self.storage.close()

    @staticmethod
    def _validated_url(original_url: str) -> str:
        is_valid, error = is_valid_url(original_url)
        if not is_valid:
            raise ValidationError(error)
        return original_url.strip()
