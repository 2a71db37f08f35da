"""Append-only file storage backend for URL shortener.

The log holds one JSON object per line::

    {"short_code": "...", "original_url": "...", "correlation_id": "...", "user_id": "...", "is_deleted": false}

Every mutation (save, batch save, tombstone) is appended, flushed and fsynced
before the in-memory index changes. On startup the whole log is replayed in
order and the last line for a given short code wins, which is how upserts and
tombstones take effect without rewriting history.
"""

import os
import json
import asyncio
import logging
from pathlib import Path
from typing import Optional, List, Union

from .base import StorageState
from .memory import MemoryStorage
from .models import Record
from ..errors import BackendError


class FileStorage(MemoryStorage):
    """In-memory index backed by an append-only JSON-lines log.
    
    Appends go through an unbuffered file object, so bytes that failed to
    reach the file are never left queued in a userspace buffer.
    """

    name = "file"

    def __init__(
        self,
        file_path: Union[str, Path],
        logger: Optional[logging.Logger] = None,
        fsync: bool = True,
    ):
        """Open (or create) the log and rebuild the index from it.

        Args:
            file_path: Path of the append-only log file
            logger: Optional logger instance
            fsync: Whether to fsync after every append

        Raises:
            BackendError: If the log file cannot be opened or read
        """
        super().__init__(logger)
        self.state = StorageState.UNINITIALIZED
        self.file_path = Path(file_path)
        self.fsync = fsync

        try:
            if self.file_path.parent and not self.file_path.parent.exists():
                self.file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(self.file_path, "a+b", buffering=0)
        except OSError as e:
            raise BackendError(f"Can't open storage file {self.file_path}.") from e

        try:
            self._recover()
        except OSError as e:
            self._file.close()
            raise BackendError(f"Can't read storage file {self.file_path}.") from e

    def _recover(self) -> None:
        """Replay the log from the beginning into the in-memory index."""
        self.state = StorageState.RECOVERING
        self.logger.info(f"Recovering records from {self.file_path}")

        replayed = 0
        skipped = 0
        offset = 0
        last_good_offset = 0
        tail_incomplete = False
        tail_unterminated = False

        with open(self.file_path, "rb") as reader:
            for line_no, raw in enumerate(reader, start=1):
                offset += len(raw)
                complete = raw.endswith(b"\n")
                line = raw.strip()
                if not line:
                    last_good_offset = offset
                    continue

                try:
                    record = Record.from_dict(json.loads(line))
                except (ValueError, KeyError, TypeError) as e:
                    if not complete:
                        tail_incomplete = True
                        break
                    self.logger.warning(f"Skipping malformed line {line_no} in {self.file_path}: {e}")
                    skipped += 1
                    last_good_offset = offset
                    continue

                self._urls[record.short_code] = record
                replayed += 1
                last_good_offset = offset
                tail_unterminated = not complete

        if tail_incomplete:
            self.logger.warning(
                f"Discarding incomplete trailing entry in {self.file_path} at byte {last_good_offset}"
            )
            self._file.truncate(last_good_offset)
        elif tail_unterminated:
            # Valid entry without a trailing newline; terminate it before appending
            self._write_all(b"\n")

        self.state = StorageState.READY
        self.logger.info(
            f"Recovered {len(self._urls)} short codes from {replayed} log entries "
            f"({skipped} malformed lines skipped)"
        )

    async def _persist(self, records: List[Record]) -> None:
        """Append records to the log in a worker thread.

        Called with the storage lock held, so appends keep their order while
        the event loop stays free during the write and fsync.
        """
        payload = b"".join(
            json.dumps(record.to_dict(), ensure_ascii=False).encode("utf-8") + b"\n"
            for record in records
        )
        await asyncio.to_thread(self._append, payload, len(records))

    def _append(self, payload: bytes, count: int) -> None:
        """Write a payload durably or leave the log as it was.

        Args:
            payload: Complete JSON lines to append
            count: Number of entries in the payload (for error messages)

        Raises:
            BackendError: If the write or fsync fails; the log is truncated
                back to its previous length first
        """
        offset = None
        try:
            offset = self._file.seek(0, os.SEEK_END)
            self._write_all(payload)
            if self.fsync:
                os.fsync(self._file.fileno())
        except (OSError, ValueError) as e:
            if offset is not None:
                self._rollback(offset)
            raise BackendError(f"Can't append {count} entries to {self.file_path}.") from e

    def _write_all(self, data: bytes) -> None:
        """Write until every byte is accepted; unbuffered writes may be short."""
        view = memoryview(data)
        while view:
            written = self._file.write(view)
            view = view[written:]

    def _rollback(self, offset: int) -> None:
        """Truncate the log back to ``offset`` after a failed append.

        Args:
            offset: Length of the log before the append started
        """
        try:
            self._file.truncate(offset)
        except (OSError, ValueError) as e:
            self.logger.error(f"Failed to truncate {self.file_path} back to byte {offset}: {e}")

    async def close(self) -> None:
        """Close the log file."""
        async with self._lock:
            if not self._file.closed:
                self._file.close()
                self.logger.debug(f"Closed storage file {self.file_path}")
