"""Local-disk storage for uploaded media attachments.

A reference is the bare file name inside ``MediaSettings.root_dir``; it is
served read-only under ``MediaSettings.url_prefix``.
"""
from __future__ import annotations

import asyncio
import logging
import os
import time
from pathlib import Path, PurePath
from uuid import uuid4

import aiofiles
import aiofiles.os

from .config import MediaSettings
from .errors import StorageIOError, ValidationError

logger = logging.getLogger(__name__)


class MediaStore:
    """Stores and removes attachment files under a single directory."""

    def __init__(self, config: MediaSettings):
        self.config = config
        self.root = Path(config.root_dir)
        self._allowed = {ext.lower() for ext in config.allowed_extensions}

    def open(self) -> None:
        """Create the media directory if it is missing."""
        self.root.mkdir(parents=True, exist_ok=True)
        logger.info(f"Media root: {self.root.resolve()}")

    def extension_for(self, filename: str) -> str:
        ext = PurePath(filename or "").suffix.lower()
        if not ext:
            raise ValidationError("Uploaded file has no extension")
        if ext not in self._allowed:
            raise ValidationError(
                f"Unsupported file type '{ext}'. Allowed: {', '.join(sorted(self._allowed))}"
            )
        return ext

    def new_reference(self, ext: str) -> str:
        # Millisecond timestamp keeps names sortable; the suffix rules out collisions
        return f"{int(time.time() * 1000)}-{uuid4().hex[:8]}{ext}"

    def path_for(self, reference: str) -> Path:
        if not reference or PurePath(reference).name != reference or reference.startswith("."):
            raise StorageIOError(f"Invalid media reference: {reference!r}")
        return self.root / reference

    def url_for(self, reference: str | None) -> str | None:
        if not reference:
            return None
        return f"{self.config.url_prefix.rstrip('/')}/{reference}"

    def exists(self, reference: str) -> bool:
        return self.path_for(reference).is_file()

    async def store(self, data: bytes, original_filename: str) -> str:
        """Write ``data`` durably and return its reference.

        Raises:
            ValidationError: extension not allowed, empty or oversized file
            StorageIOError: write failed or timed out
        """
        ext = self.extension_for(original_filename)
        if not data:
            raise ValidationError("Uploaded file is empty")
        if len(data) > self.config.max_bytes:
            raise ValidationError(f"Uploaded file exceeds {self.config.max_bytes} bytes")

        reference = self.new_reference(ext)
        path = self.path_for(reference)
        try:
            await asyncio.wait_for(self._write(path, data), timeout=self.config.io_timeout)
        except asyncio.TimeoutError as e:
            raise StorageIOError(f"Timed out writing {reference}") from e
        except OSError as e:
            logger.error(f"Failed to write media {reference}: {e}")
            raise StorageIOError(f"Could not store {original_filename}: {e.strerror or e}") from e

        logger.info(f"Stored media {reference} ({len(data)} bytes)")
        return reference

    async def _write(self, path: Path, data: bytes) -> None:
        async with aiofiles.open(path, "wb") as f:
            await f.write(data)
            await f.flush()
            await asyncio.to_thread(os.fsync, f.fileno())

    async def delete(self, reference: str) -> None:
        """Remove a stored file. A file that is already gone is not an error."""
        path = self.path_for(reference)
        try:
            await asyncio.wait_for(aiofiles.os.remove(path), timeout=self.config.io_timeout)
        except FileNotFoundError:
            logger.debug(f"Media {reference} already absent")
            return
        except asyncio.TimeoutError as e:
            raise StorageIOError(f"Timed out deleting {reference}") from e
        except OSError as e:
            logger.error(f"Failed to delete media {reference}: {e}")
            raise StorageIOError(f"Could not delete {reference}: {e.strerror or e}") from e

        logger.info(f"Deleted media {reference}")
