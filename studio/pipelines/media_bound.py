"""Create and delete entities that own an optional media attachment.

Projects, posts and team members each own at most one file. The file is
written before the record that points at it, and removed before that record
is deleted, so a record never outlives its file without a cleanup attempt.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Generic, Mapping

from studio.errors import StudioError
from studio.media import MediaStore
from studio.store import EntityStore, ModelT

logger = logging.getLogger(__name__)


@dataclass
class Attachment:
    """An uploaded file as received from the client."""
    filename: str
    data: bytes


class MediaBoundEntityManager(Generic[ModelT]):
    """Keeps an entity record and its attachment file in step."""

    def __init__(self, store: EntityStore[ModelT], media: MediaStore):
        self.store = store
        self.media = media

    async def create_with_media(
        self,
        fields: Mapping[str, Any],
        attachment: Attachment | None = None,
    ) -> ModelT:
        """Store the attachment (if any), then create the record pointing at it.

        Args:
            fields: Validated entity fields (without ``image_ref``)
            attachment: Optional uploaded file

        Returns:
            The created record

        Raises:
            ValidationError: bad fields or unacceptable file
            StorageIOError: the file could not be written
        """
        image_ref = None
        if attachment is not None:
            image_ref = await self.media.store(attachment.data, attachment.filename)

        try:
            record = await self.store.create({**fields, "image_ref": image_ref})
        except Exception:
            if image_ref:
                await self._discard(image_ref)
            raise

        logger.info(f"Created {self.store.kind} {record.id} (image={image_ref or 'none'})")
        return record

    async def _discard(self, image_ref: str) -> None:
        try:
            await self.media.delete(image_ref)
        except StudioError as e:
            # Orphaned file; reclaimable by a sweep
            logger.warning(f"Could not remove orphaned media {image_ref}: {e}")

    async def delete_with_media(self, entity_id: str) -> None:
        """Delete the attachment, then the record.

        A missing file is ignored. Any other file error aborts the
        operation and leaves the record in place.

        Raises:
            NotFoundError: unknown id
            StorageIOError: the file exists but could not be removed
        """
        record = await self.store.get(entity_id)
        if record.image_ref:
            await self.media.delete(record.image_ref)
        await self.store.delete(entity_id)
        logger.info(f"Deleted {self.store.kind} {entity_id}")
