from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Callable

from src.domain.entities.image import ImageRecord
from src.domain.errors import (
    DecodeFailureError,
    InvalidMediaTypeError,
    PayloadTooLargeError,
    StorageIOError,
)
from src.domain.services.identity_service import allocate_identity
from src.infrastructure.database.repositories.image_repository import ImageRepository
from src.infrastructure.imaging.pillow_codec import PillowCodec
from src.infrastructure.storage.local_storage import LocalBlobStore

logger = logging.getLogger(__name__)

_SAFE_EXTENSION = re.compile(r"^\.[A-Za-z0-9]{1,10}$")
_FALLBACK_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
}


def extension_for(filename: str, mime_type: str) -> str:
    """Suffix used to name the original on disk, taken from the upload name."""
    ext = os.path.splitext(os.path.basename(filename or ""))[1]
    if _SAFE_EXTENSION.match(ext):
        return ext
    return _FALLBACK_EXTENSIONS.get(mime_type, "")


@dataclass
class UploadImageUseCase:
    storage: LocalBlobStore
    image_repo: ImageRepository
    codec: PillowCodec
    allowed_mime_types: tuple[str, ...]
    max_file_size: int
    id_factory: Callable[[], str] = allocate_identity

    def execute(self, data: bytes, original_name: str, mime_type: str) -> ImageRecord:
        """
        Commit an uploaded file as a new image.

        The original is written first, then decoded to learn its real pixel
        dimensions and format (client-declared values are never trusted), then
        the metadata record is stored. If anything after the blob write fails
        the blob is removed again, so no original exists without a record.
        """
        mime_type = (mime_type or "").lower()
        if mime_type not in self.allowed_mime_types:
            raise InvalidMediaTypeError(
                f"Invalid file type. Allowed: {', '.join(self.allowed_mime_types)}"
            )
        if len(data) > self.max_file_size:
            raise PayloadTooLargeError(
                f"File too large. Maximum size is {self.max_file_size // (1024 * 1024)}MB"
            )

        image_id = self.id_factory()
        ext = extension_for(original_name, mime_type)
        self.storage.write_original(image_id, ext, data)

        try:
            probe = self.codec.probe(data)
            record = ImageRecord(
                id=image_id,
                original_name=original_name,
                mime_type=mime_type,
                size=len(data),
                width=probe.width,
                height=probe.height,
                format=probe.format,
                created_at=datetime.now(UTC),
                extension=ext,
            )
            self.image_repo.put(record)
        except (DecodeFailureError, StorageIOError) as exc:
            logger.warning("Upload of %r rolled back (%s): %s", original_name, image_id, exc)
            leftovers = self.storage.delete_original(image_id, ext)
            if leftovers:
                logger.error("Rollback could not remove orphaned original(s): %s", leftovers)
            raise

        logger.info(
            "Stored image %s (%s, %dx%d, %d bytes)",
            image_id,
            record.format,
            record.width,
            record.height,
            record.size,
        )
        return record
