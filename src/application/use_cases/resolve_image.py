from __future__ import annotations

import logging
from dataclasses import dataclass

from src.domain.errors import ImageNotFoundError, InvalidDimensionsError
from src.domain.services.resize_service import ResizeService
from src.infrastructure.database.repositories.image_repository import ImageRepository
from src.infrastructure.imaging.pillow_codec import PillowCodec
from src.infrastructure.storage.local_storage import LocalBlobStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServedImage:
    content: bytes
    content_type: str
    cache_control: str


@dataclass
class ResolveImageUseCase:
    storage: LocalBlobStore
    image_repo: ImageRepository
    codec: PillowCodec
    max_dimension: int
    variant_content_type: str
    cache_control: str

    def execute(self, image_id: str, width: int | None = None, height: int | None = None) -> ServedImage:
        """
        Serve an original or a cached-or-generated variant.

        Without dimensions the original is returned verbatim. With both
        dimensions the cached variant is served when present; otherwise it is
        rendered from the original, published atomically and returned.

        No lock guards generation: two cold requests for the same size may
        both render, and the later rename simply replaces an identical file.
        """
        if width is None and height is None:
            return self._serve_original(image_id)
        if width is None or height is None:
            raise InvalidDimensionsError("Both width and height are required")
        ResizeService.validate_dimensions(width, height, self.max_dimension)

        record = self.image_repo.get(image_id)
        if record is None:
            raise ImageNotFoundError(image_id)

        if self.storage.has_variant(image_id, width, height):
            try:
                content = self.storage.read_variant(image_id, width, height)
            except ImageNotFoundError:
                # removed between the check and the read (concurrent delete)
                logger.debug("Variant %s %dx%d vanished, regenerating", image_id, width, height)
            else:
                logger.debug("Cache hit %s %dx%d", image_id, width, height)
                return ServedImage(content, self.variant_content_type, self.cache_control)

        try:
            original = self.storage.read_original(image_id, record.extension)
        except ImageNotFoundError:
            logger.warning(
                "Index/filesystem divergence: original of %s is missing (%s)",
                image_id,
                self.storage.original_path(image_id, record.extension),
            )
            raise

        content = self.codec.render_variant(original, width, height)
        self.storage.write_variant(image_id, width, height, content)
        if self.image_repo.get(image_id) is None:
            # deleted while rendering; the purge already ran, so drop our copy
            self.storage.delete_variant(image_id, width, height)
            logger.info("Image %s was deleted during generation, discarded variant", image_id)
            raise ImageNotFoundError(image_id)
        logger.info("Generated variant %s %dx%d (%d bytes)", image_id, width, height, len(content))
        return ServedImage(content, self.variant_content_type, self.cache_control)

    def _serve_original(self, image_id: str) -> ServedImage:
        record = self.image_repo.get(image_id)
        if record is None:
            raise ImageNotFoundError(image_id)
        try:
            content = self.storage.read_original(image_id, record.extension)
        except ImageNotFoundError:
            logger.warning("Index/filesystem divergence: original of %s is missing", image_id)
            raise
        return ServedImage(content, record.mime_type, self.cache_control)
