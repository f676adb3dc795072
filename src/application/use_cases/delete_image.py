from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from src.domain.errors import ImageNotFoundError
from src.infrastructure.database.repositories.image_repository import ImageRepository
from src.infrastructure.storage.local_storage import LocalBlobStore

logger = logging.getLogger(__name__)


@dataclass
class DeleteImageUseCase:
    storage: LocalBlobStore
    image_repo: ImageRepository

    def execute(self, image_id: str) -> list[Path]:
        """Delete an image's files and then its record.

        Files go first and the index entry last, so an interrupted delete
        leaves a record whose blobs are missing (served as 404) rather than
        untracked blobs. File errors are logged and returned; they never stop
        the record from being removed.
        """
        record = self.image_repo.get(image_id)
        if record is None:
            raise ImageNotFoundError(image_id)

        failed = self.storage.delete_original(image_id, record.extension)
        failed += self.storage.delete_all_variants(image_id)
        self.image_repo.remove(image_id)
        # a resolve that rendered before the removal may have published after the purge
        failed += [p for p in self.storage.delete_all_variants(image_id) if p not in failed]

        if failed:
            logger.warning("Deleted image %s with %d undeletable file(s): %s", image_id, len(failed), failed)
        else:
            logger.info("Deleted image %s", image_id)
        return failed
