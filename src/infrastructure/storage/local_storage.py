from __future__ import annotations

import logging
from pathlib import Path

from src.domain.errors import ImageNotFoundError, StorageIOError
from src.domain.services.resize_service import ResizeService
from src.infrastructure.storage.atomic import atomic_write_bytes

logger = logging.getLogger(__name__)


class LocalBlobStore:
    """Filesystem storage for originals and cached variants.

    Layout::

        <originals_dir>/<identity><extension>      one per image, write-once
        <cache_dir>/<identity>_<w>x<h><variant_ext>  one per requested size

    Writes are published atomically (temp file + rename), so a concurrent
    reader never sees a truncated blob.
    """

    def __init__(self, originals_dir: Path, cache_dir: Path, variant_extension: str = ".webp") -> None:
        self.originals_dir = Path(originals_dir)
        self.cache_dir = Path(cache_dir)
        self.variant_extension = variant_extension
        self.originals_dir.mkdir(parents=True, exist_ok=True)
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    # -- originals -----------------------------------------------------------------

    def original_path(self, image_id: str, extension: str) -> Path:
        return self.originals_dir / f"{image_id}{extension}"

    def write_original(self, image_id: str, extension: str, data: bytes) -> Path:
        path = self.original_path(image_id, extension)
        try:
            atomic_write_bytes(path, data)
        except OSError as exc:
            logger.error("Writing original %s failed: %s", path, exc)
            raise StorageIOError(f"Could not store original {image_id}") from exc
        return path

    def read_original(self, image_id: str, extension: str) -> bytes:
        path = self.original_path(image_id, extension)
        try:
            return path.read_bytes()
        except FileNotFoundError as exc:
            raise ImageNotFoundError(image_id, ImageNotFoundError.ORIGINAL_MISSING) from exc
        except OSError as exc:
            logger.error("Reading original %s failed: %s", path, exc)
            raise StorageIOError(f"Could not read original {image_id}") from exc

    def has_original(self, image_id: str, extension: str) -> bool:
        return self.original_path(image_id, extension).is_file()

    def delete_original(self, image_id: str, extension: str) -> list[Path]:
        """Remove the original. Returns the paths that could not be removed."""
        path = self.original_path(image_id, extension)
        try:
            path.unlink()
        except FileNotFoundError:
            return []
        except OSError as exc:
            logger.warning("Could not delete original file %s: %s", path, exc)
            return [path]
        return []

    # -- variants ------------------------------------------------------------------

    def variant_path(self, image_id: str, width: int, height: int) -> Path:
        key = ResizeService.variant_key(image_id, width, height)
        return self.cache_dir / f"{key}{self.variant_extension}"

    def has_variant(self, image_id: str, width: int, height: int) -> bool:
        return self.variant_path(image_id, width, height).is_file()

    def read_variant(self, image_id: str, width: int, height: int) -> bytes:
        path = self.variant_path(image_id, width, height)
        try:
            return path.read_bytes()
        except FileNotFoundError as exc:
            raise ImageNotFoundError(image_id, ImageNotFoundError.BLOB_MISSING) from exc
        except OSError as exc:
            logger.error("Reading variant %s failed: %s", path, exc)
            raise StorageIOError(f"Could not read variant of {image_id}") from exc

    def write_variant(self, image_id: str, width: int, height: int, data: bytes) -> Path:
        path = self.variant_path(image_id, width, height)
        try:
            atomic_write_bytes(path, data)
        except OSError as exc:
            logger.error("Writing variant %s failed: %s", path, exc)
            raise StorageIOError(f"Could not store variant of {image_id}") from exc
        return path

    def delete_variant(self, image_id: str, width: int, height: int) -> list[Path]:
        path = self.variant_path(image_id, width, height)
        try:
            path.unlink()
        except FileNotFoundError:
            return []
        except OSError as exc:
            logger.warning("Could not delete variant %s: %s", path, exc)
            return [path]
        return []

    def list_variants(self, image_id: str) -> list[Path]:
        """All cache entries of one image, including in-flight temp files."""
        prefixes = (f"{image_id}_", f".{image_id}_")
        try:
            return sorted(p for p in self.cache_dir.iterdir() if p.name.startswith(prefixes))
        except FileNotFoundError:
            return []

    def delete_all_variants(self, image_id: str) -> list[Path]:
        """Best-effort purge of every cached variant. Returns undeletable paths."""
        failed: list[Path] = []
        try:
            candidates = self.list_variants(image_id)
        except OSError as exc:
            logger.warning("Could not list cache files for %s: %s", image_id, exc)
            return [self.cache_dir]
        for path in candidates:
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as exc:
                logger.warning("Cache delete warning for %s: %s", path, exc)
                failed.append(path)
        return failed
