from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any

from filelock import FileLock, Timeout

from src.domain.entities.image import ImageRecord
from src.domain.errors import StorageIOError
from src.infrastructure.storage.atomic import atomic_write_bytes

logger = logging.getLogger(__name__)


class ImageRepository:
    """Durable metadata index backed by a single JSON document.

    The document has the shape ``{"images": {<id>: {...record...}}}``. The
    whole document is rewritten atomically on every change and fsynced before
    ``put``/``remove`` return. Mutations hold a thread lock plus a sidecar file
    lock (``metadata.json.lock``) and re-read the document before changing it,
    so several processes or instances can share one index. Reads use an
    in-memory snapshot that is reloaded whenever the file on disk changes.
    """

    def __init__(self, path: Path, lock_timeout: float = 30.0) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._file_lock = FileLock(str(self.path) + ".lock", timeout=lock_timeout)
        self._signature: tuple[int, int, int] | None = None
        self._images: dict[str, ImageRecord] = {}
        self._refresh()

    def _row_to_entity(self, row: dict[str, Any]) -> ImageRecord:
        created_at = row["created_at"]
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        return ImageRecord(
            id=row["id"],
            original_name=row.get("original_name", ""),
            mime_type=row["mime_type"],
            size=int(row["size"]),
            width=int(row["width"]),
            height=int(row["height"]),
            format=row.get("format", ""),
            created_at=created_at,
            extension=row.get("extension", ""),
        )

    def _entity_to_row(self, record: ImageRecord) -> dict[str, Any]:
        row = asdict(record)
        row["created_at"] = record.created_at.isoformat()
        return row

    def _load(self) -> dict[str, ImageRecord]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise StorageIOError("Could not read metadata index") from exc
        try:
            document = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageIOError(f"Metadata index {self.path} is corrupt") from exc
        rows = document.get("images", {})
        return {image_id: self._row_to_entity(row) for image_id, row in rows.items()}

    def _persist(self, images: dict[str, ImageRecord]) -> None:
        document = {"images": {k: self._entity_to_row(v) for k, v in images.items()}}
        data = json.dumps(document, indent=2).encode("utf-8")
        try:
            atomic_write_bytes(self.path, data)
        except OSError as exc:
            logger.error("Persisting metadata index %s failed: %s", self.path, exc)
            raise StorageIOError("Could not write metadata index") from exc

    # (inode, mtime_ns, size): os.replace gives every rewrite a new inode
    def _stat_signature(self) -> tuple[int, int, int] | None:
        try:
            st = os.stat(self.path)
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageIOError("Could not stat metadata index") from exc
        return st.st_ino, st.st_mtime_ns, st.st_size

    def _refresh(self) -> dict[str, ImageRecord]:
        """Return the current snapshot, reloading it if another writer changed the file."""
        signature = self._stat_signature()
        if signature == self._signature:
            return self._images
        with self._lock:
            signature = self._stat_signature()
            if signature != self._signature:
                self._images = self._load()
                self._signature = signature
            return self._images

    def _mutate(self, change) -> bool:
        with self._lock:
            try:
                self._file_lock.acquire()
            except Timeout as exc:
                raise StorageIOError("Metadata index is locked by another writer") from exc
            try:
                images = self._load()
                changed = change(images)
                if changed:
                    self._persist(images)
                self._images = images
                self._signature = self._stat_signature()
            finally:
                self._file_lock.release()
        return changed

    def get(self, image_id: str) -> ImageRecord | None:
        return self._refresh().get(image_id)

    def list(self) -> list[ImageRecord]:
        # one snapshot: the dict is replaced, never mutated in place
        return list(self._refresh().values())

    def put(self, record: ImageRecord) -> ImageRecord:
        def apply(images: dict[str, ImageRecord]) -> bool:
            images[record.id] = record
            return True

        self._mutate(apply)
        return record

    def remove(self, image_id: str) -> bool:
        return self._mutate(lambda images: images.pop(image_id, None) is not None)
