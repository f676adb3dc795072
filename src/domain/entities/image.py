from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ImageRecord:
    id: str
    original_name: str  # as supplied by the uploader, cosmetic only
    mime_type: str
    size: int  # bytes
    width: int
    height: int
    format: str  # codec format detected by decoding, e.g. "png"
    created_at: datetime
    extension: str  # suffix of the original blob on disk, e.g. ".png"

    @property
    def content_type(self) -> str:
        return self.mime_type

    @property
    def url(self) -> str:
        return f"/images/{self.id}"

    @property
    def thumbnail_url(self) -> str:
        return f"/images/{self.id}/200/200"
