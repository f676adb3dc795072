from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from src.domain.errors import DecodeFailureError
from src.domain.services.resize_service import ResizeService

# Modes whose alpha channel must survive the re-encode
_ALPHA_MODES = {"RGBA", "LA", "PA", "RGBa"}


@dataclass
class ImageProbe:
    width: int
    height: int
    format: str  # lower-case Pillow format name, e.g. "png"


class PillowCodec:
    """Decode / resize / encode on top of Pillow."""

    def __init__(self, output_format: str = "WEBP", quality: int = 85) -> None:
        self.output_format = output_format
        self.quality = quality

    def _open(self, data: bytes) -> Image.Image:
        try:
            img = Image.open(BytesIO(data))
            img.load()
        except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as exc:
            raise DecodeFailureError(f"Unsupported or corrupt image: {exc}") from exc
        return img

    def probe(self, data: bytes) -> ImageProbe:
        img = self._open(data)
        fmt = (img.format or "").lower()
        return ImageProbe(width=img.width, height=img.height, format=fmt)

    def render_variant(self, data: bytes, width: int, height: int) -> bytes:
        """Fit ``data`` inside ``width`` x ``height`` (no enlargement) and re-encode."""
        img = self._open(data)
        size = ResizeService.fit_inside(img.width, img.height, width, height)

        has_alpha = img.mode in _ALPHA_MODES or (img.mode == "P" and "transparency" in img.info)
        target_mode = "RGBA" if has_alpha else "RGB"
        if img.mode != target_mode:
            img = img.convert(target_mode)
        if size != img.size:
            img = img.resize(size, Image.Resampling.LANCZOS)

        buf = BytesIO()
        try:
            img.save(buf, format=self.output_format, quality=self.quality)
        except (OSError, ValueError) as exc:
            raise DecodeFailureError(f"Encoding variant failed: {exc}") from exc
        return buf.getvalue()
