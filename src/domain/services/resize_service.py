from __future__ import annotations

from src.domain.errors import InvalidDimensionsError


class ResizeService:
    """Pure geometry and naming rules for derived variants.

    A variant is fully determined by ``(identity, width, height)``; nothing else
    feeds into its storage key, so a cached blob can always be reproduced from
    the (immutable) original.
    """

    @staticmethod
    def validate_dimensions(width: int, height: int, max_dimension: int) -> None:
        if width <= 0 or height <= 0 or width > max_dimension or height > max_dimension:
            raise InvalidDimensionsError(
                f"Invalid dimensions. Max: {max_dimension}x{max_dimension}"
            )

    @staticmethod
    def parse_dimension(value: str | int, max_dimension: int) -> int:
        try:
            number = int(value)
        except (TypeError, ValueError) as exc:
            raise InvalidDimensionsError(
                f"Invalid dimensions. Max: {max_dimension}x{max_dimension}"
            ) from exc
        return number

    # Key: "<identity>_<width>x<height>", e.g. "3f2a..._100x100"
    @staticmethod
    def variant_key(image_id: str, width: int, height: int) -> str:
        return f"{image_id}_{int(width)}x{int(height)}"

    # Fit inside (width, height), keep aspect ratio, never enlarge.
    @staticmethod
    def fit_inside(
        original_width: int, original_height: int, width: int, height: int
    ) -> tuple[int, int]:
        if original_width <= width and original_height <= height:
            return original_width, original_height
        if width * original_height <= height * original_width:
            # width is the limiting side
            new_w = width
            new_h = (2 * original_height * width + original_width) // (2 * original_width)
        else:
            new_h = height
            new_w = (2 * original_width * height + original_height) // (2 * original_height)
        return max(1, new_w), max(1, new_h)
