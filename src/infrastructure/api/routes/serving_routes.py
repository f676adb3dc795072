from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from src.application.use_cases.resolve_image import ResolveImageUseCase, ServedImage
from src.domain.services.resize_service import ResizeService
from src.infrastructure.api.dependencies import get_resolve_use_case

router = APIRouter(
    prefix="/images",
    tags=["Image Delivery"],
    responses={
        404: {"description": "Not Found - Image does not exist"},
        200: {"content": {"image/*": {}}, "description": "Image file content"},
    },
)


def _to_response(served: ServedImage) -> Response:
    return Response(
        content=served.content,
        media_type=served.content_type,
        headers={"Cache-Control": served.cache_control},
    )


@router.get(
    "/{image_id}",
    summary="Serve Original",
    description="""
    Return the original exactly as uploaded, with its stored content type.

    **Authentication required**: No
    """,
    response_description="Binary image file data",
)
def serve_original(image_id: str, uc: ResolveImageUseCase = Depends(get_resolve_use_case)):
    """Serve the original bytes."""
    return _to_response(uc.execute(image_id))


@router.get(
    "/{image_id}/{width}/{height}",
    summary="Serve Resized Variant",
    description="""
    Return the image resized to fit inside `width` x `height`, keeping the
    aspect ratio and never enlarging beyond the original size. Variants are
    WebP encoded and generated once, then served from the cache.

    **Limits**: both dimensions must be positive integers up to MAX_DIMENSION (5000)
    **Authentication required**: No
    """,
    response_description="Binary WebP data",
    responses={400: {"description": "Bad Request - Invalid dimensions"}},
)
def serve_variant(
    image_id: str,
    width: str,
    height: str,
    uc: ResolveImageUseCase = Depends(get_resolve_use_case),
):
    """Serve a cached or freshly generated variant."""
    w = ResizeService.parse_dimension(width, uc.max_dimension)
    h = ResizeService.parse_dimension(height, uc.max_dimension)
    return _to_response(uc.execute(image_id, w, h))
