from __future__ import annotations

from fastapi import APIRouter, Depends, File, UploadFile, status

from src.application.dtos.image_dto import (
    DeleteImageResponse,
    ImageMetadata,
    ListImagesResponse,
    UploadImageResponse,
)
from src.application.use_cases.delete_image import DeleteImageUseCase
from src.application.use_cases.upload_image import UploadImageUseCase
from src.domain.errors import ImageNotFoundError
from src.infrastructure.api.dependencies import (
    get_current_user,
    get_delete_use_case,
    get_image_repo,
    get_upload_use_case,
)
from src.infrastructure.database.repositories.image_repository import ImageRepository

router = APIRouter(
    prefix="/api",
    tags=["Image Management"],
    dependencies=[Depends(get_current_user)],
    responses={
        401: {"description": "Unauthorized - Invalid or missing authentication token"},
        404: {"description": "Not Found - Image does not exist"},
        422: {"description": "Validation Error - Invalid request format"},
    },
)


@router.post(
    "/upload",
    response_model=UploadImageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload Image",
    description="""
    Upload a new original image (multipart field `image`).

    **Supported types**: configured allow-list, by default JPEG, PNG, WEBP, GIF
    **Maximum file size**: MAX_FILE_SIZE, 50MB by default
    **Authentication required**: Yes

    Pixel dimensions and format are read from the decoded file, never from the
    client. The original is stored byte-for-byte and never modified afterwards.
    """,
    response_description="Metadata of the stored image",
    responses={
        400: {"description": "Bad Request - Unsupported file type or file too large"},
        500: {"description": "Internal Server Error - File could not be decoded or stored"},
    },
)
def upload_image(
    image: UploadFile = File(..., description="Image file to upload"),
    uc: UploadImageUseCase = Depends(get_upload_use_case),
):
    """Store a new original image."""
    # one byte past the limit is enough to reject oversized uploads
    data = image.file.read(uc.max_file_size + 1)
    record = uc.execute(
        data=data,
        original_name=image.filename or "upload",
        mime_type=image.content_type or "",
    )
    return UploadImageResponse(image=ImageMetadata.from_record(record))


@router.get(
    "/images",
    response_model=ListImagesResponse,
    summary="List Images",
    description="""
    List every stored image, newest first, with the paths serving the
    original and a 200x200 thumbnail.

    **Authentication required**: Yes
    """,
    response_description="All stored images",
)
def list_images(images: ImageRepository = Depends(get_image_repo)):
    """Get all stored images."""
    items = sorted(images.list(), key=lambda i: i.created_at, reverse=True)
    payload = [ImageMetadata.from_record(it) for it in items]
    return ListImagesResponse(count=len(payload), images=payload)


@router.get(
    "/images/{image_id}",
    response_model=ImageMetadata,
    summary="Get Image Metadata",
    description="""
    Retrieve the stored metadata of one image.

    **Authentication required**: Yes
    """,
    response_description="Metadata of the requested image",
)
def get_image(image_id: str, images: ImageRepository = Depends(get_image_repo)):
    """Get metadata for a specific image."""
    record = images.get(image_id)
    if record is None:
        raise ImageNotFoundError(image_id)
    return ImageMetadata.from_record(record)


@router.delete(
    "/images/{image_id}",
    response_model=DeleteImageResponse,
    summary="Delete Image",
    description="""
    Permanently delete an image.

    **This operation will:**
    - Remove the original file
    - Remove every cached resized variant
    - Remove the metadata entry
    - Cannot be undone

    Files that cannot be removed are logged and counted in the response; the
    metadata entry is removed regardless.

    **Authentication required**: Yes
    """,
    response_description="Outcome of the deletion",
)
def delete_image(image_id: str, uc: DeleteImageUseCase = Depends(get_delete_use_case)):
    """Permanently delete an image and its cached variants."""
    failed = uc.execute(image_id)
    return DeleteImageResponse(ok=True, message="Image deleted", undeleted_files=len(failed))
