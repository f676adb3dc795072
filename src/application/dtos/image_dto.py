from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from src.domain.entities.image import ImageRecord


class ImageMetadata(BaseModel):
    """Metadata of a stored original image."""
    id: str = Field(..., description="Opaque unique identifier of the image", example="3f2a9c0e6b8d4e1fa7c5d2b9e0f41a6c")
    original_name: str = Field(..., description="Filename supplied at upload (not unique)", example="photo.jpg")
    mime_type: str = Field(..., description="Content type declared at upload", example="image/jpeg")
    size: int = Field(..., description="Size of the original file in bytes", example=2048576, ge=0)
    width: int = Field(..., description="Intrinsic width in pixels", example=1920, gt=0)
    height: int = Field(..., description="Intrinsic height in pixels", example=1080, gt=0)
    format: str = Field(..., description="Codec format detected when decoding the original", example="jpeg")
    created_at: datetime = Field(..., description="ISO timestamp of the upload")
    extension: str = Field(..., description="Suffix of the stored original", example=".jpg")
    url: str = Field(..., description="Path serving the original", example="/images/3f2a9c0e6b8d4e1fa7c5d2b9e0f41a6c")
    thumbnail: str = Field(..., description="Path serving a 200x200 variant", example="/images/3f2a9c0e6b8d4e1fa7c5d2b9e0f41a6c/200/200")

    @classmethod
    def from_record(cls, record: ImageRecord) -> "ImageMetadata":
        return cls(
            id=record.id,
            original_name=record.original_name,
            mime_type=record.mime_type,
            size=record.size,
            width=record.width,
            height=record.height,
            format=record.format,
            created_at=record.created_at,
            extension=record.extension,
            url=record.url,
            thumbnail=record.thumbnail_url,
        )


class UploadImageResponse(BaseModel):
    """Response model for a successful upload."""
    success: bool = Field(True, description="Always true on success")
    image: ImageMetadata = Field(..., description="Metadata of the uploaded image")


class ListImagesResponse(BaseModel):
    """Response model for listing stored images."""
    count: int = Field(..., description="Number of images returned", example=12, ge=0)
    images: list[ImageMetadata] = Field(..., description="Image metadata, newest first")


class DeleteImageResponse(BaseModel):
    """Response model for image deletion."""
    ok: bool = Field(True, description="Indicates whether the deletion completed")
    message: str = Field("Image deleted", description="Human readable outcome")
    undeleted_files: int = Field(0, description="Number of files that could not be removed", ge=0)
