"""Error taxonomy shared by the image use cases.

Every error carries a stable public ``message`` that is safe to return to a
client and the HTTP status the transport layer should answer with. Internal
details (paths, OS errors) go to the log and the exception chain only.
"""
from __future__ import annotations


class ImageServiceError(Exception):
    status_code = 500
    message = "Internal error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.message)
        self.detail = detail or self.message


class ImageNotFoundError(ImageServiceError):
    status_code = 404
    message = "Image not found"

    UNKNOWN_IDENTITY = "unknown_identity"
    ORIGINAL_MISSING = "original_missing"
    BLOB_MISSING = "blob_missing"

    def __init__(self, image_id: str, reason: str = UNKNOWN_IDENTITY) -> None:
        super().__init__("Image file not found" if reason == self.ORIGINAL_MISSING else None)
        self.image_id = image_id
        self.reason = reason


class InvalidDimensionsError(ImageServiceError):
    status_code = 400
    message = "Invalid dimensions"


class InvalidMediaTypeError(ImageServiceError):
    status_code = 400
    message = "Invalid file type"


class PayloadTooLargeError(ImageServiceError):
    status_code = 400
    message = "File too large"


class DecodeFailureError(ImageServiceError):
    status_code = 500
    message = "Image could not be decoded"


class StorageIOError(ImageServiceError):
    status_code = 500
    message = "Storage failure"
