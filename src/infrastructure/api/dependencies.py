from __future__ import annotations

import threading
from pathlib import Path
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Query, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.application.use_cases.delete_image import DeleteImageUseCase
from src.application.use_cases.resolve_image import ResolveImageUseCase
from src.application.use_cases.upload_image import UploadImageUseCase
from src.infrastructure.auth.auth_adapter import AuthAdapter, UserInfo
from src.infrastructure.config import Settings, get_settings
from src.infrastructure.database.repositories.image_repository import ImageRepository
from src.infrastructure.imaging.pillow_codec import PillowCodec
from src.infrastructure.storage.local_storage import LocalBlobStore

_bearer_scheme = HTTPBearer(auto_error=False)

# One repository per index file: its lock must be shared by every request.
_REPOSITORIES: dict[Path, ImageRepository] = {}
_REPOSITORIES_LOCK = threading.Lock()


def get_auth_adapter(settings: Annotated[Settings, Depends(get_settings)]) -> AuthAdapter:
    return AuthAdapter(settings)


def get_current_user(
    auth: Annotated[AuthAdapter, Depends(get_auth_adapter)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(_bearer_scheme)],
    x_api_key: Annotated[str | None, Header()] = None,
    api_key: Annotated[str | None, Query(alias="apiKey", include_in_schema=False)] = None,
) -> UserInfo:
    token = None
    if credentials and credentials.scheme and credentials.scheme.lower() == "bearer":
        token = credentials.credentials
    elif x_api_key:
        token = x_api_key
    elif api_key:
        # legacy clients pass the key in the query string
        token = api_key
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")
    try:
        return auth.validate_token(token)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc))


def get_image_repo(settings: Annotated[Settings, Depends(get_settings)]) -> ImageRepository:
    path = settings.metadata_path.resolve()
    with _REPOSITORIES_LOCK:
        repo = _REPOSITORIES.get(path)
        if repo is None:
            repo = ImageRepository(path)
            _REPOSITORIES[path] = repo
    return repo


def get_storage(settings: Annotated[Settings, Depends(get_settings)]) -> LocalBlobStore:
    return LocalBlobStore(settings.originals_path, settings.cache_path, settings.variant_extension)


def get_codec(settings: Annotated[Settings, Depends(get_settings)]) -> PillowCodec:
    return PillowCodec(output_format=settings.variant_format, quality=settings.variant_quality)


def get_upload_use_case(
    settings: Annotated[Settings, Depends(get_settings)],
    storage: Annotated[LocalBlobStore, Depends(get_storage)],
    images: Annotated[ImageRepository, Depends(get_image_repo)],
    codec: Annotated[PillowCodec, Depends(get_codec)],
) -> UploadImageUseCase:
    return UploadImageUseCase(
        storage=storage,
        image_repo=images,
        codec=codec,
        allowed_mime_types=settings.allowed_mime_types,
        max_file_size=settings.max_file_size,
    )


def get_resolve_use_case(
    settings: Annotated[Settings, Depends(get_settings)],
    storage: Annotated[LocalBlobStore, Depends(get_storage)],
    images: Annotated[ImageRepository, Depends(get_image_repo)],
    codec: Annotated[PillowCodec, Depends(get_codec)],
) -> ResolveImageUseCase:
    return ResolveImageUseCase(
        storage=storage,
        image_repo=images,
        codec=codec,
        max_dimension=settings.max_dimension,
        variant_content_type=settings.variant_content_type,
        cache_control=settings.cache_control,
    )


def get_delete_use_case(
    storage: Annotated[LocalBlobStore, Depends(get_storage)],
    images: Annotated[ImageRepository, Depends(get_image_repo)],
) -> DeleteImageUseCase:
    return DeleteImageUseCase(storage=storage, image_repo=images)
