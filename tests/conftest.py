import io
import os
import sys
import tempfile
from pathlib import Path

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

# Ensure project root is on sys.path so 'src' is importable during tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("AUTH_DISABLED", "1")
os.environ.setdefault("STORAGE_PATH", tempfile.mkdtemp(prefix="imgcache-tests-"))
os.environ.setdefault("LOG_LEVEL", "WARNING")


def encode_image(w=4, h=4, fmt="PNG") -> bytes:
    # horizontal gradient so resampling has something to do
    ramp = np.linspace(0, 255, w, dtype=np.uint8)
    arr = np.zeros((h, w, 3), dtype=np.uint8)
    arr[:, :, 0] = ramp
    arr[:, :, 1] = 64
    arr[:, :, 2] = 255 - ramp
    img = Image.fromarray(arr)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture()
def make_image():
    return encode_image


@pytest.fixture(scope="session")
def client() -> TestClient:
    # lazy import after env configured
    from src.main import create_app

    app = create_app()
    return TestClient(app)


@pytest.fixture()
def auth_header() -> dict[str, str]:
    # any token is accepted in disabled mode
    return {"Authorization": "Bearer test-token"}


@pytest.fixture()
def blob_store(tmp_path):
    from src.infrastructure.storage.local_storage import LocalBlobStore

    return LocalBlobStore(tmp_path / "originals", tmp_path / "cache")


@pytest.fixture()
def image_repo(tmp_path):
    from src.infrastructure.database.repositories.image_repository import ImageRepository

    return ImageRepository(tmp_path / "metadata.json")


@pytest.fixture()
def codec():
    from src.infrastructure.imaging.pillow_codec import PillowCodec

    return PillowCodec(output_format="WEBP", quality=85)


@pytest.fixture()
def upload_uc(blob_store, image_repo, codec):
    from src.application.use_cases.upload_image import UploadImageUseCase

    return UploadImageUseCase(
        storage=blob_store,
        image_repo=image_repo,
        codec=codec,
        allowed_mime_types=("image/jpeg", "image/png", "image/webp", "image/gif"),
        max_file_size=1024 * 1024,
    )


@pytest.fixture()
def resolve_uc(blob_store, image_repo, codec):
    from src.application.use_cases.resolve_image import ResolveImageUseCase

    return ResolveImageUseCase(
        storage=blob_store,
        image_repo=image_repo,
        codec=codec,
        max_dimension=5000,
        variant_content_type="image/webp",
        cache_control="public, max-age=31536000",
    )


@pytest.fixture()
def delete_uc(blob_store, image_repo):
    from src.application.use_cases.delete_image import DeleteImageUseCase

    return DeleteImageUseCase(storage=blob_store, image_repo=image_repo)
