from pathlib import Path

import pytest

from src.infrastructure.config import get_settings


def test_defaults(monkeypatch):
    for name in ("STORAGE_PATH", "ALLOWED_MIME_TYPES", "MAX_DIMENSION", "CACHE_MAX_AGE", "API_KEY"):
        monkeypatch.delenv(name, raising=False)
    settings = get_settings()
    assert settings.storage_path == Path("./storage")
    assert settings.originals_path == Path("./storage/originals")
    assert settings.cache_path == Path("./storage/cache")
    assert settings.metadata_path == Path("./storage/metadata.json")
    assert settings.max_dimension == 5000
    assert settings.max_file_size == 50 * 1024 * 1024
    assert settings.allowed_mime_types == ("image/jpeg", "image/png", "image/webp", "image/gif")
    assert settings.cache_control == "public, max-age=31536000"
    assert settings.variant_content_type == "image/webp"
    assert settings.api_key is None


def test_overrides(monkeypatch):
    monkeypatch.setenv("ALLOWED_MIME_TYPES", "image/png, IMAGE/JPEG")
    monkeypatch.setenv("MAX_DIMENSION", "1200")
    monkeypatch.setenv("CACHE_MAX_AGE", "60")
    settings = get_settings()
    assert settings.allowed_mime_types == ("image/png", "image/jpeg")
    assert settings.max_dimension == 1200
    assert settings.cache_control == "public, max-age=60"


def test_bad_integer(monkeypatch):
    monkeypatch.setenv("MAX_DIMENSION", "lots")
    with pytest.raises(RuntimeError, match="MAX_DIMENSION"):
        get_settings()
