from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_MIME_TYPES = ("image/jpeg", "image/png", "image/webp", "image/gif")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"Environment variable {name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    env: str = "development"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000

    storage_path: Path = Path("./storage")
    max_file_size: int = 50 * 1024 * 1024  # 50MB
    allowed_mime_types: tuple[str, ...] = DEFAULT_MIME_TYPES

    # Variants are always WebP; only the quality is tunable
    max_dimension: int = 5000
    variant_quality: int = 85
    variant_format: str = field(default="WEBP", init=False)
    variant_content_type: str = field(default="image/webp", init=False)
    variant_extension: str = field(default=".webp", init=False)

    cache_max_age: int = 31536000  # 1 year

    api_key: str | None = None
    auth_disabled: bool = False
    supabase_url: str | None = None
    supabase_anon_key: str | None = None

    @property
    def originals_path(self) -> Path:
        return self.storage_path / "originals"

    @property
    def cache_path(self) -> Path:
        return self.storage_path / "cache"

    @property
    def metadata_path(self) -> Path:
        return self.storage_path / "metadata.json"

    @property
    def cache_control(self) -> str:
        return f"public, max-age={self.cache_max_age}"


def get_settings() -> Settings:
    """Build settings from the environment. Cheap enough to call per request."""
    mime_raw = os.getenv("ALLOWED_MIME_TYPES")
    mime_types = (
        tuple(m.strip().lower() for m in mime_raw.split(",") if m.strip())
        if mime_raw
        else DEFAULT_MIME_TYPES
    )
    env = os.getenv("ENV", "development")
    return Settings(
        env=env,
        log_level=os.getenv("LOG_LEVEL", "DEBUG" if env == "development" else "INFO").upper(),
        host=os.getenv("HOST", "0.0.0.0"),
        port=_env_int("PORT", 3000),
        storage_path=Path(os.getenv("STORAGE_PATH", "./storage")),
        max_file_size=_env_int("MAX_FILE_SIZE", 50 * 1024 * 1024),
        allowed_mime_types=mime_types,
        max_dimension=_env_int("MAX_DIMENSION", 5000),
        variant_quality=_env_int("VARIANT_QUALITY", 85),
        cache_max_age=_env_int("CACHE_MAX_AGE", 31536000),
        api_key=os.getenv("API_KEY") or None,
        auth_disabled=os.getenv("AUTH_DISABLED", "0") == "1",
        supabase_url=os.getenv("SUPABASE_URL") or None,
        supabase_anon_key=os.getenv("SUPABASE_ANON_KEY") or None,
    )
