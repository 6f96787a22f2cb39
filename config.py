"""
Site configuration loaded from environment variables.
"""
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Manifest sources (Pinterest wins over the local directory when set)
    public_pinterest_url: Optional[str] = None
    google_api_key: Optional[str] = None
    google_drive_folder_id: Optional[str] = None

    # Netlify deploy status
    netlify_site_id: Optional[str] = None
    netlify_api_token: Optional[str] = None

    # Static site layout
    public_dir: str = "public"
    images_dir: Optional[str] = None  # defaults to <public_dir>/images
    manifest_path: Optional[str] = None  # defaults to <public_dir>/images-list.json
    image_base_path: str = "/images"

    # Timeouts
    api_timeout_seconds: int = 30

    # Drive download + resize
    drive_page_size: int = 200
    drive_max_dimension: int = 1600
    drive_jpeg_quality: int = 85


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_public_dir(settings: Optional[Settings] = None) -> Path:
    s = settings or get_settings()
    return Path(s.public_dir)


def get_images_dir(settings: Optional[Settings] = None) -> Path:
    s = settings or get_settings()
    if s.images_dir:
        return Path(s.images_dir)
    return get_public_dir(s) / "images"


def get_manifest_path(settings: Optional[Settings] = None) -> Path:
    """Where the generated images-list.json lives (served at /images-list.json)."""
    s = settings or get_settings()
    if s.manifest_path:
        return Path(s.manifest_path)
    return get_public_dir(s) / "images-list.json"
