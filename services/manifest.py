"""
Manifest generation – writes images-list.json from the local images directory,
a Pinterest board or a Google Drive folder.
"""
import json
import logging
from pathlib import Path
from typing import List, Optional

from clients.drive_client import DriveClient, DriveError, resize_to_jpeg
from clients.pinterest_client import PinterestClient, PinterestError
from config import Settings, get_images_dir, get_manifest_path

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg"}


class ManifestError(Exception):
    pass


def list_local_images(images_dir: Path) -> List[str]:
    """File names in images_dir with an image extension. A missing directory yields []."""
    try:
        entries = sorted(images_dir.iterdir())
    except FileNotFoundError:
        logger.info("Images directory not found (%s). Creating empty list.", images_dir)
        return []
    return [p.name for p in entries if p.is_file() and p.suffix.lower() in IMAGE_EXTENSIONS]


def write_manifest(images: List[str], output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(images, indent=2), encoding="utf-8")
    return output_path


def fetch_pinterest_images(pinterest_url: str, client: Optional[PinterestClient] = None) -> List[str]:
    client = client or PinterestClient()
    images = client.fetch_images(pinterest_url)
    logger.info("Fetched %d image(s) from Pinterest", len(images))
    return images


def sync_drive_images(
    settings: Settings,
    client: Optional[DriveClient] = None,
    images_dir: Optional[Path] = None,
) -> List[str]:
    """
    Download every image in the configured Drive folder into the images directory,
    resized to fit drive_max_dimension and stored as JPEG. Files that fail to
    download or decode are skipped. Returns the saved file names.
    """
    if not settings.google_drive_folder_id:
        raise DriveError("GOOGLE_DRIVE_FOLDER_ID is not set")
    client = client or DriveClient(
        api_key=settings.google_api_key,
        timeout_seconds=settings.api_timeout_seconds,
        page_size=settings.drive_page_size,
    )
    images_dir = images_dir or get_images_dir(settings)
    images_dir.mkdir(parents=True, exist_ok=True)

    saved: List[str] = []
    used_names = set()
    for file in client.list_images(settings.google_drive_folder_id):
        name = f"{file.stem}.jpg"
        if name in used_names:
            name = f"{file.stem}-{file.id}.jpg"
        try:
            content = client.download(file)
            data = resize_to_jpeg(content, settings.drive_max_dimension, settings.drive_jpeg_quality)
            (images_dir / name).write_bytes(data)
        except (DriveError, OSError) as e:
            logger.warning("Skipping %s: %s", file.name, e)
            continue
        used_names.add(name)
        saved.append(name)
        logger.info("Saved %s", name)
    logger.info("Saved %d image(s) from Google Drive", len(saved))
    return saved


def generate_image_list(
    settings: Settings,
    pinterest_client: Optional[PinterestClient] = None,
) -> List[str]:
    """Build the manifest from Pinterest when PUBLIC_PINTEREST_URL is set, else from local files."""
    try:
        if settings.public_pinterest_url:
            images = fetch_pinterest_images(settings.public_pinterest_url, pinterest_client)
        else:
            images = list_local_images(get_images_dir(settings))
            logger.info("Found %d local image(s)", len(images))
        output_path = write_manifest(images, get_manifest_path(settings))
    except (PinterestError, OSError) as e:
        logger.error("Error generating image list: %s", e)
        raise ManifestError(str(e)) from e
    logger.info("Generated %s with %d image(s)", output_path.name, len(images))
    return images


def generate_drive_image_list(settings: Settings, client: Optional[DriveClient] = None) -> List[str]:
    try:
        images = sync_drive_images(settings, client)
        output_path = write_manifest(images, get_manifest_path(settings))
    except (DriveError, OSError) as e:
        logger.error("Error generating image list from Google Drive: %s", e)
        raise ManifestError(str(e)) from e
    logger.info("Generated %s with %d image(s)", output_path.name, len(images))
    return images
