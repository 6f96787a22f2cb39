"""
Google Drive v3 client: list a folder's images and download their bytes.
"""
import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

import httpx
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

DRIVE_API_URL = "https://www.googleapis.com/drive/v3/files"


class DriveError(Exception):
    pass


@dataclass
class DriveFile:
    id: str
    name: str
    mime_type: str

    @property
    def stem(self) -> str:
        return Path(self.name).stem or self.id


class DriveClient:
    def __init__(
        self,
        api_key: Optional[str],
        timeout_seconds: int = 60,
        page_size: int = 200,
        base_url: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        if not api_key:
            raise DriveError("GOOGLE_API_KEY is not set")
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.page_size = page_size
        self.base_url = (base_url or DRIVE_API_URL).rstrip("/")
        self.transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self.timeout_seconds, transport=self.transport, follow_redirects=True)

    def iter_images(self, folder_id: str) -> Iterator[DriveFile]:
        """Yield every image file directly inside folder_id, following nextPageToken."""
        page_token = None
        with self._client() as client:
            while True:
                params = {
                    "q": f"'{folder_id}' in parents and trashed = false",
                    "fields": "nextPageToken,files(id,name,mimeType)",
                    "key": self.api_key,
                    "pageSize": self.page_size,
                    "orderBy": "name",
                }
                if page_token:
                    params["pageToken"] = page_token
                try:
                    r = client.get(self.base_url, params=params)
                except httpx.RequestError as e:
                    raise DriveError(f"Drive request failed: {e}") from e
                if r.status_code >= 400:
                    raise DriveError(f"Drive API error {r.status_code}: {r.text[:500]}")
                try:
                    payload = r.json()
                except ValueError as e:
                    raise DriveError(f"Drive returned invalid JSON: {e}") from e
                if not isinstance(payload, dict):
                    raise DriveError(f"Unexpected Drive response: {str(payload)[:200]}")
                for raw in payload.get("files", []):
                    mime_type = raw.get("mimeType", "")
                    if not mime_type.startswith("image/"):
                        continue
                    yield DriveFile(id=raw["id"], name=raw.get("name", raw["id"]), mime_type=mime_type)
                page_token = payload.get("nextPageToken")
                if not page_token:
                    break

    def list_images(self, folder_id: str) -> List[DriveFile]:
        files = list(self.iter_images(folder_id))
        logger.info("Discovered %d image(s) in Drive folder %s", len(files), folder_id)
        return files

    def download(self, file: DriveFile) -> bytes:
        url = f"{self.base_url}/{file.id}"
        try:
            with self._client() as client:
                r = client.get(url, params={"alt": "media", "key": self.api_key})
        except httpx.RequestError as e:
            raise DriveError(f"Download of {file.name} failed: {e}") from e
        if r.status_code >= 400:
            raise DriveError(f"Download of {file.name} failed with {r.status_code}")
        return r.content


def resize_to_jpeg(content: bytes, max_dimension: int, quality: int = 85) -> bytes:
    """Fit the image inside max_dimension x max_dimension (never upscaling) and re-encode as JPEG."""
    try:
        with Image.open(io.BytesIO(content)) as img:
            img = img.convert("RGB")
            img.thumbnail((max_dimension, max_dimension), Image.LANCZOS)
            out = io.BytesIO()
            img.save(out, "JPEG", quality=quality, optimize=True)
    except UnidentifiedImageError as e:
        raise DriveError(f"Unable to decode image: {e}") from e
    return out.getvalue()
