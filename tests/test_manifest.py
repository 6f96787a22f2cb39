import io
import json

import httpx
import pytest
from PIL import Image

from clients.drive_client import DriveClient
from clients.pinterest_client import PinterestError
from config import Settings, get_images_dir, get_manifest_path
from services.manifest import (
    ManifestError,
    generate_drive_image_list,
    generate_image_list,
    list_local_images,
    write_manifest,
)


def _settings(tmp_path, **overrides):
    values = {"public_dir": str(tmp_path / "public"), "public_pinterest_url": None}
    values.update(overrides)
    return Settings(**values)


def _png_bytes(size):
    out = io.BytesIO()
    Image.new("RGB", size, (200, 40, 40)).save(out, "PNG")
    return out.getvalue()


def test_default_paths_live_under_public_dir(tmp_path):
    s = _settings(tmp_path)
    assert get_images_dir(s) == tmp_path / "public" / "images"
    assert get_manifest_path(s) == tmp_path / "public" / "images-list.json"


def test_list_local_images_filters_by_extension(tmp_path):
    for name in ("b.JPG", "a.png", "notes.txt", "c.svg", "d.webp", ".hidden"):
        (tmp_path / name).write_bytes(b"x")
    (tmp_path / "nested.jpg").mkdir()
    assert list_local_images(tmp_path) == ["a.png", "b.JPG", "c.svg", "d.webp"]


def test_list_local_images_missing_dir_is_empty(tmp_path):
    assert list_local_images(tmp_path / "does-not-exist") == []


def test_write_manifest_creates_parent_and_indents(tmp_path):
    out = write_manifest(["a.jpg", "b.png"], tmp_path / "public" / "images-list.json")
    assert out.read_text(encoding="utf-8") == '[\n  "a.jpg",\n  "b.png"\n]'


def test_generate_image_list_from_local_directory(tmp_path):
    s = _settings(tmp_path)
    images_dir = get_images_dir(s)
    images_dir.mkdir(parents=True)
    (images_dir / "one.jpg").write_bytes(b"x")
    (images_dir / "two.gif").write_bytes(b"x")

    assert generate_image_list(s) == ["one.jpg", "two.gif"]
    assert json.loads(get_manifest_path(s).read_text()) == ["one.jpg", "two.gif"]


def test_generate_image_list_without_images_dir_writes_empty_manifest(tmp_path):
    s = _settings(tmp_path)
    assert generate_image_list(s) == []
    assert json.loads(get_manifest_path(s).read_text()) == []


class StubPinterest:
    def __init__(self, result=None, error=None):
        self.result = result or []
        self.error = error
        self.urls = []

    def fetch_images(self, url):
        self.urls.append(url)
        if self.error:
            raise self.error
        return self.result


def test_generate_image_list_prefers_pinterest(tmp_path):
    s = _settings(tmp_path, public_pinterest_url="https://www.pinterest.com/someone/board/")
    get_images_dir(s).mkdir(parents=True)
    (get_images_dir(s) / "local.jpg").write_bytes(b"x")
    stub = StubPinterest(result=["https://i.pinimg.com/originals/a/b/c.jpg"])

    assert generate_image_list(s, pinterest_client=stub) == ["https://i.pinimg.com/originals/a/b/c.jpg"]
    assert stub.urls == ["https://www.pinterest.com/someone/board/"]
    assert json.loads(get_manifest_path(s).read_text()) == ["https://i.pinimg.com/originals/a/b/c.jpg"]


def test_generate_image_list_pinterest_failure_raises(tmp_path):
    s = _settings(tmp_path, public_pinterest_url="https://www.pinterest.com/x/")
    with pytest.raises(ManifestError):
        generate_image_list(s, pinterest_client=StubPinterest(error=PinterestError("Failed to fetch Pinterest page: 403")))
    assert not get_manifest_path(s).exists()


def _drive_transport(files_by_page, contents):
    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == "/drive/v3/files":
            assert request.url.params["key"] == "k"
            token = request.url.params.get("pageToken", "")
            return httpx.Response(200, json=files_by_page[token])
        file_id = path.rsplit("/", 1)[-1]
        assert request.url.params["alt"] == "media"
        if file_id not in contents:
            return httpx.Response(404)
        return httpx.Response(200, content=contents[file_id])

    return httpx.MockTransport(handler)


def test_drive_sync_resizes_and_skips_failures(tmp_path):
    pages = {
        "": {
            "files": [
                {"id": "1", "name": "Wide Shot.png", "mimeType": "image/png"},
                {"id": "2", "name": "readme.txt", "mimeType": "text/plain"},
            ],
            "nextPageToken": "p2",
        },
        "p2": {
            "files": [
                {"id": "3", "name": "broken.jpg", "mimeType": "image/jpeg"},
                {"id": "4", "name": "gone.jpg", "mimeType": "image/jpeg"},
                {"id": "5", "name": "small.png", "mimeType": "image/png"},
            ]
        },
    }
    contents = {"1": _png_bytes((3200, 1000)), "3": b"not an image", "5": _png_bytes((40, 30))}
    s = _settings(tmp_path, google_api_key="k", google_drive_folder_id="folder", drive_max_dimension=800)
    client = DriveClient(api_key="k", transport=_drive_transport(pages, contents))

    assert generate_drive_image_list(s, client=client) == ["Wide Shot.jpg", "small.jpg"]

    images_dir = get_images_dir(s)
    with Image.open(images_dir / "Wide Shot.jpg") as img:
        assert img.format == "JPEG"
        assert max(img.size) == 800
    with Image.open(images_dir / "small.jpg") as img:
        assert img.size == (40, 30)
    assert json.loads(get_manifest_path(s).read_text()) == ["Wide Shot.jpg", "small.jpg"]


def test_drive_sync_requires_folder_and_key(tmp_path):
    with pytest.raises(ManifestError):
        generate_drive_image_list(_settings(tmp_path, google_api_key="k"))
    with pytest.raises(ManifestError):
        generate_drive_image_list(_settings(tmp_path, google_drive_folder_id="folder"))


def test_drive_api_error_raises_manifest_error(tmp_path):
    transport = httpx.MockTransport(lambda request: httpx.Response(403, text="forbidden"))
    s = _settings(tmp_path, google_api_key="k", google_drive_folder_id="folder")
    with pytest.raises(ManifestError):
        generate_drive_image_list(s, client=DriveClient(api_key="k", transport=transport))


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>quota exceeded</html>"),
        httpx.Response(200, json=["not", "an", "object"]),
    ],
)
def test_drive_unreadable_listing_raises_manifest_error(tmp_path, response):
    transport = httpx.MockTransport(lambda request: response)
    s = _settings(tmp_path, google_api_key="k", google_drive_folder_id="folder")
    with pytest.raises(ManifestError):
        generate_drive_image_list(s, client=DriveClient(api_key="k", transport=transport))


def test_drive_sync_renames_duplicate_stems(tmp_path):
    pages = {
        "": {
            "files": [
                {"id": "a1", "name": "sunset.png", "mimeType": "image/png"},
                {"id": "b2", "name": "sunset.jpg", "mimeType": "image/jpeg"},
            ]
        }
    }
    contents = {"a1": _png_bytes((20, 20)), "b2": _png_bytes((30, 20))}
    s = _settings(tmp_path, google_api_key="k", google_drive_folder_id="folder")
    client = DriveClient(api_key="k", transport=_drive_transport(pages, contents))

    assert generate_drive_image_list(s, client=client) == ["sunset.jpg", "sunset-b2.jpg"]
    with Image.open(get_images_dir(s) / "sunset-b2.jpg") as img:
        assert img.size == (30, 20)
